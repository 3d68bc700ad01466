"""History entry model."""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship
from ..database import Base


class HistoryEntry(Base):
    """One persisted change to a document's content.

    Exactly one of ``snapshot`` (full content) and ``patch`` (operations
    against the previous entry's content) is set.
    """

    __tablename__ = "document_history"
    __table_args__ = (
        Index("ix_document_history_owner_created", "owner_id", "created_at"),
    )

    # Primary key (also the tie-breaker when created_at collides)
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Foreign key to document
    owner_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)

    # Content: snapshot XOR patch
    snapshot = Column(JSON, nullable=True)
    patch = Column(JSON, nullable=True)
    # Consecutive patch entries since the last snapshot (0 for snapshots)
    patch_depth = Column(Integer, nullable=False, default=0)

    # Metrics from the caller's metrics function
    word_count = Column(Integer, nullable=False, default=0)
    char_count = Column(Integer, nullable=False, default=0)

    # Editor telemetry; summed when rapid saves are coalesced
    paste_word_count = Column(Integer, nullable=True, default=0)
    keystroke_count = Column(Integer, nullable=True, default=0)

    trigger = Column(String(50), nullable=False)  # baseline, autosave, submit, restore, ...

    # Set explicitly by the history service (bumped on coalesce)
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationship
    document = relationship("Document", back_populates="history")

    @property
    def is_snapshot(self) -> bool:
        return self.snapshot is not None
