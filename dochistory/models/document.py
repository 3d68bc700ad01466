"""Document model."""

from sqlalchemy import Boolean, Column, Index, String, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Document(Base):
    """Student-authored rich-text documents (assignment work, lesson plans)."""

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_owner_id", "owner_id"),
        Index("ix_documents_updated_at", "updated_at"),
    )

    # Primary key
    id = Column(String(36), primary_key=True)  # uuid4 hex string

    # Author of the document (opaque external user id)
    owner_id = Column(String(100), nullable=False)
    title = Column(String(255), nullable=False, default="")

    # Tiptap JSON tree: {"type": "doc", "content": [...]}
    content = Column(JSON, nullable=False)

    # Submission state; submitted documents are read-only
    is_submitted = Column(Boolean, nullable=False, default=False)
    submitted_at = Column(DateTime(timezone=True), nullable=True, default=None)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    history = relationship(
        "HistoryEntry",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="HistoryEntry.created_at",
    )
