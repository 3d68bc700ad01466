"""History entry storage: the narrow store interface and its SQLAlchemy implementation."""

from typing import Any, List, Optional, Protocol

from sqlalchemy.orm import Session

from ..models import HistoryEntry
from ..exceptions import HistoryEntryNotFoundError
from .base import BaseRepository


class HistoryStore(Protocol):
    """Everything the versioned history engine needs from storage.

    Implementations: HistoryRepository (SQLAlchemy) and
    InMemoryHistoryStore (tests, scripts).
    """

    def insert(self, owner_id: str, **fields: Any) -> HistoryEntry:
        """Insert a new history row for ``owner_id`` and return it."""
        ...

    def update(self, entry_id: int, **fields: Any) -> HistoryEntry:
        """Overwrite ``fields`` on an existing row and return it."""
        ...

    def get_latest(self, owner_id: str) -> Optional[HistoryEntry]:
        """Most recent row by created_at (ties: highest id), or None."""
        ...

    def list_for_owner(self, owner_id: str) -> List[HistoryEntry]:
        """All rows for ``owner_id``, oldest first."""
        ...


class HistoryRepository(BaseRepository[HistoryEntry]):
    """Repository for document history rows.

    Writes are flushed, not committed; the calling service owns the
    transaction.
    """

    model_class = HistoryEntry
    not_found_error = HistoryEntryNotFoundError

    def __init__(self, db: Session):
        super().__init__(db)

    def insert(self, owner_id: str, **fields: Any) -> HistoryEntry:
        entry = HistoryEntry(owner_id=owner_id, **fields)
        self.db.add(entry)
        self.db.flush()
        self.db.refresh(entry)
        return entry

    def update(self, entry_id: int, **fields: Any) -> HistoryEntry:
        entry = self.get_by_id(entry_id)
        for key, value in fields.items():
            setattr(entry, key, value)
        self.db.flush()
        self.db.refresh(entry)
        return entry

    def get_latest(self, owner_id: str) -> Optional[HistoryEntry]:
        return self.db.query(HistoryEntry).filter(
            HistoryEntry.owner_id == owner_id
        ).order_by(HistoryEntry.created_at.desc(), HistoryEntry.id.desc()).first()

    def list_for_owner(self, owner_id: str) -> List[HistoryEntry]:
        return self.db.query(HistoryEntry).filter(
            HistoryEntry.owner_id == owner_id
        ).order_by(HistoryEntry.created_at.asc(), HistoryEntry.id.asc()).all()
