"""In-memory HistoryStore backed by a dict.

Rows are transient HistoryEntry instances (never attached to a session), so
code written against the SQLAlchemy repository sees the same attributes.
"""

import copy
import itertools
from typing import Any, Dict, List, Optional

from ..models import HistoryEntry
from ..exceptions import HistoryEntryNotFoundError


class InMemoryHistoryStore:
    """Dict-backed history store with write counters for assertions."""

    def __init__(self):
        self._rows: Dict[int, HistoryEntry] = {}
        self._ids = itertools.count(1)
        self.inserts = 0
        self.updates = 0

    def insert(self, owner_id: str, **fields: Any) -> HistoryEntry:
        entry = HistoryEntry(id=next(self._ids), owner_id=owner_id, **copy.deepcopy(fields))
        self._rows[entry.id] = entry
        self.inserts += 1
        return entry

    def update(self, entry_id: int, **fields: Any) -> HistoryEntry:
        entry = self._rows.get(entry_id)
        if entry is None:
            raise HistoryEntryNotFoundError(entry_id)
        for key, value in copy.deepcopy(fields).items():
            setattr(entry, key, value)
        self.updates += 1
        return entry

    def get_latest(self, owner_id: str) -> Optional[HistoryEntry]:
        rows = self.list_for_owner(owner_id)
        return rows[-1] if rows else None

    def list_for_owner(self, owner_id: str) -> List[HistoryEntry]:
        rows = [row for row in self._rows.values() if row.owner_id == owner_id]
        return sorted(rows, key=lambda row: (row.created_at, row.id))
