"""Data access repositories."""

from .base import BaseRepository
from .document_repository import DocumentRepository
from .history_repository import HistoryRepository, HistoryStore
from .memory_history_store import InMemoryHistoryStore

__all__ = [
    "BaseRepository",
    "DocumentRepository",
    "HistoryRepository",
    "HistoryStore",
    "InMemoryHistoryStore",
]
