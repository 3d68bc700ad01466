"""Database models."""

from .document import Document
from .history import HistoryEntry

__all__ = ["Document", "HistoryEntry"]
