"""Shared helpers for reading history entries.

History entries reach the pure analysis functions in several shapes: ORM
rows, API payload dicts, or test doubles. These helpers read them uniformly.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping


def entry_field(entry: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping or an attribute-bearing object."""
    if isinstance(entry, Mapping):
        return entry.get(name, default)
    return getattr(entry, name, default)


def to_utc(value: Any) -> datetime:
    """Normalize a timestamp to an aware UTC datetime.

    Accepts aware or naive datetimes (naive ones are taken as UTC, which is
    how SQLite hands back timezone-aware columns) and ISO-8601 strings,
    including the ``Z`` suffix.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if not isinstance(value, datetime):
        raise TypeError(f"Expected datetime or ISO string, got {type(value).__name__}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed_ms(earlier: Any, later: Any) -> float:
    return (to_utc(later) - to_utc(earlier)).total_seconds() * 1000


def _sort_key(indexed: tuple):
    position, entry = indexed
    entry_id = entry_field(entry, "id")
    # Integer ids break created_at ties; anything else keeps input order.
    tie = entry_id if isinstance(entry_id, int) and not isinstance(entry_id, bool) else position
    return (to_utc(entry_field(entry, "created_at")), tie, position)


def sort_chronologically(entries: Iterable[Any]) -> List[Any]:
    """Oldest first by ``created_at``; ties broken by id, then input order."""
    return [entry for _, entry in sorted(enumerate(entries), key=_sort_key)]
