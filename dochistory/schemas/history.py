"""History entry schemas."""

from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, List, Optional

from .document import DocumentResponse


class HistoryEntryResponse(BaseModel):
    """History entry metadata (content is fetched separately)."""
    id: int
    owner_id: str
    is_snapshot: bool
    word_count: int
    char_count: int
    paste_word_count: Optional[int] = None
    keystroke_count: Optional[int] = None
    trigger: str
    created_at: datetime

    class Config:
        from_attributes = True


class HistoryListItem(HistoryEntryResponse):
    """History entry with its character change versus the previous entry."""
    char_diff: int


class HistoryContentResponse(BaseModel):
    """Reconstructed content at one history entry."""
    entry_id: int
    content: Dict[str, Any]


class SaveResponse(BaseModel):
    """Result of a content save; history_entry is None when nothing changed."""
    document: DocumentResponse
    history_entry: Optional[HistoryEntryResponse] = None


class HistoryListResponse(BaseModel):
    doc_id: str
    history: List[HistoryListItem]


class HourGroupResponse(BaseModel):
    hour: int
    label: str
    entries: List[HistoryListItem]


class DayGroupResponse(BaseModel):
    date: str
    hours: List[HourGroupResponse]


class HistoryTimelineResponse(BaseModel):
    """History grouped by local day (newest first) and hour (oldest first)."""
    doc_id: str
    timezone: str
    days: List[DayGroupResponse]
