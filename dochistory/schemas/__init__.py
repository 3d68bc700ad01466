"""Pydantic schemas for request/response validation."""

from .authenticity import AuthenticityFlag, AuthenticityResult
from .document import (
    DocumentCreate,
    ContentUpdate,
    SubmitRequest,
    RestoreRequest,
    DocumentResponse,
)
from .history import (
    HistoryEntryResponse,
    HistoryListItem,
    HistoryListResponse,
    HistoryContentResponse,
    HistoryTimelineResponse,
    SaveResponse,
)

__all__ = [
    "AuthenticityFlag",
    "AuthenticityResult",
    "DocumentCreate",
    "ContentUpdate",
    "SubmitRequest",
    "RestoreRequest",
    "DocumentResponse",
    "HistoryEntryResponse",
    "HistoryListItem",
    "HistoryListResponse",
    "HistoryContentResponse",
    "HistoryTimelineResponse",
    "SaveResponse",
]
