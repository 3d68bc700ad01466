"""Document history API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.authenticity import AuthenticityResult
from ..schemas.document import DocumentResponse, RestoreRequest
from ..schemas.history import (
    DayGroupResponse,
    HistoryContentResponse,
    HistoryEntryResponse,
    HistoryListItem,
    HistoryListResponse,
    HistoryTimelineResponse,
    HourGroupResponse,
)
from ..services.document_service import DocumentService
from ..services.history_graph import EntryWithDiff

router = APIRouter(prefix="/api/documents/{doc_id}", tags=["history"])


def _list_item(item: EntryWithDiff) -> HistoryListItem:
    return HistoryListItem(
        **HistoryEntryResponse.model_validate(item.entry).model_dump(),
        char_diff=item.char_diff,
    )


@router.get("/history", response_model=HistoryListResponse)
def list_history(doc_id: str, db: Session = Depends(get_db)):
    """List history entry metadata, newest first."""
    items = [_list_item(item) for item in DocumentService(db).list_history(doc_id)]
    return HistoryListResponse(doc_id=doc_id, history=items)


@router.get("/history/timeline", response_model=HistoryTimelineResponse)
def get_history_timeline(doc_id: str, db: Session = Depends(get_db)):
    """History grouped by local day (newest first), then hour (oldest first)."""
    service = DocumentService(db)
    days = [
        DayGroupResponse(
            date=day.date,
            hours=[
                HourGroupResponse(hour=group.hour, label=group.label, entries=[_list_item(i) for i in group.entries])
                for group in day.hours
            ],
        )
        for day in service.history_timeline(doc_id)
    ]
    return HistoryTimelineResponse(doc_id=doc_id, timezone=service.history_timezone, days=days)


@router.get("/history/{entry_id}/content", response_model=HistoryContentResponse)
def get_history_content(doc_id: str, entry_id: int, db: Session = Depends(get_db)):
    """Reconstruct the document content at one history entry."""
    content = DocumentService(db).preview_entry(doc_id, entry_id)
    return HistoryContentResponse(entry_id=entry_id, content=content)


@router.post("/restore", response_model=DocumentResponse)
def restore_document(doc_id: str, request: RestoreRequest, db: Session = Depends(get_db)):
    """Restore the document to the content of a history entry."""
    return DocumentService(db).restore(doc_id, request.history_id)


@router.get("/authenticity", response_model=AuthenticityResult)
def get_authenticity(doc_id: str, db: Session = Depends(get_db)):
    """Authenticity score (0-100, null when there is not enough data) and flags."""
    return DocumentService(db).authenticity(doc_id)
