"""Document API endpoints.

Endpoints are thin. DocumentService handles the full lifecycle
(content saves, history, submission) as a deep module.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.document import DocumentCreate, DocumentResponse, ContentUpdate, SubmitRequest
from ..schemas.history import HistoryEntryResponse, SaveResponse
from ..services.document_service import DocumentService

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.post("", response_model=DocumentResponse, status_code=201)
def create_document(document: DocumentCreate, db: Session = Depends(get_db)):
    """Create a document with its baseline history entry."""
    return DocumentService(db).create_document(document)


@router.get("/{doc_id}", response_model=DocumentResponse)
def get_document(doc_id: str, db: Session = Depends(get_db)):
    """Get a document by ID."""
    return DocumentService(db).get_document_or_404(doc_id)


@router.put("/{doc_id}/content", response_model=SaveResponse)
def save_content(doc_id: str, update: ContentUpdate, db: Session = Depends(get_db)):
    """Save editor content; rapid saves are merged into the latest history entry."""
    doc, entry = DocumentService(db).save_content(doc_id, update)
    return SaveResponse(
        document=DocumentResponse.model_validate(doc),
        history_entry=HistoryEntryResponse.model_validate(entry) if entry else None,
    )


@router.post("/{doc_id}/submit", response_model=DocumentResponse)
def submit_document(
    doc_id: str,
    request: Optional[SubmitRequest] = None,
    db: Session = Depends(get_db),
):
    """Submit a document, optionally saving final content in the same call."""
    return DocumentService(db).submit(doc_id, request.content if request else None)


@router.post("/{doc_id}/unsubmit", response_model=DocumentResponse)
def unsubmit_document(doc_id: str, db: Session = Depends(get_db)):
    """Reopen a submitted document for editing."""
    return DocumentService(db).unsubmit(doc_id)
