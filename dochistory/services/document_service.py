"""Document service: deep module for the document lifecycle.

Owns creating, saving, submitting and restoring documents, and every read of
their history. Each public write keeps the document row and its history in
one transaction; callers never touch the history engine directly.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..exceptions import (
    DocumentNotFoundError,
    DocumentSubmittedError,
    HistoryEntryUnavailableError,
    ValidationError,
)
from ..models import Document, HistoryEntry
from ..repositories import DocumentRepository, HistoryRepository
from ..schemas.authenticity import AuthenticityResult
from ..schemas.document import ContentUpdate, DocumentCreate
from .authenticity import analyze_authenticity
from .content_utils import MetricsFn, build_metrics, is_empty, with_telemetry
from .history_graph import DayGroup, EntryWithDiff, compute_char_diffs, group_by_date
from .reconstruction import reconstruct
from .versioned_history import BASELINE_TRIGGER, RESTORE_TRIGGER, insert_baseline_history, persist_history

logger = logging.getLogger(__name__)

AUTOSAVE_TRIGGER = "autosave"

SAVE_TRIGGERS = frozenset({AUTOSAVE_TRIGGER, "blur"})
"""Triggers an editor save may carry; the others are written by the service."""


class DocumentService:
    """Deep module for document operations.

    Args:
        db: Request-scoped session; the service commits.
        clock: Returns the current aware UTC time (injectable for tests).
        metrics: Metrics function for history rows.
        history_min_interval_ms: Coalescing window; defaults to settings.
    """

    def __init__(
        self,
        db: Session,
        clock: Optional[Callable[[], datetime]] = None,
        metrics: MetricsFn = build_metrics,
        history_min_interval_ms: Optional[int] = None,
    ):
        self.db = db
        self.doc_repo = DocumentRepository(db)
        self.history_repo = HistoryRepository(db)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.metrics = metrics
        if history_min_interval_ms is None:
            history_min_interval_ms = settings.history_min_interval_ms
        self.history_min_interval_ms = history_min_interval_ms
        self.history_timezone = settings.history_timezone

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def create_document(self, data: DocumentCreate) -> Document:
        """Create a document and its baseline history entry."""
        doc = self.doc_repo.create(data.owner_id, data.title, data.content)
        insert_baseline_history(
            self.history_repo, doc.id, data.content, BASELINE_TRIGGER, self.metrics, now=self.clock()
        )
        self.db.commit()
        self.db.refresh(doc)
        logger.info("Document created", extra={"doc_id": doc.id, "owner_id": doc.owner_id})
        return doc

    def get_document(self, doc_id: str) -> Optional[Document]:
        """Get document by ID. Returns None if not found (caller decides on 404)."""
        return self.doc_repo.get_by_id_optional(doc_id)

    def get_document_or_404(self, doc_id: str) -> Document:
        return self.doc_repo.get_by_id(doc_id)

    def count_documents(self) -> int:
        return self.doc_repo.count()

    def _write_content(self, doc: Document, content: dict, trigger: str, metrics: MetricsFn) -> Optional[HistoryEntry]:
        """Persist history for a content change and update the document. No commit."""
        entry = persist_history(
            self.history_repo,
            doc.id,
            doc.content,
            content,
            trigger,
            self.history_min_interval_ms,
            metrics,
            now=self.clock(),
        )
        if entry is not None:
            self.doc_repo.set_content(doc.id, content)
        return entry

    def save_content(self, doc_id: str, update: ContentUpdate) -> Tuple[Document, Optional[HistoryEntry]]:
        """Save editor content. Returns (document, history entry or None if unchanged)."""
        doc = self.doc_repo.get_by_id(doc_id)
        if doc.is_submitted:
            raise DocumentSubmittedError(doc_id)
        if update.trigger not in SAVE_TRIGGERS:
            raise ValidationError("Invalid trigger", field="trigger")

        metrics = with_telemetry(self.metrics, update.paste_word_count, update.keystroke_count)
        entry = self._write_content(doc, update.content, update.trigger, metrics)
        self.db.commit()
        self.db.refresh(doc)
        return doc, entry

    def submit(self, doc_id: str, content: Optional[dict] = None) -> Document:
        """Mark a document submitted, saving final content first when given.

        The final content is recorded as an ordinary autosave so the typing that
        produced it stays scored.

        Raises:
            ValidationError: The document (or the final content) is empty.
        """
        doc = self.doc_repo.get_by_id(doc_id)
        if doc.is_submitted:
            raise DocumentSubmittedError(doc_id, "Document is already submitted")
        if is_empty(content if content is not None else doc.content):
            raise ValidationError("No work to submit. Please write something first.")

        if content is not None:
            self._write_content(doc, content, AUTOSAVE_TRIGGER, self.metrics)

        doc.is_submitted = True
        doc.submitted_at = self.clock()
        self.db.commit()
        self.db.refresh(doc)
        logger.info("Document submitted", extra={"doc_id": doc_id})
        return doc

    def unsubmit(self, doc_id: str) -> Document:
        """Reopen a submitted document for editing. Idempotent."""
        doc = self.doc_repo.get_by_id(doc_id)
        doc.is_submitted = False
        doc.submitted_at = None
        self.db.commit()
        self.db.refresh(doc)
        return doc

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def _history(self, doc_id: str) -> List[HistoryEntry]:
        if self.doc_repo.get_by_id_optional(doc_id) is None:
            raise DocumentNotFoundError(doc_id)
        return self.history_repo.list_for_owner(doc_id)

    def list_history(self, doc_id: str) -> List[EntryWithDiff]:
        """History with per-entry char diffs, newest first."""
        return list(reversed(compute_char_diffs(self._history(doc_id))))

    def history_timeline(self, doc_id: str) -> List[DayGroup]:
        """History grouped by local day and hour in the configured timezone."""
        return group_by_date(compute_char_diffs(self._history(doc_id)), self.history_timezone)

    def preview_entry(self, doc_id: str, entry_id: int) -> dict:
        """Content as it was at ``entry_id``.

        Raises:
            HistoryEntryUnavailableError: Entry missing, or its content cannot
                be rebuilt; details carry the reconstruction status.
        """
        result = reconstruct(self._history(doc_id), entry_id)
        if not result.ok:
            raise HistoryEntryUnavailableError(entry_id, result.status.value)
        return result.content

    def restore(self, doc_id: str, entry_id: int) -> Document:
        """Roll content back to a history entry, recording a restore entry."""
        doc = self.doc_repo.get_by_id(doc_id)
        if doc.is_submitted:
            raise DocumentSubmittedError(doc_id, "Cannot restore a submitted document")

        content = self.preview_entry(doc_id, entry_id)
        self._write_content(doc, content, RESTORE_TRIGGER, self.metrics)
        self.db.commit()
        self.db.refresh(doc)
        logger.info("Document restored", extra={"doc_id": doc_id, "entry_id": entry_id})
        return doc

    def authenticity(self, doc_id: str) -> AuthenticityResult:
        """Authenticity score and flags computed from the document's history."""
        return analyze_authenticity(self._history(doc_id))
