"""Exceptions raised by the document history service.

Every error the API can return is a ``DocHistoryException`` subclass: it
carries its HTTP status and a stable ``ErrorCode`` that clients switch on,
and ``to_dict`` renders the JSON body.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Machine-readable codes returned in the ``error`` field."""

    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    DOCUMENT_SUBMITTED = "DOCUMENT_SUBMITTED"

    HISTORY_ENTRY_NOT_FOUND = "HISTORY_ENTRY_NOT_FOUND"
    HISTORY_ENTRY_UNAVAILABLE = "HISTORY_ENTRY_UNAVAILABLE"
    PATCH_APPLICATION_FAILED = "PATCH_APPLICATION_FAILED"

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class DocHistoryException(Exception):
    """
    Base class for service errors.

    Args:
        message: Human-readable description.
        error_code: Stable code for clients.
        status_code: HTTP status the API responds with.
        details: Extra JSON-serializable context (ids, statuses).
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error_code.value, "message": self.message, "details": self.details}


class DocumentNotFoundError(DocHistoryException):
    def __init__(self, doc_id: str):
        super().__init__(
            f"Document not found: {doc_id}",
            ErrorCode.DOCUMENT_NOT_FOUND,
            status_code=404,
            details={"doc_id": doc_id},
        )


class DocumentSubmittedError(DocHistoryException):
    """The document is submitted and read-only until it is unsubmitted."""

    def __init__(self, doc_id: str, message: str = "Cannot modify a submitted document"):
        super().__init__(message, ErrorCode.DOCUMENT_SUBMITTED, status_code=403, details={"doc_id": doc_id})


class HistoryEntryNotFoundError(DocHistoryException):
    def __init__(self, entry_id):
        super().__init__(
            f"History entry not found: {entry_id}",
            ErrorCode.HISTORY_ENTRY_NOT_FOUND,
            status_code=404,
            details={"entry_id": entry_id},
        )


class HistoryEntryUnavailableError(DocHistoryException):
    """Content at an entry cannot be rebuilt.

    ``details["status"]`` is the reconstruction status: ``not_found``,
    ``no_snapshot`` or ``broken_chain``.
    """

    def __init__(self, entry_id, status: str):
        super().__init__(
            f"Content for history entry {entry_id} is unavailable ({status})",
            ErrorCode.HISTORY_ENTRY_UNAVAILABLE,
            status_code=404,
            details={"entry_id": entry_id, "status": status},
        )


class PatchApplicationError(DocHistoryException):
    """A patch operation does not apply to the document it targets.

    ``details["operation"]`` holds the offending operation when known.
    """

    def __init__(self, message: str, operation: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            ErrorCode.PATCH_APPLICATION_FAILED,
            status_code=422,
            details={"operation": operation} if operation is not None else None,
        )


class ValidationError(DocHistoryException):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details={"field": field} if field else None,
        )
