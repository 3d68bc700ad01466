"""API routes."""

from .documents import router as documents_router
from .history import router as history_router

__all__ = [
    "documents_router",
    "history_router",
]
