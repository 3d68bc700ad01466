"""FastAPI application for the document history service."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from .api import documents_router, history_router
from .core.config import ConfigurationError, settings
from .core.logging_config import RedactingFilter, setup_logging
from .database import DATABASE_URL, get_db, init_db
from .exceptions import DocHistoryException
from .middleware.exception_handler import dochistory_exception_handler, unhandled_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .services.document_service import DocumentService

API_NAME = "Document History API"
API_VERSION = "1.0.0"

setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)

_started_at = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"Refusing to start: {e}")
        raise SystemExit(1) from e

    init_db()
    logger.info(
        "Service ready",
        extra={
            "environment": settings.environment.value,
            "database": RedactingFilter.redact(DATABASE_URL),
            "history_min_interval_ms": settings.history_min_interval_ms,
        },
    )
    yield


app = FastAPI(
    title=API_NAME,
    description=(
        "Versioned edit history for student documents: autosave with "
        "rate-limited coalescing, point-in-time preview and restore, and an "
        "authenticity report derived from typing speed."
    ),
    version=API_VERSION,
    lifespan=lifespan,
)

# Added last runs first: CORS wraps the request context middleware.
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

app.add_exception_handler(DocHistoryException, dochistory_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(documents_router)
app.include_router(history_router)


@app.get("/")
def root():
    return {"name": API_NAME, "version": API_VERSION, "status": "running"}


def _check_database(db: Session):
    """(ok, document_count); never raises."""
    try:
        db.execute(text("SELECT 1"))
        return True, DocumentService(db).count_documents()
    except Exception:
        logger.warning("Health check database query failed", exc_info=True)
        return False, 0


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Liveness and database status. Reports ``degraded`` instead of failing."""
    db_ok, document_count = _check_database(db)
    return {
        "status": "healthy" if db_ok else "degraded",
        "db": "ok" if db_ok else "error",
        "uptime_seconds": round(time.monotonic() - _started_at),
        "version": API_VERSION,
        "document_count": document_count,
    }
