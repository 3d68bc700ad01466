"""Map service exceptions to JSON error bodies."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from ..exceptions import DocHistoryException, ErrorCode

logger = logging.getLogger(__name__)


async def dochistory_exception_handler(request: Request, exc: DocHistoryException) -> JSONResponse:
    """Return ``exc.to_dict()`` with its status code.

    Client errors (a missing document, an edit to a submitted one) are routine
    and logged at WARNING; server-side failures at ERROR.
    """
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        f"{request.method} {request.url.path} -> {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "status_code": exc.status_code,
            "details": exc.details,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for errors nothing else handled: log the traceback, hide it from the client."""
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"error": ErrorCode.INTERNAL_ERROR.value, "message": "Internal server error", "details": {}},
    )
