"""Per-request id, timing headers and access log.

The request id comes from an incoming ``X-Request-ID`` header or is
generated, is visible to every log record emitted while the request runs, and
is echoed back along with ``X-Response-Time``.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..core.logging_config import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Load balancer health checks would drown the access log.
_UNLOGGED_PATHS = frozenset({"/health"})


def _new_request_id() -> str:
    return uuid.uuid4().hex[:16]


class RequestContextMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or _new_request_id()
        token = request_id_var.set(request_id)
        started = time.monotonic()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        elapsed_ms = round((time.monotonic() - started) * 1000, 1)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{elapsed_ms}ms"

        path = request.url.path
        if path not in _UNLOGGED_PATHS:
            logger.info(
                f"{request.method} {path} {response.status_code} {elapsed_ms}ms",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": path,
                    "status_code": response.status_code,
                    "duration_ms": elapsed_ms,
                },
            )
        return response
