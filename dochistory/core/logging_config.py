"""Logging setup for the document history service.

``json`` format writes one object per line for log shippers; ``text`` is for
local development. Every record emitted while a request is served carries the
request id set by the request context middleware.
"""

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

# Snapshots and patches can be passed as ``extra``; keep log lines bounded.
MAX_FIELD_CHARS = 2000

_STANDARD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

# Third-party loggers that are too chatty at INFO.
_QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


def _bounded(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        if isinstance(value, str) and len(value) > MAX_FIELD_CHARS:
            return value[:MAX_FIELD_CHARS] + "...[truncated]"
        return value
    text = json.dumps(value, default=str)
    if len(text) > MAX_FIELD_CHARS:
        return text[:MAX_FIELD_CHARS] + "...[truncated]"
    return value


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record; ``extra`` fields become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id

        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS or key in entry:
                continue
            entry[key] = _bounded(value)

        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class RedactingFilter(logging.Filter):
    """Mask credentials in messages and tracebacks before they are written.

    Covers passwords embedded in database URLs, bearer tokens and
    ``password=...`` style pairs.
    """

    PATTERNS = (
        re.compile(r"(://[^:/@\s]+:)[^@\s]+(?=@)"),
        re.compile(r"(?i)(bearer\s+)[a-zA-Z0-9._\-]{20,}"),
        re.compile(r"(?i)((?:secret|password|token|authorization)[=:]\s*)[^\s,'\"]{8,}"),
    )
    MASK = "***REDACTED***"

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self.redact(str(record.msg))
        if record.exc_text:
            record.exc_text = self.redact(record.exc_text)
        return True

    @classmethod
    def redact(cls, text: str) -> str:
        for pattern in cls.PATTERNS:
            text = pattern.sub(lambda m: m.group(1) + cls.MASK, text)
        return text


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        log_level: Standard level name; INFO when omitted.
        log_format: ``"json"`` (default) or ``"text"``.
    """
    level = (log_level or "INFO").upper()
    fmt = (log_format or "json").lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RedactingFilter())
    if fmt == "json":
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    logging.getLogger(__name__).debug("Logging configured", extra={"level": level, "format": fmt})
