# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Structured JSON logging for allocation sessions.

Each record becomes one JSON line on stdout. Session and assignment context
passed through `extra=` is lifted into top-level keys so a session's history
can be filtered by id.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from allocation.core.config import settings

CONTEXT_FIELDS = ("session_id", "member_id", "role_id", "chair_id", "pending_id")


class JSONFormatter(logging.Formatter):
    """One JSON object per record: service identity, level, message and context."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            entry["error_type"] = type(exc).__name__
            entry["error"] = str(exc)
        return json.dumps(entry, default=str)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger writing JSON lines to stdout; the handler is attached once per name."""
    logger = logging.getLogger(name or settings.SERVICE_NAME)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    level = logging.getLevelName(settings.LOG_LEVEL)
    logger.setLevel(level if isinstance(level, int) else logging.INFO)
    logger.propagate = False
    return logger
