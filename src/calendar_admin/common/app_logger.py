"""Logging setup shared by the app and the scripts.

Log calls pass structured data as ``extra={"context": {...}}``; the formatter
appends it as JSON after the message with sensitive keys redacted.
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Mapping, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER_NAME = "calendar_admin"
REDACTED = "***REDACTED***"

_SENSITIVE_KEY = re.compile(r"password|token|secret|authorization|cookie|auth|session|csrf", re.IGNORECASE)


def redact(data: Any) -> Any:
    """Return a copy of ``data`` with values of sensitive-looking keys masked."""
    if isinstance(data, Mapping):
        out = {}
        for key, value in data.items():
            if _SENSITIVE_KEY.search(str(key)):
                out[key] = REDACTED
            else:
                out[key] = redact(value)
        return out
    if isinstance(data, (list, tuple)):
        return [redact(v) for v in data]
    return data


def mask(value: Optional[str], keep: int = 3) -> str:
    """Partial value for logs: 'alice@example.com' -> 'ali***'."""
    if not value:
        return "-"
    return f"{value[:keep]}***"


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = getattr(record, "context", None)
        if context:
            base = f"{base} {json.dumps(redact(context), default=str, ensure_ascii=False)}"
        return base


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(resolved)

    # Avoid duplicate console handlers when the app factory runs more than once
    if not any(getattr(h, "_calendar_admin", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(ContextFormatter(LOG_FORMAT))
        handler._calendar_admin = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    for h in logger.handlers:
        h.setLevel(resolved)

    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    base = logging.getLogger(ROOT_LOGGER_NAME)
    if not name:
        return base
    if name.startswith(ROOT_LOGGER_NAME + "."):
        name = name[len(ROOT_LOGGER_NAME) + 1:]
    return base.getChild(name)
