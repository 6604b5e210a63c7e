"""Structured JSON logging for notionmark.

Records are emitted as single-line JSON objects::

    {"ts": "2026-01-01T12:00:00.123456+00:00", "level": "WARNING",
     "logger": "notionmark.parser", "message": "Markdown input truncated",
     "op": "parse", "length": 250000, "limit": 100000}

Structured fields travel in ``extra={"extra_fields": {...}}``;
:func:`log_event` builds that wrapper for you::

    from notionmark.observability.logger import get_logger, log_event

    log = get_logger("notionmark.renderer")
    log_event(log, logging.DEBUG, "Unsupported block", op="render", block_type="ai_block")
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys are ``ts`` (UTC ISO-8601), ``level``, ``logger`` and
    ``message``.  Fields from ``extra_fields`` are merged into the top
    level, and ``exception`` / ``stack_info`` appear when the record
    carries them.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        fields: dict[str, Any] | None = getattr(record, "extra_fields", None)
        if fields:
            entry.update(fields)

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


# One handler per configured logger name, so repeated get_logger calls
# never stack handlers.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = "notionmark",
    *,
    level: int | str = logging.WARNING,
    stream: Any | None = None,
) -> logging.Logger:
    """Get or create a logger with a :class:`StructuredFormatter` handler.

    Parameters
    ----------
    name:
        Logger name, ``"notionmark"`` or a dotted child such as
        ``"notionmark.transport"``.
    level:
        Minimum level, as an ``int`` or a case-insensitive name.  Only
        applied the first time *name* is configured.
    stream:
        Handler output stream.  Defaults to ``sys.stderr``.
    """
    logger = logging.getLogger(name)

    if name not in _configured_loggers:
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
        logger.setLevel(level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False

        _configured_loggers.add(name)

    return logger


def log_event(logger: logging.Logger, level: int, message: str, **fields: Any) -> None:
    """Log *message* at *level* with *fields* as structured JSON keys."""
    if logger.isEnabledFor(level):
        logger.log(level, message, extra={"extra_fields": fields})
