"""Structured JSON logger for listkit.

Every log record is emitted as a single-line JSON object so that update
cycles can be followed in a log aggregation pipeline without additional
parsing.

Typical structured output::

    {"ts": "2025-07-01T12:00:00.123456+00:00", "level": "INFO",
     "logger": "listkit.reconciler", "message": "apply cycle committed",
     "op": "apply", "ops": 4, "sections": 2, "items": 17}

Usage::

    from listkit.observability import get_logger

    log = get_logger()
    log.info("snapshot queued", extra={"extra_fields": {"queued": 1}})

    # Or a child logger for a sub-module
    log = get_logger("listkit.planner")
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys:

    * ``ts`` -- ISO-8601 UTC timestamp
    * ``level`` -- log level name
    * ``logger`` -- logger name
    * ``message`` -- formatted log message

    Structured fields passed via ``extra={"extra_fields": {...}}`` are
    merged into the top-level object.  ``exc_info`` and ``stack_info`` are
    serialised when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(
            record, "extra_fields", None
        )
        if extra_fields is not None:
            log_entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_entry["stack_info"] = self.formatStack(record.stack_info)

        # Item values and section identifiers are arbitrary hashables.
        return json.dumps(log_entry, default=repr)


# One handler per logger name so that ``get_logger`` stays idempotent.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = "listkit",
    *,
    level: int | str = logging.WARNING,
    stream: Any | None = None,
) -> logging.Logger:
    """Get or create a structured JSON logger.

    Parameters
    ----------
    name:
        Logger name.  Defaults to ``"listkit"``.
    level:
        Minimum log level, as an ``int`` or a case-insensitive string.
        Defaults to ``WARNING``: list updates run at UI frequency and the
        per-cycle ``DEBUG``/``INFO`` lines are opt-in.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        A logger with a :class:`StructuredFormatter` handler attached.
        Repeated calls with the same *name* return the same logger and do
        **not** add duplicate handlers.
    """
    logger = logging.getLogger(name)

    if name not in _configured_loggers:
        resolved_level = (
            logging.getLevelName(level.upper())
            if isinstance(level, str)
            else level
        )
        logger.setLevel(resolved_level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)

        logger.propagate = False

        _configured_loggers.add(name)

    return logger
