"""
Structured logging for simulation runs.

Library modules log through ``logging.getLogger(__name__)`` and attach no
handlers of their own; records carry their fields in ``extra={"context": ...}``
and propagate normally. Scripts that want one JSON object per line call
``configure_logging()``.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

ROOT_LOGGER = "ateprobe"

logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())


class JsonlFormatter(logging.Formatter):
    """Render a record as a single JSON object, merging its ``context`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if isinstance(context, dict):
            payload.update(context)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: int = logging.INFO, stream: IO[str] | None = None) -> logging.Logger:
    """
    Send ``ateprobe`` records to ``stream`` (stderr by default) as JSON lines.

    Calling it again only changes the level; a second handler is never added.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    if not any(isinstance(h.formatter, JsonlFormatter) for h in logger.handlers):
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setFormatter(JsonlFormatter())
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    logger.log(level, event, extra={"context": fields})
