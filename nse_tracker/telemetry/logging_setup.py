"""Centralized logging configuration for the tracker."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

# LogRecord attributes that are already represented (or are noise) in the payload.
_RESERVED_ATTRS = frozenset(
    {
        "args",
        "msg",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "levelname",
        "exc_info",
    }
)


class JsonFormatter(logging.Formatter):
    """Serialize LogRecord fields as JSON lines.

    Anything passed through ``extra={...}`` that is JSON-serializable ends up
    as a top-level key next to timestamp/level/name/message. ``context`` holds
    process-wide fields (service name, polled index) stamped on every line;
    per-record extras with the same key win.
    """

    def __init__(self, context: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__()
        self._context = dict(context or {})

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        payload.update(self._context)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key.startswith("_") or key in _RESERVED_ATTRS:
                continue
            if key in payload and key not in self._context:
                continue
            try:
                json.dumps({key: value})
            except TypeError:
                continue
            payload[key] = value
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    *,
    log_dir: Path,
    level: str = "INFO",
    logger_name: str = "nse_tracker",
    service: str = "nse-tracker",
    index_name: Optional[str] = None,
) -> Logger:
    """Configure the package logger with a JSON rotating file handler.

    Module loggers (``nse_tracker.data_feed.session`` etc.) propagate into the
    logger configured here. Every line carries ``service`` and, when given,
    the polled ``index``.
    """

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "tracker_current.jsonl"
    handler = TimedRotatingFileHandler(
        log_file,
        when="midnight",
        backupCount=14,
        encoding="utf-8",
    )
    context: Dict[str, Any] = {"service": service}
    if index_name:
        context["index"] = index_name
    handler.setFormatter(JsonFormatter(context))

    logger = logging.getLogger(logger_name)
    logger.setLevel(level.upper())
    logger.handlers.clear()
    logger.addHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(JsonFormatter(context))
    logger.addHandler(stream_handler)

    logger.propagate = False
    logger.debug("JSON logging configured", extra={"log_file": str(log_file)})
    return logger


__all__ = ["configure_logging", "JsonFormatter"]
