"""
Logging utilities for the merged blocks checker.

Report lines (coverage, holes, fork warnings) are written to the check's
output stream. The standard logging tree carries diagnostics only: walk
decisions, ignored keys, early stops. Operators running the check from
schedulers usually want those as single-line JSON, so both a JSON and a
plain text setup are provided.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

LOGGER_NAMESPACE = "merged_blocks_checker"

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# LogRecord attributes that are never treated as extra context
_RECORD_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "taskName", "message",
    }
)


class StructuredJsonFormatter(logging.Formatter):
    """Formats records as single-line JSON objects.

    Fields: timestamp (UTC, ISO 8601), level, logger, message, exception when
    present, plus any ``extra`` context such as ``store_url`` or
    ``block_range``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                log_obj[key] = value
            except (TypeError, ValueError):
                log_obj[key] = str(value)

        return json.dumps(log_obj, default=str)


def configure_logging(
    level: int = logging.WARNING,
    json_format: bool = False,
    stream: Any = None,
) -> logging.Logger:
    """Configure the checker's logger namespace.

    Args:
        level: Logging level for the ``merged_blocks_checker`` loggers
        json_format: Emit JSON lines instead of plain text
        stream: Destination stream (default: stderr, keeping stdout for the report)

    Returns:
        The configured namespace logger
    """
    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    if json_format:
        handler.setFormatter(StructuredJsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    return logger


def get_checker_logger(name: str) -> logging.Logger:
    """Get a logger named ``merged_blocks_checker.{name}``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


class CheckLoggerAdapter(logging.LoggerAdapter):
    """Adds the check's context (store URL, bundle size) to every record."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra", {}))
        kwargs["extra"] = extra
        return msg, kwargs
