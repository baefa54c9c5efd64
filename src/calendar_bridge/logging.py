"""Diagnostic logging for calendar-bridge.

All module loggers live under the ``calendar_bridge`` logger. ``setup_logging``
attaches a rotating handler that writes debug.log lines of the form::

    [2024-01-01T14:00:00.000Z] [WARN] AppleScript reported a warning | Details: {"operation": "get_events"}

Structured details are passed through ``extra={"details": {...}}``.

Usage:
    from calendar_bridge.logging import setup_logging

    # Initialize once at startup
    setup_logging(log_file=settings.debug_log_path)
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "calendar_bridge"

# Default rotation settings
DEFAULT_MAX_BYTES = 5 * 1024 * 1024  # 5MB
DEFAULT_BACKUP_COUNT = 3

_LEVEL_LABELS = {
    logging.DEBUG: "INFO",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}

# Module-level state
_handler: logging.Handler | None = None
_initialized: bool = False


def iso_timestamp(moment: datetime | None = None) -> str:
    """UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class DebugLogFormatter(logging.Formatter):
    """Formats records as ``[ts] [LEVEL] message | Details: {json}``."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = iso_timestamp(datetime.fromtimestamp(record.created, timezone.utc))
        label = _LEVEL_LABELS.get(record.levelno, "INFO")
        line = f"[{timestamp}] [{label}] {record.getMessage()}"

        details = getattr(record, "details", None)
        if details is not None:
            line += f" | Details: {json.dumps(details, default=str, ensure_ascii=False)}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class DebugLogHandler(RotatingFileHandler):
    """Rotating file handler whose write failures are dropped."""

    def handleError(self, record: logging.LogRecord) -> None:
        # debug.log is best-effort; a failed write must not surface anywhere.
        return None


def setup_logging(
    log_file: Path | None = None,
    log_level: str = "INFO",
    max_bytes: int | None = None,
    backup_count: int | None = None,
) -> None:
    """Initialize the logging system.

    Args:
        log_file: Path of debug.log (no file output when None)
        log_level: Minimum log level (default: INFO)
        max_bytes: Max size of debug.log before rotation (default: 5MB)
        backup_count: Number of backup files to keep (default: 3)
    """
    global _handler, _initialized

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    # Don't propagate to the root logger; stdout/stderr belong to the caller
    root_logger.propagate = False

    if _handler is not None:
        root_logger.removeHandler(_handler)
        _handler.close()
        _handler = None

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = DebugLogHandler(
                log_file,
                maxBytes=max_bytes or DEFAULT_MAX_BYTES,
                backupCount=backup_count if backup_count is not None else DEFAULT_BACKUP_COUNT,
                encoding="utf-8",
                delay=True,
            )
        except OSError:
            handler = None
        if handler is not None:
            handler.setFormatter(DebugLogFormatter())
            root_logger.addHandler(handler)
            _handler = handler

    _initialized = True


def reset_logging() -> None:
    """Reset logging state (primarily for testing)."""
    global _handler, _initialized

    root_logger = logging.getLogger(ROOT_LOGGER)
    if _handler is not None:
        root_logger.removeHandler(_handler)
        _handler.close()
    root_logger.propagate = True
    root_logger.setLevel(logging.NOTSET)

    _handler = None
    _initialized = False
