"""Append-only audit trail of add/delete operations.

Each line of activity.log looks like::

    [2024-01-01T14:00:00.000Z] ADD event "Meeting"

The bridge only writes this file; it never reads it back.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from calendar_bridge.logging import iso_timestamp

logger = logging.getLogger(__name__)


class ActivityAction(str, Enum):
    ADD = "ADD"
    ADD_FAILED = "ADD_FAILED"
    DELETE = "DELETE"
    DELETE_FAILED = "DELETE_FAILED"


class ActivityKind(str, Enum):
    EVENT = "event"
    REMINDER = "reminder"


@dataclass(frozen=True)
class ActivityLogEntry:
    """One audit record."""

    action: ActivityAction
    kind: ActivityKind
    title: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def format(self) -> str:
        # One entry per line, whatever the title contains
        title = self.title.replace("\r", " ").replace("\n", " ")
        return f'[{iso_timestamp(self.timestamp)}] {self.action.value} {self.kind.value} "{title}"'


class ActivityLog:
    """Writes :class:`ActivityLogEntry` rows to activity.log."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def record(self, action: ActivityAction, kind: ActivityKind, title: str) -> ActivityLogEntry:
        """Append an entry. Write failures are logged, not raised."""
        entry = ActivityLogEntry(action=action, kind=kind, title=title)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(entry.format() + "\n")
        except OSError as e:
            logger.error(
                "Failed to write activity log",
                extra={"details": {"path": str(self.path), "error": str(e)}},
            )
        return entry
