"""Result and status types shared by the bridge and its callers."""

from dataclasses import dataclass, field
from enum import Enum

from calendar_bridge.applescript.base import NOT_FOUND, SUCCESS
from calendar_bridge.parsing import CalendarEvent


class OperationResult(str, Enum):
    """Outcome of a delete-style operation."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    FAILED = "failed"

    @classmethod
    def from_output(cls, output: str) -> "OperationResult":
        """Map a script's returned status literal to a result."""
        if SUCCESS in output:
            return cls.SUCCESS
        if NOT_FOUND in output:
            return cls.NOT_FOUND
        return cls.FAILED


class BridgeState(str, Enum):
    """Configuration lifecycle of the bridge."""

    UNCONFIGURED = "unconfigured"
    SETUP_IN_PROGRESS = "setup_in_progress"
    CONFIGURED = "configured"


class Category(str, Enum):
    """The two independently configurable targets."""

    SCHEDULE = "schedule"
    REMINDER = "reminder"

    @property
    def label(self) -> str:
        return "schedule calendar" if self is Category.SCHEDULE else "reminder list"


@dataclass(frozen=True)
class ConnectionStatus:
    """Read-only view of which categories are configured."""

    schedule_connected: bool
    reminder_connected: bool
    schedule_name: str | None = None
    reminder_name: str | None = None


@dataclass(frozen=True)
class SetupOptions:
    """Choices offered to the user during setup, in display order."""

    calendars: list[str] = field(default_factory=list)
    reminder_lists: list[str] = field(default_factory=list)


@dataclass
class CombinedAgenda:
    """Events and reminders fetched together.

    ``has_events``/``has_reminders`` report whether each category is
    configured at all, independent of whether its query returned anything.
    """

    events: list[CalendarEvent] = field(default_factory=list)
    reminders: list[CalendarEvent] = field(default_factory=list)
    has_events: bool = False
    has_reminders: bool = False
