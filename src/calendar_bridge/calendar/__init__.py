"""Apple Calendar.app integration via AppleScript."""

from calendar_bridge.calendar.actions import create_event, delete_event
from calendar_bridge.calendar.calendars import get_calendar_names
from calendar_bridge.calendar.events import get_events

__all__ = [
    # Read operations
    "get_calendar_names",
    "get_events",
    # Write operations
    "create_event",
    "delete_event",
]
