"""Apple Reminders.app integration via AppleScript."""

from calendar_bridge.reminders.actions import create_reminder, delete_reminder
from calendar_bridge.reminders.lists import get_list_names
from calendar_bridge.reminders.reminders import get_reminders

__all__ = [
    "get_list_names",
    "get_reminders",
    "create_reminder",
    "delete_reminder",
]
