"""Checks that configured names still exist in Calendar.app/Reminders.app.

Names are fetched live on every call; calendars and lists can be renamed or
deleted outside this program at any time.
"""

import logging

from calendar_bridge.applescript import CommandExecutor
from calendar_bridge.calendar import get_calendar_names
from calendar_bridge.reminders import get_list_names

logger = logging.getLogger(__name__)


class ValidationEngine:
    """Membership checks against the live calendar and list names."""

    def __init__(self, executor: CommandExecutor) -> None:
        self.executor = executor

    async def validate_calendar(self, name: str) -> bool:
        calendars = await get_calendar_names(self.executor)
        valid = name in calendars
        if not valid:
            logger.warning(
                "Configured calendar not found",
                extra={"details": {"calendar": name, "available": calendars}},
            )
        return valid

    async def validate_reminder_list(self, name: str) -> bool:
        lists = await get_list_names(self.executor)
        valid = name in lists
        if not valid:
            logger.warning(
                "Configured reminder list not found",
                extra={"details": {"list": name, "available": lists}},
            )
        return valid
