"""Reminder retrieval from Apple Reminders.app.

Performance Note:
    Reminders.app is a Catalyst app (iPad app running on macOS), which makes
    AppleScript interactions slow. Queries are always scoped to a single list.
"""

from calendar_bridge.applescript import CommandExecutor, escape_applescript_string
from calendar_bridge.applescript.base import DATE_HANDLERS
from calendar_bridge.parsing import CalendarEvent, parse_events


def build_reminders_script(list_name: str, days: int, limit: int) -> str:
    """Build the query for incomplete reminders due in the window.

    Reminders without a due date are included with empty date fields.
    """
    list_escaped = escape_applescript_string(list_name)
    return f'''
tell application "Reminders"
    set startDate to current date
    set time of startDate to 0
    set endDate to startDate + ({days} * days)

    set targetList to list "{list_escaped}"
    set reminderList to {{}}
    set reminderCount to 0
    repeat with r in (reminders of targetList whose completed is false)
        if reminderCount >= {limit} then exit repeat
        set rDue to missing value
        try
            set rDue to due date of r
        end try
        if rDue is missing value or (rDue >= startDate and rDue <= endDate) then
            set end of reminderList to (name of r) & "|" & my isoDate(rDue) & "|" & my isoDate(rDue) & "|" & "{list_escaped}" & "|false"
            set reminderCount to reminderCount + 1
        end if
    end repeat
    return reminderList
end tell
{DATE_HANDLERS}'''


async def get_reminders(
    executor: CommandExecutor,
    list_name: str,
    days: int = 1,
    limit: int = 1000,
) -> list[CalendarEvent]:
    """
    Get incomplete reminders from a Reminders.app list.

    Args:
        executor: Executor used to run the query.
        list_name: Reminder list to read.
        days: Due-date window length in days, starting today at midnight.
        limit: Maximum number of reminders to retrieve.

    Returns:
        Reminders as CalendarEvent records (start and end are the due date).

    Raises:
        AppNotRunningError: If Reminders.app is not running.
        AppleScriptError: If the AppleScript fails.
    """
    script = build_reminders_script(list_name, days, limit)
    output = await executor.execute(script, operation="get_reminders")
    return parse_events(output)
