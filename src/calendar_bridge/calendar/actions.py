"""Write operations for Apple Calendar.app.

Both scripts trap their own errors and report a status literal
(``SUCCESS``, ``FAILED`` or ``NOT_FOUND``) instead of failing osascript.
"""

from datetime import datetime, timedelta

from calendar_bridge.applescript import (
    SUCCESS,
    CommandExecutor,
    applescript_date,
    escape_applescript_string,
)
from calendar_bridge.models import OperationResult

DEFAULT_EVENT_DURATION = timedelta(hours=1)


def build_create_event_script(
    calendar_name: str,
    title: str,
    start_date: datetime,
    end_date: datetime,
) -> str:
    cal_escaped = escape_applescript_string(calendar_name)
    title_escaped = escape_applescript_string(title)
    return f'''
{applescript_date("startDate", start_date)}
{applescript_date("endDate", end_date)}
tell application "Calendar"
    try
        set targetCal to calendar "{cal_escaped}"
        make new event at end of events of targetCal with properties {{summary:"{title_escaped}", start date:startDate, end date:endDate}}
        return "SUCCESS"
    on error
        return "FAILED"
    end try
end tell
'''


def build_delete_event_script(calendar_name: str, title: str) -> str:
    cal_escaped = escape_applescript_string(calendar_name)
    title_escaped = escape_applescript_string(title)
    return f'''
tell application "Calendar"
    try
        set targetCal to calendar "{cal_escaped}"
        set targetEvents to (events of targetCal whose summary is "{title_escaped}")
        if (count of targetEvents) > 0 then
            delete item 1 of targetEvents
            return "SUCCESS"
        else
            return "NOT_FOUND"
        end if
    on error
        return "FAILED"
    end try
end tell
'''


async def create_event(
    executor: CommandExecutor,
    calendar_name: str,
    title: str,
    start_date: datetime,
    end_date: datetime | None = None,
) -> bool:
    """
    Create a calendar event.

    Args:
        executor: Executor used to run the script.
        calendar_name: Target calendar name.
        title: Event title.
        start_date: Event start date/time.
        end_date: Event end date/time (default: start + 1 hour).

    Returns:
        True if Calendar.app reported success.

    Raises:
        AppNotRunningError: If Calendar.app is not running.
        AppleScriptError: If osascript itself fails.

    Example:
        >>> await create_event(executor, "Work", "Team Meeting", datetime(2024, 1, 1, 14, 0))
        True
    """
    if end_date is None:
        end_date = start_date + DEFAULT_EVENT_DURATION

    script = build_create_event_script(calendar_name, title, start_date, end_date)
    output = await executor.execute(script, operation="add_event")
    return SUCCESS in output


async def delete_event(
    executor: CommandExecutor,
    calendar_name: str,
    title: str,
) -> OperationResult:
    """
    Delete the first event whose title matches ``title`` exactly.

    Returns:
        SUCCESS if an event was deleted, NOT_FOUND if none matched,
        FAILED if Calendar.app reported an error.
    """
    script = build_delete_event_script(calendar_name, title)
    output = await executor.execute(script, operation="remove_event")
    return OperationResult.from_output(output)
