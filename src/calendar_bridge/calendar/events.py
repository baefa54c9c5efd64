"""Calendar event retrieval from Apple Calendar.app."""

from calendar_bridge.applescript import CommandExecutor, escape_applescript_string
from calendar_bridge.applescript.base import DATE_HANDLERS
from calendar_bridge.parsing import CalendarEvent, parse_events


def build_events_script(calendar_name: str, days: int, limit: int) -> str:
    """Build the query for events starting between today 00:00 and ``days`` later."""
    cal_escaped = escape_applescript_string(calendar_name)
    return f'''
tell application "Calendar"
    set startDate to current date
    set time of startDate to 0
    set endDate to startDate + ({days} * days)

    set targetCal to calendar "{cal_escaped}"
    set calEvents to (events of targetCal whose start date >= startDate and start date <= endDate)
    set eventList to {{}}
    set eventCount to 0
    repeat with evt in calEvents
        if eventCount >= {limit} then exit repeat
        set evtTitle to summary of evt
        if evtTitle is missing value then set evtTitle to ""
        set end of eventList to evtTitle & "|" & my isoDate(start date of evt) & "|" & my isoDate(end date of evt) & "|" & "{cal_escaped}" & "|" & ((allday event of evt) as string)
        set eventCount to eventCount + 1
    end repeat
    return eventList
end tell
{DATE_HANDLERS}'''


async def get_events(
    executor: CommandExecutor,
    calendar_name: str,
    days: int = 1,
    limit: int = 1000,
) -> list[CalendarEvent]:
    """
    Get events from a Calendar.app calendar.

    Args:
        executor: Executor used to run the query.
        calendar_name: Calendar to read.
        days: Window length in days, starting today at midnight.
        limit: Maximum number of events to retrieve.

    Returns:
        Events in the order Calendar.app returned them.

    Raises:
        AppNotRunningError: If Calendar.app is not running.
        AppleScriptError: If the AppleScript fails.
    """
    script = build_events_script(calendar_name, days, limit)
    output = await executor.execute(script, operation="get_events")
    return parse_events(output)
