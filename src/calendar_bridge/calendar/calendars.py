"""Calendar retrieval from Apple Calendar.app."""

from calendar_bridge.applescript import CommandExecutor
from calendar_bridge.parsing import parse_name_list

CALENDAR_NAMES_SCRIPT = '''
tell application "Calendar"
    set names to {}
    repeat with cal in calendars
        set end of names to (name of cal)
    end repeat
    return names
end tell
'''


async def get_calendar_names(executor: CommandExecutor) -> list[str]:
    """
    Get the names of all calendars in Calendar.app.

    Returns:
        Calendar names in the order Calendar.app lists them.

    Raises:
        AppNotRunningError: If Calendar.app is not running.
        AppleScriptError: If the AppleScript fails.
    """
    output = await executor.execute(CALENDAR_NAMES_SCRIPT, operation="list_calendars")
    return parse_name_list(output)
