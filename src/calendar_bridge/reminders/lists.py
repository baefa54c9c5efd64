"""Reminder list retrieval from Apple Reminders.app."""

from calendar_bridge.applescript import CommandExecutor
from calendar_bridge.parsing import parse_name_list

LIST_NAMES_SCRIPT = '''
tell application "Reminders"
    set names to {}
    repeat with lst in lists
        set end of names to (name of lst)
    end repeat
    return names
end tell
'''


async def get_list_names(executor: CommandExecutor) -> list[str]:
    """
    Get the names of all reminder lists.

    Returns:
        List names in the order Reminders.app lists them.

    Raises:
        AppNotRunningError: If Reminders.app is not running.
        AppleScriptError: If the AppleScript fails.
    """
    output = await executor.execute(LIST_NAMES_SCRIPT, operation="list_reminder_lists")
    return parse_name_list(output)
