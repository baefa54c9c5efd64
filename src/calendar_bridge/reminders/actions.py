"""Write operations for Apple Reminders.app.

Performance Note:
    Reminders.app is a Catalyst app (iPad app running on macOS), which makes
    AppleScript interactions slower than native apps. Write operations
    typically complete in 1-5 seconds.
"""

from datetime import datetime

from calendar_bridge.applescript import (
    SUCCESS,
    CommandExecutor,
    applescript_date,
    escape_applescript_string,
)
from calendar_bridge.models import OperationResult


def build_create_reminder_script(
    list_name: str,
    title: str,
    due_date: datetime | None = None,
) -> str:
    list_escaped = escape_applescript_string(list_name)
    title_escaped = escape_applescript_string(title)

    props = [f'name:"{title_escaped}"']
    due_block = ""
    if due_date is not None:
        due_block = applescript_date("dueDate", due_date)
        props.append("due date:dueDate")
    props_str = ", ".join(props)

    return f'''
{due_block}
tell application "Reminders"
    try
        set targetList to list "{list_escaped}"
        make new reminder at end of reminders of targetList with properties {{{props_str}}}
        return "SUCCESS"
    on error
        return "FAILED"
    end try
end tell
'''


def build_delete_reminder_script(list_name: str, title: str) -> str:
    list_escaped = escape_applescript_string(list_name)
    title_escaped = escape_applescript_string(title)
    return f'''
tell application "Reminders"
    try
        set targetList to list "{list_escaped}"
        set targetReminders to (reminders of targetList whose name is "{title_escaped}")
        if (count of targetReminders) > 0 then
            delete item 1 of targetReminders
            return "SUCCESS"
        else
            return "NOT_FOUND"
        end if
    on error
        return "FAILED"
    end try
end tell
'''


async def create_reminder(
    executor: CommandExecutor,
    list_name: str,
    title: str,
    due_date: datetime | None = None,
) -> bool:
    """
    Create a new reminder in Reminders.app.

    Args:
        executor: Executor used to run the script.
        list_name: Name of the list to add the reminder to.
        title: The reminder title.
        due_date: Optional due date for the reminder.

    Returns:
        True if Reminders.app reported success.

    Raises:
        AppNotRunningError: If Reminders.app is not running.
        AppleScriptError: If osascript itself fails.
    """
    script = build_create_reminder_script(list_name, title, due_date)
    output = await executor.execute(script, operation="add_reminder")
    return SUCCESS in output


async def delete_reminder(
    executor: CommandExecutor,
    list_name: str,
    title: str,
) -> OperationResult:
    """
    Delete the first reminder whose title matches ``title`` exactly.

    Warning:
        This permanently deletes the reminder. It cannot be undone.
    """
    script = build_delete_reminder_script(list_name, title)
    output = await executor.execute(script, operation="remove_reminder")
    return OperationResult.from_output(output)
