"""AppleScript execution infrastructure for Calendar.app and Reminders.app."""

from calendar_bridge.applescript.base import (
    FAILED,
    NOT_FOUND,
    SUCCESS,
    CommandExecutor,
    applescript_date,
    classify_failure,
    error_for_failure,
    escape_applescript_string,
    script_preview,
)
from calendar_bridge.applescript.errors import (
    AppleScriptError,
    AppNotRunningError,
    AutomationPermissionError,
    FailureKind,
)

__all__ = [
    "CommandExecutor",
    "escape_applescript_string",
    "applescript_date",
    "script_preview",
    "classify_failure",
    "error_for_failure",
    "SUCCESS",
    "FAILED",
    "NOT_FOUND",
    "AppleScriptError",
    "AppNotRunningError",
    "AutomationPermissionError",
    "FailureKind",
]
