"""AppleScript error classes for Calendar.app and Reminders.app automation."""

from enum import Enum


class FailureKind(str, Enum):
    """Category of an automation failure, derived from osascript's error text."""

    APP_NOT_RUNNING = "app_not_running"
    PERMISSION_DENIED = "permission_denied"
    GENERIC_FAILURE = "generic_failure"


class AppleScriptError(Exception):
    """Raised when an AppleScript command fails."""

    kind = FailureKind.GENERIC_FAILURE

    def __init__(
        self,
        message: str,
        script: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.script = script
        self.operation = operation


class AppNotRunningError(AppleScriptError):
    """Raised when Calendar.app or Reminders.app is not running."""

    kind = FailureKind.APP_NOT_RUNNING

    def __init__(
        self,
        app_name: str = "Calendar or Reminders",
        script: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(
            f"{app_name} is not running. Please open {app_name} and try again.",
            script=script,
            operation=operation,
        )
        self.app_name = app_name


class AutomationPermissionError(AppleScriptError):
    """Raised when macOS has not granted automation access to the target app."""

    kind = FailureKind.PERMISSION_DENIED

    def __init__(
        self,
        app_name: str = "Calendar/Reminders",
        script: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(
            f"Access to {app_name} was denied. Check System Settings > "
            "Privacy & Security > Automation and allow this terminal to control it.",
            script=script,
            operation=operation,
        )
        self.app_name = app_name
