"""AppleScript execution for Calendar.app and Reminders.app.

Every call spawns exactly one ``osascript`` process and awaits it. The script
is passed as an argument vector (never through a shell), and the process's
stderr is inspected to turn osascript's untyped error text into one of the
error classes in :mod:`calendar_bridge.applescript.errors`.
"""

import asyncio
import logging
import re
from datetime import datetime

from calendar_bridge.applescript.errors import (
    AppleScriptError,
    AppNotRunningError,
    AutomationPermissionError,
    FailureKind,
)

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100

# Script-level status literals. Mutating scripts catch their own errors and
# return one of these instead of failing the osascript process.
SUCCESS = "SUCCESS"
FAILED = "FAILED"
NOT_FOUND = "NOT_FOUND"

_APP_NOT_RUNNING_MARKERS = ("-600", "isn't running", "not running")
_PERMISSION_MARKERS = ("-1743", "not authorized", "not allowed to send", "permission")

# Handlers appended to query scripts so dates come back as
# "YYYY-MM-DD HH:MM:SS" regardless of the user's locale.
DATE_HANDLERS = '''
on isoDate(d)
    if d is missing value then return ""
    set y to (year of d) as integer
    set m to (month of d) as integer
    set t to time of d
    return (y as string) & "-" & my pad2(m) & "-" & my pad2(day of d) & " " & my pad2(t div 3600) & ":" & my pad2((t mod 3600) div 60) & ":" & my pad2(t mod 60)
end isoDate

on pad2(n)
    return text -2 thru -1 of ("0" & (n as string))
end pad2
'''


def escape_applescript_string(value: str) -> str:
    """Escape a string for safe inclusion in an AppleScript string literal.

    Handles backslashes, quotes, and control characters that would
    break AppleScript string syntax.
    """
    # First escape backslashes, then quotes
    result = value.replace("\\", "\\\\").replace('"', '\\"')
    result = result.replace("\n", " ").replace("\r", " ").replace("\t", " ")
    return result


def applescript_date(var_name: str, value: datetime) -> str:
    """Build AppleScript statements that set ``var_name`` to ``value``.

    The date is assembled from numeric components instead of a
    ``date "..."`` literal, whose parsing depends on the system locale.
    Day is reset to 1 first so that switching month never overflows
    (e.g. Jan 31 -> Feb).
    """
    seconds = value.hour * 3600 + value.minute * 60 + value.second
    return "\n".join(
        [
            f"set {var_name} to current date",
            f"set day of {var_name} to 1",
            f"set year of {var_name} to {value.year}",
            f"set month of {var_name} to {value.month}",
            f"set day of {var_name} to {value.day}",
            f"set time of {var_name} to {seconds}",
        ]
    )


def script_preview(script: str, length: int = PREVIEW_LENGTH) -> str:
    """Collapse whitespace and truncate a script for log output."""
    collapsed = re.sub(r"\s+", " ", script).strip()
    if len(collapsed) <= length:
        return collapsed
    return collapsed[:length] + "..."


def classify_failure(message: str) -> FailureKind:
    """Map osascript's error text to a failure category."""
    lowered = message.lower()
    if any(marker in lowered for marker in _APP_NOT_RUNNING_MARKERS):
        return FailureKind.APP_NOT_RUNNING
    if any(marker in lowered for marker in _PERMISSION_MARKERS):
        return FailureKind.PERMISSION_DENIED
    return FailureKind.GENERIC_FAILURE


def _app_name(message: str) -> str:
    if "Reminders" in message:
        return "Reminders"
    if "Calendar" in message:
        return "Calendar"
    return "Calendar or Reminders"


def error_for_failure(
    message: str,
    script: str | None = None,
    operation: str | None = None,
) -> AppleScriptError:
    """Build the typed error for a failed osascript invocation."""
    kind = classify_failure(message)
    if kind is FailureKind.APP_NOT_RUNNING:
        return AppNotRunningError(_app_name(message), script=script, operation=operation)
    if kind is FailureKind.PERMISSION_DENIED:
        return AutomationPermissionError(script=script, operation=operation)
    return AppleScriptError(
        f"AppleScript execution failed: {message}", script=script, operation=operation
    )


class CommandExecutor:
    """Runs AppleScript through ``osascript``, one process per call."""

    def __init__(
        self,
        osascript_path: str = "osascript",
        timeout: float | None = None,
    ) -> None:
        """
        Args:
            osascript_path: Path or name of the osascript binary.
            timeout: Seconds to wait for a script, or None to wait indefinitely.
        """
        self.osascript_path = osascript_path
        self.timeout = timeout

    async def execute(self, script: str, *, operation: str = "applescript") -> str:
        """
        Execute an AppleScript and return its output.

        Args:
            script: The AppleScript code to execute.
            operation: Name of the calling operation, for logs and errors.

        Returns:
            The stripped stdout of the osascript process.

        Raises:
            AppNotRunningError: If the target app is not running.
            AutomationPermissionError: If automation access was denied.
            AppleScriptError: For any other failure.
        """
        preview = script_preview(script)
        logger.info(
            "Executing AppleScript",
            extra={"details": {"operation": operation, "script": preview}},
        )

        try:
            proc = await asyncio.create_subprocess_exec(
                self.osascript_path,
                "-e",
                script,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(
                "Could not start osascript",
                extra={"details": {"operation": operation, "error": str(e)}},
            )
            raise AppleScriptError(
                f"Could not start {self.osascript_path}: {e}", script, operation
            ) from e

        try:
            if self.timeout is None:
                stdout, stderr = await proc.communicate()
            else:
                stdout, stderr = await asyncio.wait_for(proc.communicate(), self.timeout)
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            logger.error(
                "AppleScript timed out",
                extra={"details": {"operation": operation, "timeout": self.timeout}},
            )
            raise AppleScriptError(
                f"AppleScript timed out after {self.timeout}s", script, operation
            ) from e

        output = stdout.decode("utf-8", errors="replace").strip()
        diagnostics = stderr.decode("utf-8", errors="replace").strip()

        if proc.returncode != 0:
            message = diagnostics or "Unknown AppleScript error"
            error = error_for_failure(message, script, operation)
            logger.error(
                "AppleScript failed",
                extra={
                    "details": {
                        "operation": operation,
                        "script": preview,
                        "kind": error.kind.value,
                        "error": message,
                    }
                },
            )
            raise error

        if diagnostics:
            logger.warning(
                "AppleScript reported a warning",
                extra={"details": {"operation": operation, "stderr": diagnostics}},
            )

        logger.info(
            "AppleScript completed",
            extra={
                "details": {
                    "operation": operation,
                    "script": preview,
                    "output_length": len(output),
                }
            },
        )
        return output
