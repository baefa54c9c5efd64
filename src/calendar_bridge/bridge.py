"""Calendar bridge: the public calendar/reminder operations.

The bridge composes configuration, script execution, parsing, validation
and the activity log. Its configuration lifecycle is::

    UNCONFIGURED -> SETUP_IN_PROGRESS -> CONFIGURED
    CONFIGURED -> SETUP_IN_PROGRESS   (a configured name no longer exists)

Selecting calendars during setup is left to the caller: ``setup_options()``
returns the choices and ``complete_setup()`` takes one 1-based index per
category, where 0 or an out-of-range index skips that category.
"""

import asyncio
import logging
from collections.abc import Awaitable
from datetime import datetime, timedelta
from typing import Any

from calendar_bridge.activity import ActivityAction, ActivityKind, ActivityLog
from calendar_bridge.applescript import AppleScriptError, CommandExecutor
from calendar_bridge.calendar import create_event, delete_event, get_calendar_names, get_events
from calendar_bridge.calendar.actions import DEFAULT_EVENT_DURATION
from calendar_bridge.config import CalendarConfig, ConfigStore, Settings, needs_setup
from calendar_bridge.models import (
    BridgeState,
    Category,
    CombinedAgenda,
    ConnectionStatus,
    OperationResult,
    SetupOptions,
)
from calendar_bridge.parsing import CalendarEvent
from calendar_bridge.reminders import (
    create_reminder,
    delete_reminder,
    get_list_names,
    get_reminders,
)
from calendar_bridge.validation import ValidationEngine

logger = logging.getLogger(__name__)

TEST_EVENT_LEAD = timedelta(minutes=10)
TEST_REMINDER_LEAD = timedelta(hours=2)


class ConfigurationError(Exception):
    """Raised when an operation needs a category that is not configured."""

    def __init__(self, category: Category) -> None:
        super().__init__(f"No {category.label} is configured. Run setup first.")
        self.category = category


def _pick(choices: list[str], index: int | None) -> str | None:
    """Resolve a 1-based selection; 0, None or out-of-range means skip."""
    if index is None or index < 1 or index > len(choices):
        return None
    return choices[index - 1]


async def _gather_settled(*aws: Awaitable[Any]) -> list[Any]:
    """Run awaitables concurrently; failures are returned, not raised.

    A failing branch never cancels the others. Cancellation itself is
    still propagated.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result
    return results


class CalendarBridge:
    """Public calendar and reminder operations over Calendar.app/Reminders.app."""

    def __init__(
        self,
        store: ConfigStore,
        executor: CommandExecutor,
        activity: ActivityLog,
        validator: ValidationEngine | None = None,
    ) -> None:
        self.store = store
        self.executor = executor
        self.activity = activity
        self.validator = validator or ValidationEngine(executor)
        self.state = BridgeState.UNCONFIGURED
        # Set when invalid names were cleared but not yet written to disk
        self._pending_clear = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "CalendarBridge":
        return cls(
            store=ConfigStore.from_settings(settings),
            executor=CommandExecutor(settings.osascript_path, settings.command_timeout),
            activity=ActivityLog(settings.activity_log_path),
        )

    # === Lifecycle ===

    def load(self) -> CalendarConfig:
        """Load both configuration documents without contacting the apps."""
        self.store.load_app_config()
        return self.store.load()

    async def init(self) -> BridgeState:
        """
        Load both configuration documents and validate the selection.

        Returns:
            CONFIGURED if every configured name still exists, otherwise
            SETUP_IN_PROGRESS (the caller should run setup).

        Raises:
            AppleScriptError: If the live names could not be fetched.
        """
        config = self.load()

        if needs_setup(config):
            logger.info("Setup required")
            self.state = BridgeState.SETUP_IN_PROGRESS
            return self.state

        if await self.validate():
            self.state = BridgeState.CONFIGURED
        else:
            self.state = BridgeState.SETUP_IN_PROGRESS
        return self.state

    async def validate(self) -> bool:
        """
        Check the configured names against Calendar.app and Reminders.app.

        Invalid names are cleared from the in-memory configuration; the
        cleared state is persisted by the next ``complete_setup()``.

        Raises:
            AppleScriptError: If either lookup failed. Both lookups run to
                completion first and the configuration is left untouched.
        """
        config = self.store.config
        checks: dict[Category, Awaitable[bool]] = {}
        if config.schedule_calendar:
            checks[Category.SCHEDULE] = self.validator.validate_calendar(config.schedule_calendar)
        if config.reminder_calendar:
            checks[Category.REMINDER] = self.validator.validate_reminder_list(
                config.reminder_calendar
            )

        outcomes = dict(zip(checks, await _gather_settled(*checks.values())))
        for category, outcome in outcomes.items():
            if isinstance(outcome, Exception):
                self._log_failure(f"validate_{category.value}", None, outcome)
                raise outcome

        invalid = [category for category, ok in outcomes.items() if not ok]
        if not invalid:
            logger.info(
                "Configuration is valid",
                extra={"details": config.model_dump(by_alias=True, exclude_none=True)},
            )
            return True

        logger.warning(
            "Configuration is stale, setup required",
            extra={"details": {"invalid": [category.value for category in invalid]}},
        )
        self.store.clear(
            schedule=Category.SCHEDULE in invalid,
            reminder=Category.REMINDER in invalid,
        )
        self._pending_clear = True
        return False

    async def setup_options(self) -> SetupOptions:
        """
        Enter setup and fetch the calendars and lists to choose from.

        A category whose lookup fails is offered with no choices; if both
        fail, the first error is raised.
        """
        self.state = BridgeState.SETUP_IN_PROGRESS
        calendars, lists = await _gather_settled(
            self.list_calendars(), self.list_reminder_lists()
        )

        if isinstance(calendars, Exception) and isinstance(lists, Exception):
            raise calendars
        if isinstance(calendars, Exception):
            self._log_failure("list_calendars", None, calendars)
            calendars = []
        if isinstance(lists, Exception):
            self._log_failure("list_reminder_lists", None, lists)
            lists = []

        return SetupOptions(calendars=calendars, reminder_lists=lists)

    def complete_setup(
        self,
        options: SetupOptions,
        calendar_choice: int | None,
        reminder_choice: int | None,
    ) -> CalendarConfig:
        """
        Apply the user's selections and persist them once.

        Args:
            options: The choices that were shown.
            calendar_choice: 1-based index into ``options.calendars``.
            reminder_choice: 1-based index into ``options.reminder_lists``.

        Returns:
            The resulting configuration.

        Raises:
            PersistenceError: If setting.json could not be written.
        """
        schedule = _pick(options.calendars, calendar_choice)
        reminder = _pick(options.reminder_lists, reminder_choice)
        self.store.update(schedule_calendar=schedule, reminder_calendar=reminder)

        if schedule or reminder or self._pending_clear:
            self.store.save()
            self._pending_clear = False
            logger.info(
                "Setup complete",
                extra={"details": {"scheduleCalendar": schedule, "reminderCalendar": reminder}},
            )

        config = self.store.config
        self.state = BridgeState.UNCONFIGURED if needs_setup(config) else BridgeState.CONFIGURED
        return config

    def status(self) -> ConnectionStatus:
        return self.store.status()

    # === Queries ===

    async def list_calendars(self) -> list[str]:
        return await get_calendar_names(self.executor)

    async def list_reminder_lists(self) -> list[str]:
        return await get_list_names(self.executor)

    def effective_days(self, days: int | None) -> int:
        """Clamp a requested window to 1..maxDays (default: defaultDays)."""
        limits = self.store.app_config
        if days is None:
            days = limits.default_days
        return max(1, min(days, limits.max_days))

    def effective_limit(self, limit: int | None) -> int:
        if limit is None or limit < 1:
            return self.store.app_config.max_events
        return limit

    async def get_events(
        self, days: int | None = None, max_events: int | None = None
    ) -> list[CalendarEvent]:
        """
        Get events from the configured calendar.

        Raises:
            ConfigurationError: If no calendar is configured.
            AppleScriptError: If the query fails.
        """
        calendar_name = self._require(Category.SCHEDULE)
        limit = self.effective_limit(max_events)
        try:
            events = await get_events(
                self.executor, calendar_name, self.effective_days(days), limit
            )
        except AppleScriptError as e:
            self._log_failure("get_events", None, e)
            raise
        return events[:limit]

    async def get_reminders(
        self, days: int | None = None, max_reminders: int | None = None
    ) -> list[CalendarEvent]:
        """
        Get incomplete reminders from the configured list.

        Raises:
            ConfigurationError: If no reminder list is configured.
            AppleScriptError: If the query fails.
        """
        list_name = self._require(Category.REMINDER)
        limit = self.effective_limit(max_reminders)
        try:
            reminders = await get_reminders(
                self.executor, list_name, self.effective_days(days), limit
            )
        except AppleScriptError as e:
            self._log_failure("get_reminders", None, e)
            raise
        return reminders[:limit]

    async def get_events_and_reminders(
        self,
        days: int | None = None,
        max_events: int | None = None,
        max_reminders: int | None = None,
    ) -> CombinedAgenda:
        """
        Get events and reminders together.

        Unconfigured categories are skipped. A category whose query fails
        comes back empty instead of failing the whole call.
        """
        status = self.status()
        agenda = CombinedAgenda(
            has_events=status.schedule_connected,
            has_reminders=status.reminder_connected,
        )

        queries: dict[str, Awaitable[list[CalendarEvent]]] = {}
        if agenda.has_events:
            queries["events"] = self.get_events(days, max_events)
        if agenda.has_reminders:
            queries["reminders"] = self.get_reminders(days, max_reminders)

        for key, result in zip(queries, await _gather_settled(*queries.values())):
            if isinstance(result, Exception):
                logger.warning(
                    "Partial agenda: query failed",
                    extra={"details": {"category": key, "error": str(result)}},
                )
                continue
            setattr(agenda, key, result)
        return agenda

    # === Mutations ===

    async def add_event(
        self,
        title: str,
        start_date: datetime,
        end_date: datetime | None = None,
    ) -> bool:
        """
        Add an event to the configured calendar.

        Args:
            title: Event title.
            start_date: Event start.
            end_date: Event end (default: start + 1 hour).

        Returns:
            True if Calendar.app reported success.

        Raises:
            ConfigurationError: If no calendar is configured.
            AppleScriptError: If osascript fails.
        """
        calendar_name = self._require(Category.SCHEDULE)
        _require_title(title)
        if end_date is None:
            end_date = start_date + DEFAULT_EVENT_DURATION

        try:
            success = await create_event(
                self.executor, calendar_name, title, start_date, end_date
            )
        except AppleScriptError as e:
            self.activity.record(ActivityAction.ADD_FAILED, ActivityKind.EVENT, title)
            self._log_failure("add_event", title, e)
            raise

        action = ActivityAction.ADD if success else ActivityAction.ADD_FAILED
        self.activity.record(action, ActivityKind.EVENT, title)
        return success

    async def remove_event(self, title: str) -> OperationResult:
        """Delete the first event titled exactly ``title``."""
        calendar_name = self._require(Category.SCHEDULE)
        _require_title(title)
        try:
            result = await delete_event(self.executor, calendar_name, title)
        except AppleScriptError as e:
            self.activity.record(ActivityAction.DELETE_FAILED, ActivityKind.EVENT, title)
            self._log_failure("remove_event", title, e)
            raise

        self._record_delete(result, ActivityKind.EVENT, title)
        return result

    async def add_reminder(self, title: str, due_date: datetime | None = None) -> bool:
        """
        Add a reminder to the configured list.

        Raises:
            ConfigurationError: If no reminder list is configured.
            AppleScriptError: If osascript fails.
        """
        list_name = self._require(Category.REMINDER)
        _require_title(title)
        try:
            success = await create_reminder(self.executor, list_name, title, due_date)
        except AppleScriptError as e:
            self.activity.record(ActivityAction.ADD_FAILED, ActivityKind.REMINDER, title)
            self._log_failure("add_reminder", title, e)
            raise

        action = ActivityAction.ADD if success else ActivityAction.ADD_FAILED
        self.activity.record(action, ActivityKind.REMINDER, title)
        return success

    async def remove_reminder(self, title: str) -> OperationResult:
        """Delete the first reminder titled exactly ``title``."""
        list_name = self._require(Category.REMINDER)
        _require_title(title)
        try:
            result = await delete_reminder(self.executor, list_name, title)
        except AppleScriptError as e:
            self.activity.record(ActivityAction.DELETE_FAILED, ActivityKind.REMINDER, title)
            self._log_failure("remove_reminder", title, e)
            raise

        self._record_delete(result, ActivityKind.REMINDER, title)
        return result

    async def add_test_event(self) -> tuple[str, bool]:
        """Add a one-hour event starting in ten minutes. Returns (title, success)."""
        now = datetime.now()
        title = f"Test event {now:%H:%M}"
        return title, await self.add_event(title, now + TEST_EVENT_LEAD)

    async def add_test_reminder(self) -> tuple[str, bool]:
        """Add a reminder due in two hours. Returns (title, success)."""
        now = datetime.now()
        title = f"Test reminder {now:%H:%M}"
        return title, await self.add_reminder(title, now + TEST_REMINDER_LEAD)

    # === Helpers ===

    def _require(self, category: Category) -> str:
        config = self.store.config
        name = (
            config.schedule_calendar
            if category is Category.SCHEDULE
            else config.reminder_calendar
        )
        if not name:
            raise ConfigurationError(category)
        return name

    def _record_delete(self, result: OperationResult, kind: ActivityKind, title: str) -> None:
        if result is OperationResult.SUCCESS:
            self.activity.record(ActivityAction.DELETE, kind, title)
        else:
            self.activity.record(ActivityAction.DELETE_FAILED, kind, title)
        if result is OperationResult.NOT_FOUND:
            logger.info(
                "Nothing to delete",
                extra={"details": {"kind": kind.value, "title": title}},
            )

    @staticmethod
    def _log_failure(operation: str, title: str | None, error: Exception) -> None:
        logger.error(
            "Operation failed",
            extra={
                "details": {
                    "operation": operation,
                    "title": title,
                    "kind": getattr(getattr(error, "kind", None), "value", None),
                    "error": str(error),
                }
            },
        )


def _require_title(title: str) -> None:
    if not title or not title.strip():
        raise ValueError("Title must not be empty")
