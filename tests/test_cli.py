"""Tests for the command-line interface."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from calendar_bridge import __version__
from calendar_bridge.activity import ActivityLog
from calendar_bridge.applescript import AppNotRunningError
from calendar_bridge.bridge import CalendarBridge
from calendar_bridge.cli import app
from calendar_bridge.config import ConfigStore, Settings
from conftest import FakeExecutor, activity_lines, write_settings

runner = CliRunner()


@pytest.fixture
def executor(tmp_path: Path):
    """Run CLI commands against tmp_path with a fake osascript."""
    fake = FakeExecutor(
        {
            "list_calendars": "Work, Home",
            "list_reminder_lists": "Reminders",
        }
    )
    settings = Settings(data_dir=tmp_path, _env_file=None)

    def make_bridge(settings: Settings) -> CalendarBridge:
        return CalendarBridge(
            ConfigStore.from_settings(settings), fake, ActivityLog(settings.activity_log_path)
        )

    with (
        patch("calendar_bridge.cli.get_settings", return_value=settings),
        patch.object(CalendarBridge, "from_settings", side_effect=make_bridge),
    ):
        yield fake


class TestVersion:
    """Tests for the version command."""

    def test_version(self) -> None:
        """Version should print the package version."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestSetupCommand:
    """Tests for interactive setup."""

    def test_setup_selects_calendar(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """Choosing calendar 2 and skipping reminders should save only the calendar."""
        result = runner.invoke(app, ["setup"], input="2\n0\n")

        assert result.exit_code == 0
        assert "Home" in result.output
        saved = json.loads((tmp_path / "setting.json").read_text())
        assert saved == {"scheduleCalendar": "Home"}

    def test_first_query_runs_setup(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """A query with no configuration should run setup first."""
        executor.responses["get_events"] = "Standup|2025-01-10 09:00:00|2025-01-10 09:15:00|Work|false"

        result = runner.invoke(app, ["events"], input="1\n1\n")

        assert result.exit_code == 0
        assert "Standup" in result.output
        saved = json.loads((tmp_path / "setting.json").read_text())
        assert saved == {"reminderCalendar": "Reminders", "scheduleCalendar": "Work"}

    def test_debug_log_written(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """Setup should write its progress to debug.log."""
        runner.invoke(app, ["setup"], input="1\n0\n")
        log = (tmp_path / "debug.log").read_text()
        assert "[INFO] Settings saved" in log


class TestQueryCommands:
    """Tests for events, reminders and agenda."""

    def test_events(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """Events should print every returned event and honour --days."""
        write_settings(tmp_path, scheduleCalendar="Work")
        executor.responses["get_events"] = (
            "Standup|2025-01-10 09:00:00|2025-01-10 09:15:00|Work|false, "
            "Holiday|2025-01-11 00:00:00|2025-01-12 00:00:00|Work|true"
        )

        result = runner.invoke(app, ["events", "--days", "7", "--max", "10"])

        assert result.exit_code == 0
        assert "Standup" in result.output
        assert "Holiday" in result.output
        script = executor.scripts("get_events")[0]
        assert "(7 * days)" in script

    def test_events_empty(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """No events should print a nothing-found message."""
        write_settings(tmp_path, scheduleCalendar="Work")
        result = runner.invoke(app, ["events"])
        assert result.exit_code == 0
        assert "nothing found" in result.output

    def test_reminders_not_configured(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """Reminders without a configured list should exit 1 before running a script."""
        write_settings(tmp_path, scheduleCalendar="Work")
        result = runner.invoke(app, ["reminders"])
        assert result.exit_code == 1
        assert "Not configured" in result.output
        assert executor.scripts("get_reminders") == []

    def test_agenda_only_calendar(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """Agenda should show events and note the missing reminder list."""
        write_settings(tmp_path, scheduleCalendar="Work")
        executor.responses["get_events"] = "Standup|a|b|Work|false"

        result = runner.invoke(app, ["agenda"])

        assert result.exit_code == 0
        assert "Standup" in result.output
        assert "No reminder list configured" in result.output

    def test_app_not_running(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """AppleScript errors should print a message and exit 1."""
        write_settings(tmp_path, scheduleCalendar="Work")
        executor.responses["get_events"] = AppNotRunningError("Calendar")

        result = runner.invoke(app, ["events"])

        assert result.exit_code == 1
        assert "AppleScript error" in result.output

    def test_status(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """Status should show the configured calendar and list."""
        write_settings(tmp_path, scheduleCalendar="Work", reminderCalendar="Reminders")
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "Work" in result.output
        assert "Reminders" in result.output

    def test_status_does_not_contact_apps(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """Status should show the saved selection even when Calendar is not running."""
        write_settings(tmp_path, scheduleCalendar="Work")
        executor.responses["list_calendars"] = AppNotRunningError("Calendar")

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "Work" in result.output
        assert executor.calls == []

    def test_calendars(self, executor: FakeExecutor) -> None:
        """Calendars should list both calendars and reminder lists."""
        result = runner.invoke(app, ["calendars"])
        assert result.exit_code == 0
        assert "Home" in result.output
        assert "Reminders" in result.output

    def test_calendars_writes_debug_log(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """Calendars should log lookup failures to debug.log."""
        executor.responses["list_reminder_lists"] = AppNotRunningError("Reminders")

        result = runner.invoke(app, ["calendars"])

        assert result.exit_code == 0
        log = (tmp_path / "debug.log").read_text()
        assert "[ERROR] Operation failed" in log
        assert "list_reminder_lists" in log


class TestMutationCommands:
    """Tests for add/remove commands."""

    def test_add_event(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """Add-event should pass start and end times and record the activity."""
        write_settings(tmp_path, scheduleCalendar="Work")
        executor.responses["add_event"] = "SUCCESS"

        result = runner.invoke(
            app, ["add-event", "Dentist", "2025-01-15 14:00", "--end", "2025-01-15 15:30"]
        )

        assert result.exit_code == 0
        assert "Added event" in result.output
        script = executor.scripts("add_event")[0]
        assert "set time of startDate to 50400" in script
        assert "set time of endDate to 55800" in script
        assert activity_lines(tmp_path / "activity.log")[0].endswith('ADD event "Dentist"')

    def test_add_event_bad_date(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """An unparseable start date should be rejected before any script runs."""
        write_settings(tmp_path, scheduleCalendar="Work")
        result = runner.invoke(app, ["add-event", "Dentist", "tomorrow"])
        assert result.exit_code != 0
        assert executor.scripts("add_event") == []

    def test_add_reminder_failed(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """FAILED from Reminders.app should exit 1."""
        write_settings(tmp_path, reminderCalendar="Reminders")
        executor.responses["add_reminder"] = "FAILED"

        result = runner.invoke(app, ["add-reminder", "Buy milk", "--due", "2025-01-15"])

        assert result.exit_code == 1
        assert "Failed to add reminder" in result.output

    def test_remove_event_not_found(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """A missing event should warn and exit 0."""
        write_settings(tmp_path, scheduleCalendar="Work")
        executor.responses["remove_event"] = "NOT_FOUND"

        result = runner.invoke(app, ["remove-event", "Ghost"])

        assert result.exit_code == 0
        assert "No event found" in result.output

    def test_remove_reminder_failed(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """FAILED from a delete should exit 1."""
        write_settings(tmp_path, reminderCalendar="Reminders")
        executor.responses["remove_reminder"] = "FAILED"

        result = runner.invoke(app, ["remove-reminder", "Buy milk"])

        assert result.exit_code == 1
        assert "Failed to delete reminder" in result.output

    def test_add_test_event(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """Add-test-event should report the generated title."""
        write_settings(tmp_path, scheduleCalendar="Work")
        executor.responses["add_event"] = "SUCCESS"

        result = runner.invoke(app, ["add-test-event"])

        assert result.exit_code == 0
        assert "Test event" in result.output

    def test_add_test_reminder(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """Add-test-reminder should report the generated title."""
        write_settings(tmp_path, reminderCalendar="Reminders")
        executor.responses["add_reminder"] = "SUCCESS"

        result = runner.invoke(app, ["add-test-reminder"])

        assert result.exit_code == 0
        assert "Test reminder" in result.output


class TestSelfTestCommand:
    """Tests for the live add/remove round trip."""

    def test_round_trip(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """Each configured category should get one item added and then removed."""
        write_settings(tmp_path, scheduleCalendar="Work", reminderCalendar="Reminders")
        for operation in ("add_event", "remove_event", "add_reminder", "remove_reminder"):
            executor.responses[operation] = "SUCCESS"

        result = runner.invoke(app, ["self-test"])

        assert result.exit_code == 0
        added_title = executor.scripts("add_event")[0].split('summary:"')[1].split('"')[0]
        assert f'whose summary is "{added_title}"' in executor.scripts("remove_event")[0]
        actions = [line.split("] ")[1].split(" ")[0] for line in activity_lines(tmp_path / "activity.log")]
        assert actions == ["ADD", "DELETE", "ADD", "DELETE"]

    def test_only_configured_categories(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """An unconfigured reminder list should be skipped."""
        write_settings(tmp_path, scheduleCalendar="Work")
        executor.responses["add_event"] = "SUCCESS"
        executor.responses["remove_event"] = "SUCCESS"

        result = runner.invoke(app, ["self-test"])

        assert result.exit_code == 0
        assert executor.scripts("add_reminder") == []

    def test_failed_remove_exits_1(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """A test item that could not be removed should fail the run."""
        write_settings(tmp_path, scheduleCalendar="Work")
        executor.responses["add_event"] = "SUCCESS"
        executor.responses["remove_event"] = "NOT_FOUND"

        result = runner.invoke(app, ["self-test"])

        assert result.exit_code == 1
        assert "removed=not_found" in result.output

    def test_failed_add_skips_remove(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """A test item that was not added should not be deleted."""
        write_settings(tmp_path, scheduleCalendar="Work")
        executor.responses["add_event"] = "FAILED"

        result = runner.invoke(app, ["self-test"])

        assert result.exit_code == 1
        assert executor.scripts("remove_event") == []

    def test_init_only(self, executor: FakeExecutor, tmp_path: Path) -> None:
        """--init-only should validate the configuration and change nothing."""
        write_settings(tmp_path, scheduleCalendar="Work", reminderCalendar="Reminders")

        result = runner.invoke(app, ["self-test", "--init-only"])

        assert result.exit_code == 0
        assert "Initialized" in result.output
        assert {op for op, _ in executor.calls} == {"list_calendars", "list_reminder_lists"}
        assert activity_lines(tmp_path / "activity.log") == []
