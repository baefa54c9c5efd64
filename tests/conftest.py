"""Pytest fixtures for calendar-bridge tests."""

import json
from pathlib import Path

import pytest

from calendar_bridge.activity import ActivityLog
from calendar_bridge.bridge import CalendarBridge
from calendar_bridge.config import ConfigStore
from calendar_bridge.logging import reset_logging


class FakeExecutor:
    """Stand-in for CommandExecutor that never spawns osascript.

    ``responses`` maps an operation name to the output to return, or to an
    exception to raise. Unknown operations return "".
    """

    def __init__(self, responses: dict | None = None) -> None:
        self.responses: dict = dict(responses or {})
        self.calls: list[tuple[str, str]] = []

    async def execute(self, script: str, *, operation: str = "applescript") -> str:
        self.calls.append((operation, script))
        response = self.responses.get(operation, "")
        if isinstance(response, Exception):
            raise response
        return response

    def scripts(self, operation: str) -> list[str]:
        return [script for op, script in self.calls if op == operation]


def write_settings(data_dir: Path, **config: str) -> Path:
    path = data_dir / "setting.json"
    path.write_text(json.dumps(config))
    return path


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging()


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor(
        {
            "list_calendars": "Work, Home",
            "list_reminder_lists": "Reminders, Shopping",
        }
    )


@pytest.fixture
def store(tmp_path: Path) -> ConfigStore:
    return ConfigStore(tmp_path / "setting.json", tmp_path / "config.json")


@pytest.fixture
def activity_path(tmp_path: Path) -> Path:
    return tmp_path / "activity.log"


@pytest.fixture
def bridge(store: ConfigStore, fake_executor: FakeExecutor, activity_path: Path) -> CalendarBridge:
    """Bridge over a fake executor, with both categories configured."""
    store.load_app_config()
    store.update(schedule_calendar="Work", reminder_calendar="Reminders")
    return CalendarBridge(store, fake_executor, ActivityLog(activity_path))


def activity_lines(path: Path) -> list[str]:
    if not path.exists():
        return []
    return [line for line in path.read_text().splitlines() if line.strip()]
