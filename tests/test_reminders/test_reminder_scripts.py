"""Tests for Reminders.app queries and write operations."""

from datetime import datetime

import pytest

from calendar_bridge.models import OperationResult
from calendar_bridge.reminders import (
    create_reminder,
    delete_reminder,
    get_list_names,
    get_reminders,
)
from conftest import FakeExecutor


class TestGetListNames:
    """Tests for listing reminder lists."""

    @pytest.mark.asyncio
    async def test_names(self) -> None:
        """List names should be split from the osascript list."""
        executor = FakeExecutor({"list_reminder_lists": "Reminders, Shopping"})
        assert await get_list_names(executor) == ["Reminders", "Shopping"]
        assert 'tell application "Reminders"' in executor.calls[0][1]


class TestGetReminders:
    """Tests for reminder queries."""

    @pytest.mark.asyncio
    async def test_script(self) -> None:
        """Query should select incomplete reminders in the window up to the limit."""
        executor = FakeExecutor()
        await get_reminders(executor, "Shopping", days=7, limit=10)

        script = executor.scripts("get_reminders")[0]
        assert 'set targetList to list "Shopping"' in script
        assert "whose completed is false" in script
        assert "set endDate to startDate + (7 * days)" in script
        assert "if reminderCount >= 10 then exit repeat" in script

    @pytest.mark.asyncio
    async def test_parses_output(self) -> None:
        """Reminders with and without due dates should both parse."""
        executor = FakeExecutor(
            {
                "get_reminders": (
                    "Buy milk|2025-01-10 18:00:00|2025-01-10 18:00:00|Shopping|false, "
                    "Someday|||Shopping|false"
                )
            }
        )
        reminders = await get_reminders(executor, "Shopping")
        assert [r.title for r in reminders] == ["Buy milk", "Someday"]
        assert reminders[1].start_date == ""
        assert all(r.calendar == "Shopping" for r in reminders)


class TestCreateReminder:
    """Tests for adding reminders."""

    @pytest.mark.asyncio
    async def test_without_due_date(self) -> None:
        """Reminder without a due date should only set the name."""
        executor = FakeExecutor({"add_reminder": "SUCCESS"})
        assert await create_reminder(executor, "Shopping", "Buy milk") is True

        script = executor.scripts("add_reminder")[0]
        assert '{name:"Buy milk"}' in script
        assert "dueDate" not in script

    @pytest.mark.asyncio
    async def test_with_due_date(self) -> None:
        """Due date should be built from numeric components."""
        executor = FakeExecutor({"add_reminder": "SUCCESS"})
        await create_reminder(executor, "Shopping", "Buy milk", datetime(2025, 1, 15, 9, 0))

        script = executor.scripts("add_reminder")[0]
        assert '{name:"Buy milk", due date:dueDate}' in script
        assert "set day of dueDate to 15" in script
        assert f"set time of dueDate to {9 * 3600}" in script

    @pytest.mark.asyncio
    async def test_failed_status(self) -> None:
        """FAILED from the script should return False."""
        executor = FakeExecutor({"add_reminder": "FAILED"})
        assert await create_reminder(executor, "Shopping", "Buy milk") is False


class TestDeleteReminder:
    """Tests for deleting reminders by exact title."""

    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        """NOT_FOUND from the script should return not_found, not failed."""
        executor = FakeExecutor({"remove_reminder": "NOT_FOUND"})
        assert await delete_reminder(executor, "Shopping", "Nope") is OperationResult.NOT_FOUND

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        """Delete should target the first reminder with the exact name."""
        executor = FakeExecutor({"remove_reminder": "SUCCESS"})
        assert await delete_reminder(executor, "Shopping", "Buy milk") is OperationResult.SUCCESS
        assert 'whose name is "Buy milk"' in executor.scripts("remove_reminder")[0]
