"""Tests for AppleScript string, date and preview helpers."""

from datetime import datetime

from calendar_bridge.applescript import (
    applescript_date,
    escape_applescript_string,
    script_preview,
)


class TestEscapeAppleScriptString:
    """Tests for AppleScript string escaping."""

    def test_escape_quotes(self) -> None:
        """Test that double quotes are escaped."""
        result = escape_applescript_string('Hello "World"')
        assert result == 'Hello \\"World\\"'

    def test_escape_backslashes(self) -> None:
        """Test that backslashes are escaped."""
        result = escape_applescript_string("path\\to\\file")
        assert result == "path\\\\to\\\\file"

    def test_escape_combined(self) -> None:
        """Test escaping both quotes and backslashes."""
        result = escape_applescript_string('Say "Hello\\World"')
        assert result == 'Say \\"Hello\\\\World\\"'

    def test_control_characters_become_spaces(self) -> None:
        """Test that newlines, tabs and carriage returns become spaces."""
        result = escape_applescript_string("line1\nline2\tend\r")
        assert result == "line1 line2 end "

    def test_quote_injection_stays_inside_literal(self) -> None:
        """A title trying to close the string literal is neutralised."""
        result = escape_applescript_string('x" & (do shell script "rm -rf ~") & "')
        assert '" &' not in result.replace('\\"', "")

    def test_empty_string(self) -> None:
        """Test that an empty string stays empty."""
        assert escape_applescript_string("") == ""


class TestAppleScriptDate:
    """Tests for locale-independent date construction."""

    def test_components(self) -> None:
        """Test that the date is built from numeric components."""
        block = applescript_date("startDate", datetime(2024, 1, 31, 14, 30, 15))
        lines = block.splitlines()
        assert lines[0] == "set startDate to current date"
        assert lines[1] == "set day of startDate to 1"
        assert "set year of startDate to 2024" in lines
        assert "set month of startDate to 1" in lines
        assert "set day of startDate to 31" in lines
        assert lines[-1] == f"set time of startDate to {14 * 3600 + 30 * 60 + 15}"

    def test_day_reset_precedes_month(self) -> None:
        """Day is reset before the month so the 31st never overflows."""
        lines = applescript_date("d", datetime(2024, 2, 29)).splitlines()
        assert lines.index("set day of d to 1") < lines.index("set month of d to 2")
        assert lines.index("set month of d to 2") < lines.index("set day of d to 29")

    def test_midnight(self) -> None:
        """Test that midnight sets time to zero."""
        block = applescript_date("d", datetime(2024, 6, 1))
        assert block.endswith("set time of d to 0")


class TestScriptPreview:
    """Tests for log previews of scripts."""

    def test_whitespace_collapsed(self) -> None:
        """Test that runs of whitespace collapse to one space."""
        assert script_preview('tell application "Calendar"\n    return 1\nend tell') == (
            'tell application "Calendar" return 1 end tell'
        )

    def test_truncated(self) -> None:
        """Test that long scripts are cut to 100 characters plus an ellipsis."""
        preview = script_preview("x" * 500)
        assert len(preview) == 103
        assert preview.endswith("...")

    def test_short_script_untouched(self) -> None:
        """Test that short scripts are returned as-is."""
        assert script_preview("return 1") == "return 1"
