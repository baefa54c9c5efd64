"""Decoding of osascript list output into typed records.

Query scripts return an AppleScript list of strings, which osascript prints
joined by ", ". Each event/reminder string carries five pipe-separated
fields::

    title|startDate|endDate|calendarName|allDay

Known limitation: the record delimiter is a plain comma, so a title (or a
calendar name) that itself contains a comma splits into broken records.
This mirrors the upstream text protocol and is intentionally not
reinterpreted here; the broken fragments are dropped like any other
short record.

A ``|`` inside a title is worse: the record gains a field instead of
losing one, so it is kept with every later field shifted by one (the
calendar column holds the end date and ``all_day`` reads false). Only the
first five fields are read; extra fields are ignored.
"""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

RECORD_SEP = ","
FIELD_SEP = "|"
FIELD_COUNT = 5


@dataclass(frozen=True)
class CalendarEvent:
    """An event from Calendar.app or a reminder from Reminders.app.

    Dates are kept as the strings the script returned; they are not
    re-parsed.
    """

    title: str
    start_date: str
    end_date: str
    calendar: str
    all_day: bool = False

    def __str__(self) -> str:
        suffix = " (all day)" if self.all_day else ""
        when = self.start_date or "no date"
        return f"{when}: {self.title}{suffix}"


@dataclass
class ParseResult:
    """Outcome of decoding one script response."""

    records: list[CalendarEvent] = field(default_factory=list)
    dropped: int = 0
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> list[CalendarEvent]:
        """Return the decoded records, or an empty list if decoding failed."""
        if self.error is not None:
            return []
        return self.records


def _parse_record(record: str) -> CalendarEvent | None:
    parts = record.split(FIELD_SEP)
    if len(parts) < FIELD_COUNT:
        return None
    title = parts[0].strip()
    if not title:
        return None
    return CalendarEvent(
        title=title,
        start_date=parts[1].strip(),
        end_date=parts[2].strip(),
        calendar=parts[3].strip(),
        all_day=parts[4].strip() == "true",
    )


def parse_records(raw: str | None) -> ParseResult:
    """Decode raw script output into a :class:`ParseResult`. Never raises."""
    result = ParseResult()
    if raw is None or not raw.strip():
        return result

    try:
        for record in raw.split(RECORD_SEP):
            if not record.strip():
                continue
            event = _parse_record(record)
            if event is None:
                result.dropped += 1
                continue
            result.records.append(event)
    except Exception as e:  # degrade to an empty result, see parse_events
        result.error = e
    return result


def parse_events(raw: str | None) -> list[CalendarEvent]:
    """Decode raw script output into events, degrading to [] on failure.

    Malformed records are dropped individually; an unexpected decoding
    error empties the whole result. Either way the problem is written to
    the diagnostic log and nothing is raised.
    """
    result = parse_records(raw)
    if result.error is not None:
        logger.error(
            "Failed to parse AppleScript output",
            extra={
                "details": {
                    "error": repr(result.error),
                    "output": (raw or "")[:200],
                }
            },
        )
    elif result.dropped:
        logger.warning(
            "Dropped malformed records",
            extra={"details": {"dropped": result.dropped, "kept": len(result.records)}},
        )
    return result.unwrap()


def parse_name_list(raw: str | None) -> list[str]:
    """Decode a comma-joined list of calendar or reminder-list names."""
    if raw is None or not raw.strip():
        return []
    names = [name.strip().replace('"', "") for name in raw.split(RECORD_SEP)]
    return [name for name in names if name]
