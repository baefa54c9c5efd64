"""Bridge between a structured calendar/task API and Apple Calendar/Reminders."""

__version__ = "0.1.0"
