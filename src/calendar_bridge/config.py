"""Application configuration management.

Two documents live in the data directory:

- ``setting.json``: which Calendar.app calendar and Reminders.app list are
  in use. Rewritten wholesale on every save; a corrupt copy is moved aside
  to ``setting.json.backup.<unixMillis>``.
- ``config.json``: operational limits. Read-only at runtime; any problem
  reading it falls back to the built-in defaults.

Known limitation: the files are not locked, so two processes running at
once may race on them.
"""

import json
import logging
import time
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from calendar_bridge.models import ConnectionStatus

logger = logging.getLogger(__name__)

SETTING_FILE = "setting.json"
APP_CONFIG_FILE = "config.json"
ACTIVITY_LOG_FILE = "activity.log"
DEBUG_LOG_FILE = "debug.log"


class Settings(BaseSettings):
    """Process settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="CALENDAR_BRIDGE_",
        env_file=[
            ".env",  # Project-level defaults (lower priority)
            Path.home() / ".config" / "calendar-bridge" / ".env",  # User config (higher priority)
        ],
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: Path = Field(
        default=Path.home() / ".config" / "calendar-bridge",
        description="Directory holding setting.json, config.json and the log files",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_max_bytes: int = Field(
        default=5 * 1024 * 1024, ge=1024, description="Max size of debug.log before rotation"
    )
    log_backup_count: int = Field(
        default=3, ge=0, description="Number of rotated debug.log files to keep"
    )

    # AppleScript
    osascript_path: str = Field(default="osascript", description="osascript binary")
    command_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds to wait for a script (unset: wait indefinitely)",
    )

    @property
    def setting_path(self) -> Path:
        return self.data_dir / SETTING_FILE

    @property
    def app_config_path(self) -> Path:
        return self.data_dir / APP_CONFIG_FILE

    @property
    def activity_log_path(self) -> Path:
        return self.data_dir / ACTIVITY_LOG_FILE

    @property
    def debug_log_path(self) -> Path:
        return self.data_dir / DEBUG_LOG_FILE

    def ensure_data_dir(self) -> None:
        """Create the data directory if it doesn't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


class CalendarConfig(BaseModel):
    """Selected calendar and reminder list.

    A name stored here was valid when it was chosen but may since have been
    renamed or deleted in Calendar.app/Reminders.app.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    schedule_calendar: str | None = Field(default=None, alias="scheduleCalendar")
    reminder_calendar: str | None = Field(default=None, alias="reminderCalendar")

    def to_json(self) -> str:
        data = self.model_dump(by_alias=True, exclude_none=True)
        return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False)


class AppConfig(BaseModel):
    """Operational limits for queries."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    max_events: int = Field(default=1000, gt=0, alias="maxEvents")
    default_days: int = Field(default=1, ge=1, alias="defaultDays")
    max_days: int = Field(default=365, ge=1, alias="maxDays")

    @model_validator(mode="after")
    def _check_window(self) -> "AppConfig":
        if self.max_days < self.default_days:
            raise ValueError("maxDays must be greater than or equal to defaultDays")
        return self


class PersistenceError(Exception):
    """Raised when setting.json could not be written."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"Failed to save {path}: {message}")
        self.path = path


def needs_setup(config: CalendarConfig) -> bool:
    """True when neither a calendar nor a reminder list is selected."""
    return not config.schedule_calendar and not config.reminder_calendar


class ConfigStore:
    """Owns the in-memory configuration and its on-disk documents."""

    def __init__(self, setting_path: Path, app_config_path: Path) -> None:
        self.setting_path = setting_path
        self.app_config_path = app_config_path
        self._config = CalendarConfig()
        self._app_config = AppConfig()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConfigStore":
        return cls(settings.setting_path, settings.app_config_path)

    @property
    def config(self) -> CalendarConfig:
        """A copy of the current configuration."""
        return self._config.model_copy()

    @property
    def app_config(self) -> AppConfig:
        return self._app_config

    def load(self) -> CalendarConfig:
        """
        Read setting.json into memory.

        A missing or blank file is replaced by an empty document. A file
        that is not a valid document is moved to a timestamped backup and
        replaced. Unreadable files are logged and treated as empty.
        Corruption never raises.
        """
        logger.info("Loading settings", extra={"details": {"path": str(self.setting_path)}})
        try:
            data = self.setting_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("Settings file not found, creating it")
            self._config = CalendarConfig()
            self._persist_quietly()
            return self.config
        except (OSError, UnicodeDecodeError) as e:
            logger.error(
                "Could not read settings file",
                extra={"details": {"path": str(self.setting_path), "error": str(e)}},
            )
            self._config = CalendarConfig()
            return self.config

        if not data.strip():
            logger.info("Settings file is empty, initializing it")
            self._config = CalendarConfig()
            self._persist_quietly()
            return self.config

        try:
            self._config = CalendarConfig.model_validate_json(data)
        except ValidationError as e:
            backup = self._backup_corrupt()
            logger.error(
                "Settings file is corrupt, starting from an empty configuration",
                extra={
                    "details": {
                        "path": str(self.setting_path),
                        "backup": str(backup) if backup else None,
                        "error": str(e),
                    }
                },
            )
            self._config = CalendarConfig()
            self._persist_quietly()
            return self.config

        logger.info(
            "Settings loaded",
            extra={"details": self._config.model_dump(by_alias=True, exclude_none=True)},
        )
        return self.config

    def load_app_config(self) -> AppConfig:
        """Read config.json, falling back to defaults on any problem."""
        try:
            data = self.app_config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No config.json, using default limits")
            self._app_config = AppConfig()
            return self._app_config
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(
                "Could not read config.json, using default limits",
                extra={"details": {"path": str(self.app_config_path), "error": str(e)}},
            )
            self._app_config = AppConfig()
            return self._app_config

        if not data.strip():
            self._app_config = AppConfig()
            return self._app_config

        try:
            self._app_config = AppConfig.model_validate_json(data)
        except ValidationError as e:
            logger.warning(
                "Invalid config.json, using default limits",
                extra={"details": {"path": str(self.app_config_path), "error": str(e)}},
            )
            self._app_config = AppConfig()
        return self._app_config

    def save(self, config: CalendarConfig | None = None) -> None:
        """
        Write the configuration to setting.json.

        Args:
            config: New configuration to adopt; the current one when None.

        Raises:
            PersistenceError: If the file could not be written. The
                in-memory configuration is kept either way.
        """
        if config is not None:
            self._config = config.model_copy()

        try:
            self.setting_path.parent.mkdir(parents=True, exist_ok=True)
            self.setting_path.write_text(self._config.to_json() + "\n", encoding="utf-8")
        except OSError as e:
            logger.error(
                "Failed to save settings",
                extra={"details": {"path": str(self.setting_path), "error": str(e)}},
            )
            raise PersistenceError(self.setting_path, str(e)) from e

        logger.info("Settings saved", extra={"details": {"path": str(self.setting_path)}})

    def update(
        self,
        *,
        schedule_calendar: str | None = None,
        reminder_calendar: str | None = None,
    ) -> CalendarConfig:
        """Set the given names in memory; None leaves a field unchanged."""
        changes = {}
        if schedule_calendar:
            changes["schedule_calendar"] = schedule_calendar
        if reminder_calendar:
            changes["reminder_calendar"] = reminder_calendar
        self._config = self._config.model_copy(update=changes)
        return self.config

    def clear(self, *, schedule: bool = False, reminder: bool = False) -> CalendarConfig:
        """Drop the named fields from the in-memory configuration."""
        changes = {}
        if schedule:
            changes["schedule_calendar"] = None
        if reminder:
            changes["reminder_calendar"] = None
        self._config = self._config.model_copy(update=changes)
        return self.config

    def status(self) -> ConnectionStatus:
        return ConnectionStatus(
            schedule_connected=bool(self._config.schedule_calendar),
            reminder_connected=bool(self._config.reminder_calendar),
            schedule_name=self._config.schedule_calendar,
            reminder_name=self._config.reminder_calendar,
        )

    def _backup_corrupt(self) -> Path | None:
        backup = self.setting_path.with_name(
            f"{self.setting_path.name}.backup.{int(time.time() * 1000)}"
        )
        try:
            self.setting_path.rename(backup)
        except OSError as e:
            logger.error(
                "Could not back up corrupt settings file",
                extra={"details": {"path": str(self.setting_path), "error": str(e)}},
            )
            return None
        return backup

    def _persist_quietly(self) -> None:
        """Write the current config during load, where failures only get logged."""
        try:
            self.save()
        except PersistenceError:
            # already logged by save(); loading stays self-healing
            pass
