"""Settings models.

This module defines the validated settings that the CLI turns into a
ReloaderConfig:
- LogLevel / LogFormat: logging enums
- LoggingConfig: logging section
- Settings: top-level settings with duration parsing
"""

from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from ._duration import parse_duration


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
        color: Whether text logs written to stderr use colors.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    file: str = ""
    color: bool = True


class Settings(BaseModel):
    """Top-level settings, all durations in seconds.

    Duration fields accept either numbers of seconds or Go-style duration
    strings ("3s", "500ms").

    Attributes:
        restart_delay: Cooldown before restarting after an unexpected exit.
        kill_timeout: Seconds to wait after a reload's termination signal
            before force-killing. None disables escalation.
        debounce: Window used to group file system changes.
        logging: Logging configuration.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    restart_delay: float = 3.0
    kill_timeout: float | None = None
    debounce: float = 1.6
    logging: LoggingConfig = LoggingConfig()

    @field_validator("restart_delay", "kill_timeout", "debounce", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any, info: ValidationInfo) -> Any:  # pyright: ignore[reportExplicitAny, reportAny]
        if isinstance(value, str):
            # Blank disables escalation; other durations are required
            if not value.strip() and info.field_name == "kill_timeout":
                return None
            return parse_duration(value, field=info.field_name)
        return value

    @field_validator("restart_delay", "kill_timeout", "debounce")
    @classmethod
    def _non_negative(cls, value: float | None) -> float | None:
        if value is not None and value < 0:
            msg = "must not be negative"
            raise ValueError(msg)
        return value
