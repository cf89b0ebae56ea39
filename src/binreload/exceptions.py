"""binreload exceptions."""

from pathlib import Path


class ReloaderError(Exception):
    """Base exception for binreload errors."""


class ConfigError(ReloaderError):
    """Raised when configuration values are missing or invalid.

    Attributes:
        field: Name of the offending setting, if known.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        """Initialize with error message and field context.

        Args:
            message: Human-readable error message.
            field: Name of the offending setting.
        """
        super().__init__(message)
        self.field: str | None = field


class DurationError(ConfigError, ValueError):
    """Raised when a duration string cannot be parsed.

    Attributes:
        value: The string that failed to parse.
    """

    def __init__(
        self, message: str, *, value: str, field: str | None = None
    ) -> None:
        """Initialize with error message and the rejected value."""
        super().__init__(message, field=field)
        self.value: str = value


class SupervisorError(ReloaderError):
    """Base exception for supervisor errors."""


class LaunchError(SupervisorError):
    """Raised when the executable cannot be started.

    Attributes:
        path: The executable that failed to start.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and launch context.

        Args:
            message: Human-readable error message.
            path: The executable that failed to start.
            cause: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.path: str | None = path
        self.cause: Exception | None = cause


class WatchError(SupervisorError):
    """Raised when a file watch cannot be established.

    Attributes:
        path: The file that could not be watched.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and watch context.

        Args:
            message: Human-readable error message.
            path: The file that could not be watched.
            cause: The underlying exception, if any.
        """
        super().__init__(message)
        self.path: Path | None = path
        self.cause: Exception | None = cause
