"""Logging utilities for binreload.

This module provides a standalone structlog logger factory that writes
text-formatted or JSON-formatted logs to stderr or to an append-mode log
file opened with `open_log_stream`. Each logger
is self-contained and does not modify global structlog configuration.
"""

import logging
import sys
from os import getenv
from pathlib import Path
from typing import IO, Literal, cast

import structlog
from structlog.typing import FilteringBoundLogger

LogFormatType = Literal["json", "text"]

DEBUG_ENV = "BINRELOAD_DEBUG"


def _log_level_from_string(level: str, *, respect_env: bool = True) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, BINRELOAD_DEBUG overrides to DEBUG level.

    Returns:
        The logging level as an integer, INFO for unknown names.
    """
    if respect_env and getenv(DEBUG_ENV, None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def open_log_stream(log_file: str) -> IO[str]:
    """Open `log_file` for appending, creating its directory if needed.

    The caller owns the returned stream and should close it when done.
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return log_path.open("a")


def create_logger(
    *,
    level: str = "info",
    log_format: LogFormatType = "text",
    color: bool = True,
    stream: IO[str] | None = None,
) -> FilteringBoundLogger:
    """Create a standalone structlog logger.

    Logs go to `stream` (stderr by default). To log to a file, open it with
    `open_log_stream`, pass it as `stream` and close it when done.

    The log level is determined by (in order of precedence):
    1. BINRELOAD_DEBUG environment variable (if set, enables DEBUG level)
    2. The `level` parameter

    Args:
        level: Log level threshold (debug, info, warning, error).
        log_format: Output format, either "json" or "text".
        color: Whether text output uses ANSI colors.
        stream: Destination for log lines.

    Returns:
        A configured FilteringBoundLogger instance.
    """
    effective_level = _log_level_from_string(level)

    output = stream if stream is not None else sys.stderr

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        # dict_tracebacks for structured exception logging in JSON
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=color))

    wrapper_class = structlog.make_filtering_bound_logger(effective_level)

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.WriteLoggerFactory(file=output)(),
            processors=processors,
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )
