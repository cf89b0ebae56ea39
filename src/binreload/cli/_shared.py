"""Shared CLI utilities.

This module provides:
- Standardized exit codes
- Console utilities for error output
"""

from enum import IntEnum
from typing import Never

from rich.console import Console
from rich.markup import escape

__all__ = [
    "ExitCode",
    "exit_with_error",
    "get_error_console",
]


class ExitCode(IntEnum):
    """Exit codes for the binreload CLI."""

    SUCCESS = 0
    FATAL = 1
    CONFIG_ERROR = 2


def get_error_console(*, no_color: bool = False) -> Console:
    """Get a Rich console configured for error output to stderr.

    Args:
        no_color: Disable colored output.

    Returns:
        Console instance writing to stderr.
    """
    return Console(stderr=True, no_color=no_color)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.FATAL,
    *,
    console: Console | None = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Args:
        message: The error message to display.
        code: The exit code to use (defaults to FATAL).
        console: Optional Rich console for output. If not provided,
            a new stderr console will be created.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()

    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
    raise SystemExit(code)
