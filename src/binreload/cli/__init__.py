"""The binreload command-line interface."""

from ._app import app, create_app, main
from ._runner import RunResult, run_supervisor
from ._shared import ExitCode, exit_with_error

__all__ = [
    "ExitCode",
    "RunResult",
    "app",
    "create_app",
    "exit_with_error",
    "main",
    "run_supervisor",
]
