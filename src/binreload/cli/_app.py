"""The command-line interface for binreload."""

from collections.abc import Sequence
from contextlib import ExitStack
from functools import partial
from typing import IO, Annotated, Literal

import anyio
from cyclopts import App, Parameter
from rich.console import Console

from binreload.config import Settings, load_settings
from binreload.exceptions import ConfigError
from binreload.supervisor import ReloaderConfig
from binreload.utils import create_logger, open_log_stream

from ._runner import run_supervisor
from ._shared import ExitCode, exit_with_error, get_error_console

LogLevelName = Literal["debug", "info", "warning", "error"]
LogFormatName = Literal["text", "json"]

HELP = "Run an executable and restart it whenever its file changes or it exits."


def _build_config(path: str, args: Sequence[str], settings: Settings) -> ReloaderConfig:
    """Combine the positional arguments with loaded settings."""
    return ReloaderConfig(
        path=path,
        args=tuple(args),
        restart_delay=settings.restart_delay,
        kill_timeout=settings.kill_timeout,
        watch_debounce=round(settings.debounce * 1000),
    )


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    """Create the binreload CLI application.

    Args:
        console: Console for help and regular output.
        error_console: Console for errors and lifecycle events (stderr).
        exit_on_error: Whether cyclopts exits on parse errors.

    Returns:
        The configured cyclopts App.
    """
    if console is None:
        console = Console()
    if error_console is None:
        error_console = get_error_console()

    app = App(
        name="binreload",
        help=HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.default
    def reload(  # noqa: PLR0913  # pyright: ignore[reportUnusedFunction]
        path: Annotated[
            str, Parameter(help="Path to the executable to run and watch.")
        ],
        *binary_args: Annotated[
            str,
            Parameter(
                help="Arguments passed to the executable (after --).",
                allow_leading_hyphen=True,
            ),
        ],
        restart_delay: Annotated[
            str | None,
            Parameter(
                name=["--restart-delay", "-d"],
                help="Delay before restarting after an unexpected exit, e.g. 3s or 500ms.",
            ),
        ] = None,
        kill_timeout: Annotated[
            str | None,
            Parameter(
                help="Force-kill a reloading instance still running after this long.",
            ),
        ] = None,
        debounce: Annotated[
            str | None,
            Parameter(help="Window for grouping file changes, e.g. 1600ms."),
        ] = None,
        log_level: Annotated[
            LogLevelName | None,
            Parameter(help="Log level."),
        ] = None,
        log_format: Annotated[
            LogFormatName | None,
            Parameter(help="Log format."),
        ] = None,
        log_file: Annotated[
            str | None,
            Parameter(help="Write logs to this file instead of stderr."),
        ] = None,
        no_color: Annotated[
            bool, Parameter(name="--no-color", help="Disable colored output")
        ] = False,
    ) -> None:
        """Run an executable and restart it when its file changes.

        The executable is restarted immediately after a change to its file,
        and after the restart delay when it exits on its own. Exits with
        status 1 if the executable cannot be started or watched.

        Args:
            path: Executable to run and watch.
            binary_args: Arguments passed to the executable.
            restart_delay: Cooldown after an unexpected exit.
            kill_timeout: Escalate to SIGKILL after this long.
            debounce: File change grouping window.
            log_level: Log level threshold.
            log_format: Log output format.
            log_file: Log file path.
            no_color: Disable colored output.
        """
        events_console = get_error_console(no_color=True) if no_color else error_console

        overrides: dict[str, object] = {
            "restart_delay": restart_delay,
            "kill_timeout": kill_timeout,
            "debounce": debounce,
            "logging.level": log_level,
            "logging.format": log_format,
            "logging.file": log_file,
            "logging.color": False if no_color else None,
        }

        try:
            settings = load_settings(overrides)
            config = _build_config(path, binary_args, settings)
        except ConfigError as e:
            exit_with_error(str(e), ExitCode.CONFIG_ERROR, console=events_console)

        with ExitStack() as stack:
            log_stream: IO[str] | None = None
            if settings.logging.file:
                try:
                    log_stream = stack.enter_context(
                        open_log_stream(settings.logging.file)
                    )
                except OSError as e:
                    msg = f"Cannot open log file '{settings.logging.file}': {e}"
                    exit_with_error(msg, ExitCode.CONFIG_ERROR, console=events_console)

            logger = create_logger(
                level=settings.logging.level.value,
                log_format=settings.logging.format.value,  # type: ignore[arg-type]
                color=settings.logging.color and log_stream is None,
                stream=log_stream,
            )

            result = anyio.run(
                partial(run_supervisor, config, logger=logger, console=events_console)
            )

        if result.interrupted:
            raise SystemExit(ExitCode.FATAL)
        exit_with_error(result.message, ExitCode.FATAL, console=events_console)

    return app


app = create_app()


def main() -> None:
    """Default entrypoint for the `binreload` CLI."""
    app()


if __name__ == "__main__":
    main()
