"""Async runner for the CLI.

Runs the supervisor next to a signal handler. SIGINT, SIGTERM and SIGQUIT
sent to binreload itself forward one termination signal to the active
instance and end the run.
"""

import signal
from dataclasses import dataclass

import anyio
from rich.console import Console
from structlog.typing import FilteringBoundLogger

from binreload.supervisor import ConsoleOutputSink, ReloaderConfig, Supervisor

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGQUIT)


@dataclass(frozen=True, slots=True)
class RunResult:
    """How a supervised run ended.

    Attributes:
        message: The fatal error or interruption description.
        signal: The signal that interrupted the run, if any.
    """

    message: str
    signal: int | None = None

    @property
    def interrupted(self) -> bool:
        """Return True if the run was stopped by a signal."""
        return self.signal is not None


async def run_supervisor(
    config: ReloaderConfig,
    *,
    logger: FilteringBoundLogger,
    console: Console | None = None,
) -> RunResult:
    """Supervise the configured executable until a fatal error or a signal.

    Args:
        config: Supervision settings.
        logger: Structured logger for diagnostics.
        console: Console for lifecycle events (stderr if None).

    Returns:
        The reason the run ended.
    """
    supervisor = Supervisor(
        config,
        output_sink=ConsoleOutputSink(console),
        logger=logger,
    )
    result: RunResult | None = None

    async with anyio.create_task_group() as tg:

        async def supervise() -> None:
            nonlocal result
            message = await supervisor.run()
            result = RunResult(message=message)
            tg.cancel_scope.cancel()

        async def handle_signals() -> None:
            nonlocal result
            with anyio.open_signal_receiver(*HANDLED_SIGNALS) as signals:
                async for signum in signals:
                    name = signal.Signals(signum).name
                    logger.info("signal_received", signal=name)
                    instance = supervisor.instance
                    if instance is not None:
                        instance.terminate()
                    result = RunResult(message=f"Interrupted by {name}", signal=signum)
                    tg.cancel_scope.cancel()
                    return

        tg.start_soon(handle_signals)
        tg.start_soon(supervise)

    if result is None:
        return RunResult(message="Supervisor stopped")
    return result
