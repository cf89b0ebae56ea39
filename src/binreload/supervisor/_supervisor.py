"""Supervision engine for a single executable.

This module provides the Supervisor class. Launch/exit watchers, the file
notifier and cooldown timers run as anyio tasks that only produce events
into one unbounded memory stream. A single decision loop consumes that
stream in arrival order and is the only code that reads or writes the
SupervisorStatus record, so no locks are needed.
"""

import math
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import final

import anyio
import anyio.abc
import pendulum
import structlog
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from structlog.typing import FilteringBoundLogger

from binreload.exceptions import LaunchError, SupervisorError, WatchError

from ._launcher import ProcessLauncher
from ._models import (
    ExitStatus,
    FatalError,
    FileChanged,
    LifecycleEvent,
    LifecycleEventType,
    ProcessExited,
    ProcessStarted,
    ReloaderConfig,
    RestartCooldownElapsed,
    SupervisorEvent,
    SupervisorState,
    SupervisorStatus,
)
from ._notifier import WatchfilesNotifier
from ._output import ConsoleOutputSink
from ._protocol import Instance, Launcher, Notifier, OutputSink


def _get_timestamp() -> str:
    """Get current timestamp in ISO 8601 format."""
    return pendulum.now("UTC").to_iso8601_string()


@final
class Supervisor:
    """Keeps one instance of an executable running and fresh.

    The instance is restarted immediately when the watched file changes and
    after `restart_delay` seconds when it exits on its own. `run()` only
    returns on a fatal error (launch failure or unwatchable file).

    Attributes:
        config: Immutable supervision settings.
        status: State record, mutated only by the decision loop.
    """

    __slots__ = (
        "_launcher",
        "_logger",
        "_notifier",
        "_output_sink",
        "_send",
        "_task_group",
        "config",
        "status",
    )

    def __init__(
        self,
        config: ReloaderConfig,
        *,
        launcher: Launcher | None = None,
        notifier: Notifier | None = None,
        output_sink: OutputSink | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the supervisor.

        Args:
            config: What to run and how to restart it.
            launcher: Starts instances. Uses ProcessLauncher if None.
            notifier: Watches the executable. Uses WatchfilesNotifier if None.
            output_sink: Receives lifecycle events. Uses ConsoleOutputSink if None.
            logger: Structured logger. Uses the "binreload" logger if None.
        """
        self.config = config
        self.status = SupervisorStatus()
        self._logger: FilteringBoundLogger = (
            logger or structlog.get_logger("binreload")
        ).bind(path=config.path)
        self._launcher: Launcher = launcher or ProcessLauncher()
        self._notifier: Notifier = notifier or WatchfilesNotifier(
            debounce=config.watch_debounce, logger=self._logger
        )
        self._output_sink: OutputSink = output_sink or ConsoleOutputSink()
        self._send: MemoryObjectSendStream[SupervisorEvent] | None = None
        self._task_group: anyio.abc.TaskGroup | None = None

    @property
    def state(self) -> SupervisorState:
        """Return the current supervisor state."""
        return self.status.state

    @property
    def instance(self) -> Instance | None:
        """Return the active instance, if any."""
        return self.status.instance

    async def run(self) -> str:
        """Launch the executable, watch it, and supervise until a fatal error.

        Returns:
            The fatal error message that stopped supervision.

        Raises:
            SupervisorError: If this supervisor is already running.
        """
        if self._task_group is not None:
            msg = "Supervisor is already running"
            raise SupervisorError(msg)

        self.status = SupervisorStatus()
        send, receive = anyio.create_memory_object_stream[SupervisorEvent](math.inf)

        try:
            async with anyio.create_task_group() as tg:
                self._task_group = tg
                self._send = send
                self._logger.info("supervisor_starting", args=list(self.config.args))
                try:
                    self._launch()
                    self._spawn(self._watch_file, send.clone())
                    message = await self._decision_loop(receive)
                finally:
                    tg.cancel_scope.cancel()
                    send.close()
                    receive.close()
        finally:
            self._task_group = None
            self._send = None

        return message

    async def _decision_loop(
        self, receive: MemoryObjectReceiveStream[SupervisorEvent]
    ) -> str:
        while True:
            event = await receive.receive()
            self._logger.debug(
                "event_received",
                kind=type(event).__name__,
                state=self.state.value,
            )

            if isinstance(event, FatalError):
                await self._on_fatal_error(event.message)
                return event.message

            if isinstance(event, FileChanged):
                await self._on_file_changed()
            elif isinstance(event, ProcessStarted):
                await self._on_process_started(event.instance)
            elif isinstance(event, ProcessExited):
                await self._on_process_exited(event.instance, event.status)
            elif isinstance(event, RestartCooldownElapsed):
                self._on_cooldown_elapsed()

    async def _on_file_changed(self) -> None:
        status = self.status

        if status.cooldown_pending:
            # The pending restart will pick up the new file
            self._logger.info("change_during_cooldown")
            return

        if status.expected_exit:
            self._logger.debug("change_while_awaiting_exit")
            return

        if status.launching:
            # Terminated as soon as the launch reports in
            status.expected_exit = True
            self._logger.info("change_during_launch")
            await self._emit(
                LifecycleEventType.RELOADING,
                message="File changed while starting",
            )
            return

        instance = status.instance
        if instance is None:
            self._logger.info("file_changed_no_instance")
            self._launch()
            return

        self._logger.info("file_changed", pid=instance.pid)
        status.expected_exit = True
        await self._emit(
            LifecycleEventType.RELOADING,
            pid=instance.pid,
            message="File changed, stopping instance",
        )
        self._terminate(instance)

    async def _on_process_started(self, instance: Instance) -> None:
        status = self.status
        status.launching = False
        status.instance = instance

        self._logger.info("instance_started", pid=instance.pid)
        await self._emit(
            LifecycleEventType.STARTED,
            pid=instance.pid,
            message=" ".join(self.config.command),
        )

        if status.expected_exit:
            self._terminate(instance)

    async def _on_process_exited(self, instance: Instance, exit_status: ExitStatus) -> None:
        status = self.status

        if instance is not status.instance:
            self._logger.debug(
                "stale_exit_ignored",
                pid=instance.pid,
                exit=exit_status.describe(),
            )
            return

        status.instance = None
        status.last_exit = exit_status

        if status.expected_exit:
            status.expected_exit = False
            self._logger.info(
                "instance_stopped", pid=instance.pid, exit=exit_status.describe()
            )
            await self._emit(
                LifecycleEventType.STOPPED,
                pid=instance.pid,
                exit=exit_status.describe(),
                message="Exited for reload",
            )
            self._launch()
            return

        delay = self.config.restart_delay
        status.crash_count += 1
        status.cooldown_pending = True
        self._logger.warning(
            "instance_exited_unexpectedly",
            pid=instance.pid,
            exit=exit_status.describe(),
            restart_in=delay,
        )
        await self._emit(
            LifecycleEventType.CRASHED,
            pid=instance.pid,
            exit=exit_status.describe(),
            message="Exited unexpectedly",
        )
        await self._emit(
            LifecycleEventType.RESTARTING,
            message=f"Restarting in {delay:.1f}s",
        )
        self._spawn(self._cooldown, self._sender(), delay)

    def _on_cooldown_elapsed(self) -> None:
        if not self.status.cooldown_pending:
            self._logger.debug("stale_cooldown_ignored")
            return

        self.status.cooldown_pending = False
        self._logger.info("cooldown_elapsed")
        self._launch()

    async def _on_fatal_error(self, message: str) -> None:
        status = self.status
        status.stopped = True
        self._logger.error("supervisor_failed", error=message)
        await self._emit(LifecycleEventType.FAILED, message=message)

        instance = status.instance
        if instance is not None and not status.expected_exit:
            self._terminate(instance, escalate=False)

    def _launch(self) -> None:
        status = self.status
        if status.launching or status.instance is not None:
            self._logger.debug("launch_skipped", state=self.state.value)
            return

        status.launching = True
        status.launch_count += 1
        self._logger.info("launching", attempt=status.launch_count)
        self._spawn(self._run_instance, self._sender())

    def _terminate(self, instance: Instance, *, escalate: bool = True) -> None:
        self._logger.info("terminating_instance", pid=instance.pid)
        try:
            instance.terminate()
        except OSError as e:
            self._logger.warning(
                "terminate_failed", pid=instance.pid, error=str(e)
            )
            return

        kill_timeout = self.config.kill_timeout
        if escalate and kill_timeout is not None:
            self._spawn(self._escalate, instance, kill_timeout)

    async def _run_instance(self, send: MemoryObjectSendStream[SupervisorEvent]) -> None:
        async with send:
            try:
                instance = await self._launcher.start(self.config.path, self.config.args)
            except LaunchError as e:
                await send.send(FatalError(str(e)))
                return

            await send.send(ProcessStarted(instance))
            exit_status = await instance.wait()
            await send.send(ProcessExited(instance, exit_status))

    async def _watch_file(self, send: MemoryObjectSendStream[SupervisorEvent]) -> None:
        async with send:
            try:
                async for _ in self._notifier.watch(Path(self.config.path)):
                    await send.send(FileChanged())
            except WatchError as e:
                await send.send(FatalError(str(e)))

    async def _cooldown(
        self, send: MemoryObjectSendStream[SupervisorEvent], delay: float
    ) -> None:
        async with send:
            await anyio.sleep(delay)
            await send.send(RestartCooldownElapsed())

    async def _escalate(self, instance: Instance, timeout: float) -> None:
        await anyio.sleep(timeout)
        if instance.running:
            self._logger.warning("force_killing_instance", pid=instance.pid, after=timeout)
            try:
                instance.kill()
            except OSError as e:
                self._logger.warning("kill_failed", pid=instance.pid, error=str(e))

    async def _emit(
        self,
        event_type: LifecycleEventType,
        *,
        pid: int | None = None,
        exit: str | None = None,  # noqa: A002
        message: str | None = None,
    ) -> None:
        event = LifecycleEvent(
            event_type=event_type,
            timestamp=_get_timestamp(),
            pid=pid,
            exit=exit,
            message=message,
        )
        try:
            await self._output_sink.write_event(event)
        except Exception:  # noqa: BLE001
            # Output sink errors should not stop supervision
            self._logger.exception("output_sink_failed", event_type=event_type.value)

    def _spawn(self, func: Callable[..., Awaitable[object]], *args: object) -> None:
        if self._task_group is None:
            msg = "Supervisor is not running"
            raise SupervisorError(msg)
        self._task_group.start_soon(func, *args)

    def _sender(self) -> MemoryObjectSendStream[SupervisorEvent]:
        if self._send is None:
            msg = "Supervisor is not running"
            raise SupervisorError(msg)
        return self._send.clone()
