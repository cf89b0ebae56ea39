"""Data models for the supervisor.

This module defines the core data types for supervising one executable:
- ReloaderConfig: Immutable supervision settings
- ExitStatus: How an instance terminated
- FileChanged, ProcessStarted, ProcessExited, RestartCooldownElapsed,
  FatalError: Events flowing through the decision loop
- SupervisorState / SupervisorStatus: Loop-owned state record
- LifecycleEventType / LifecycleEvent: Records rendered for the operator
"""

from dataclasses import dataclass
from enum import StrEnum
from signal import Signals
from typing import Self

from binreload.exceptions import ConfigError

from ._protocol import Instance

DEFAULT_RESTART_DELAY = 3.0
DEFAULT_WATCH_DEBOUNCE_MS = 1600


@dataclass(frozen=True, slots=True)
class ReloaderConfig:
    """Configuration for the supervised executable.

    Read once at startup and never mutated.

    Attributes:
        path: Executable to run; also the file that is watched.
        args: Extra arguments passed to the executable.
        restart_delay: Seconds to wait before restarting after a crash.
        kill_timeout: Seconds to wait after a reload's termination signal
            before force-killing. None never escalates.
        watch_debounce: Milliseconds used to group file system changes.
    """

    path: str
    args: tuple[str, ...] = ()
    restart_delay: float = DEFAULT_RESTART_DELAY
    kill_timeout: float | None = None
    watch_debounce: int = DEFAULT_WATCH_DEBOUNCE_MS

    def __post_init__(self) -> None:
        if not self.path.strip():
            msg = "Executable path must not be empty"
            raise ConfigError(msg, field="path")
        if self.restart_delay < 0:
            msg = f"Restart delay must not be negative, got {self.restart_delay}"
            raise ConfigError(msg, field="restart_delay")
        if self.kill_timeout is not None and self.kill_timeout < 0:
            msg = f"Kill timeout must not be negative, got {self.kill_timeout}"
            raise ConfigError(msg, field="kill_timeout")
        if self.watch_debounce < 0:
            msg = f"Watch debounce must not be negative, got {self.watch_debounce}"
            raise ConfigError(msg, field="watch_debounce")

    @property
    def command(self) -> tuple[str, ...]:
        """Return the full command line."""
        return (self.path, *self.args)


@dataclass(frozen=True, slots=True)
class ExitStatus:
    """Termination outcome of an instance.

    Exactly one of `code` and `signal` is set once the outcome is known.

    Attributes:
        code: Exit code for a normal exit.
        signal: Signal number if the process was killed by a signal.
    """

    code: int | None = None
    signal: int | None = None

    @classmethod
    def from_returncode(cls, returncode: int) -> Self:
        """Build from a subprocess return code (negative means signalled)."""
        if returncode < 0:
            return cls(signal=-returncode)
        return cls(code=returncode)

    @property
    def success(self) -> bool:
        """Return True for a zero exit code."""
        return self.code == 0

    def describe(self) -> str:
        """Return a human-readable description of the outcome."""
        if self.signal is not None:
            try:
                name = Signals(self.signal).name
            except ValueError:
                name = str(self.signal)
            return f"signal {name}"
        if self.code is not None:
            return f"exit code {self.code}"
        return "unknown status"


@dataclass(frozen=True, slots=True)
class FileChanged:
    """The watched file was modified or replaced."""


@dataclass(frozen=True, slots=True)
class ProcessStarted:
    """A launch succeeded.

    Attributes:
        instance: Handle of the new instance.
    """

    instance: Instance


@dataclass(frozen=True, slots=True)
class ProcessExited:
    """An instance terminated.

    Attributes:
        instance: Handle of the instance that exited.
        status: How it exited.
    """

    instance: Instance
    status: ExitStatus


@dataclass(frozen=True, slots=True)
class RestartCooldownElapsed:
    """The post-crash cooldown timer fired."""


@dataclass(frozen=True, slots=True)
class FatalError:
    """An unrecoverable condition; ends the decision loop.

    Attributes:
        message: Human-readable description reported to the operator.
    """

    message: str


SupervisorEvent = (
    FileChanged | ProcessStarted | ProcessExited | RestartCooldownElapsed | FatalError
)


class SupervisorState(StrEnum):
    """Supervisor states, derived from SupervisorStatus.

    - NO_INSTANCE: Nothing running and nothing scheduled
    - STARTING: A launch is in flight
    - RUNNING: An instance is running
    - AWAITING_EXIT: A termination was sent; waiting for the exit
    - COOLDOWN: The instance crashed; a restart is scheduled
    - STOPPED: The loop ended on a fatal error
    """

    NO_INSTANCE = "no_instance"
    STARTING = "starting"
    RUNNING = "running"
    AWAITING_EXIT = "awaiting_exit"
    COOLDOWN = "cooldown"
    STOPPED = "stopped"


@dataclass(slots=True)
class SupervisorStatus:
    """Mutable state record owned by the decision loop.

    Attributes:
        instance: The active instance, if any.
        expected_exit: A termination was requested by the supervisor and its
            exit has not been observed yet.
        launching: A launch has been requested but not yet reported.
        cooldown_pending: A crash cooldown timer is outstanding.
        stopped: The loop has ended.
        launch_count: Number of launches requested.
        crash_count: Number of unexpected exits observed.
        last_exit: Outcome of the most recent exit.
    """

    instance: Instance | None = None
    expected_exit: bool = False
    launching: bool = False
    cooldown_pending: bool = False
    stopped: bool = False
    launch_count: int = 0
    crash_count: int = 0
    last_exit: ExitStatus | None = None

    @property
    def state(self) -> SupervisorState:
        """Return the state implied by the current flags."""
        if self.stopped:
            return SupervisorState.STOPPED
        if self.cooldown_pending:
            return SupervisorState.COOLDOWN
        if self.launching:
            return SupervisorState.STARTING
        if self.instance is None:
            return SupervisorState.NO_INSTANCE
        if self.expected_exit:
            return SupervisorState.AWAITING_EXIT
        return SupervisorState.RUNNING


class LifecycleEventType(StrEnum):
    """Types of lifecycle events shown to the operator.

    - STARTED: An instance was spawned
    - RELOADING: The watched file changed; the instance is being replaced
    - STOPPED: An instance exited after a requested termination
    - CRASHED: An instance exited on its own
    - RESTARTING: A crashed instance will be restarted after the cooldown
    - FAILED: Supervision stopped on a fatal error
    """

    STARTED = "started"
    RELOADING = "reloading"
    STOPPED = "stopped"
    CRASHED = "crashed"
    RESTARTING = "restarting"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class LifecycleEvent:
    """Immutable lifecycle event record.

    Attributes:
        event_type: Type of lifecycle event.
        timestamp: ISO 8601 formatted timestamp.
        pid: Process ID if applicable.
        exit: Description of the exit, if the instance terminated.
        message: Optional human-readable message.
    """

    event_type: LifecycleEventType
    timestamp: str
    pid: int | None = None
    exit: str | None = None
    message: str | None = None
