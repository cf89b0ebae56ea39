"""Supervisor package for live-reloading a single executable.

Runs one executable, watches its file, and restarts it when the file changes
or when it exits on its own. All coordination happens in one decision loop
fed by an ordered event stream.

Key Components:
    - ReloaderConfig: What to run and how to restart it
    - Supervisor: Event loop and state machine
    - ProcessLauncher / ProcessInstance: anyio subprocess backend
    - WatchfilesNotifier: watchfiles-based change notifications
    - ConsoleOutputSink: rich rendering of lifecycle events
    - Launcher, Instance, Notifier, OutputSink: Protocols for substitutes

Example:
    >>> from binreload.supervisor import ReloaderConfig, Supervisor
    >>> supervisor = Supervisor(ReloaderConfig(path="./target/debug/app"))
    >>> message = await supervisor.run()  # Returns only on a fatal error
"""

from ._backoff import ExponentialBackoff
from ._launcher import ProcessInstance, ProcessLauncher
from ._models import (
    DEFAULT_RESTART_DELAY,
    DEFAULT_WATCH_DEBOUNCE_MS,
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
from ._supervisor import Supervisor

__all__ = [
    "DEFAULT_RESTART_DELAY",
    "DEFAULT_WATCH_DEBOUNCE_MS",
    "ConsoleOutputSink",
    "ExitStatus",
    "ExponentialBackoff",
    "FatalError",
    "FileChanged",
    "Instance",
    "Launcher",
    "LifecycleEvent",
    "LifecycleEventType",
    "Notifier",
    "OutputSink",
    "ProcessExited",
    "ProcessInstance",
    "ProcessLauncher",
    "ProcessStarted",
    "ReloaderConfig",
    "RestartCooldownElapsed",
    "Supervisor",
    "SupervisorEvent",
    "SupervisorState",
    "SupervisorStatus",
    "WatchfilesNotifier",
]
