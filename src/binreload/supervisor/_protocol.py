"""Protocol definitions for the supervisor.

This module defines the interfaces that decouple the decision loop from the
operating system, so that tests can substitute fakes:
- Instance: Handle to one running execution of the target
- Launcher: Starts instances
- Notifier: Produces change notifications for the watched file
- OutputSink: Consumes lifecycle events for display
"""

from collections.abc import AsyncIterator, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ._models import ExitStatus, LifecycleEvent


@runtime_checkable
class Instance(Protocol):
    """Handle to a started instance of the executable.

    The supervisor compares handles by object identity; the pid is for
    display only since the OS may reuse it.
    """

    @property
    def pid(self) -> int:
        """Return the process ID."""
        ...

    @property
    def running(self) -> bool:
        """Return True until the instance's exit has been observed."""
        ...

    async def wait(self) -> "ExitStatus":
        """Block until the instance terminates and return how it ended."""
        ...

    def terminate(self) -> None:
        """Request graceful termination; ignored if already gone."""
        ...

    def kill(self) -> None:
        """Force termination; ignored if already gone."""
        ...


@runtime_checkable
class Launcher(Protocol):
    """Protocol for starting the supervised executable."""

    async def start(self, path: str, args: Sequence[str]) -> Instance:
        """Start the executable without waiting for it to finish.

        Args:
            path: Executable to run.
            args: Arguments passed to it.

        Returns:
            A handle to the running instance.

        Raises:
            LaunchError: If the executable cannot be started.
        """
        ...


@runtime_checkable
class Notifier(Protocol):
    """Protocol for observing a single file."""

    def watch(self, path: Path) -> AsyncIterator[None]:
        """Return an unbounded stream with one item per change.

        Raises:
            WatchError: From the first iteration if the watch cannot be
                established.
        """
        ...


@runtime_checkable
class OutputSink(Protocol):
    """Protocol for consuming lifecycle events.

    The protocol is async to support non-blocking outputs like files or UIs.
    """

    async def write_event(self, event: "LifecycleEvent") -> None:
        """Record a lifecycle event.

        Args:
            event: The lifecycle event to record.
        """
        ...
