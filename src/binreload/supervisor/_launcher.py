"""Process launcher backed by anyio subprocesses.

The supervised executable inherits the supervisor's stdin, stdout and
stderr, so it behaves as if it had been started directly from the shell.
"""

import signal
from collections.abc import Sequence
from typing import final

import anyio
import anyio.abc

from binreload.exceptions import LaunchError

from ._models import ExitStatus


@final
class ProcessInstance:
    """Handle to one running subprocess.

    Attributes:
        command: The command line the instance was started with.
    """

    __slots__ = ("_process", "_status", "command")

    def __init__(self, process: anyio.abc.Process, command: Sequence[str]) -> None:
        self._process = process
        self._status: ExitStatus | None = None
        self.command = tuple(command)

    def __repr__(self) -> str:
        return f"ProcessInstance(pid={self.pid}, command={self.command!r})"

    @property
    def pid(self) -> int:
        """Return the process ID."""
        return self._process.pid

    @property
    def running(self) -> bool:
        """Return True while the process has not been reaped."""
        return self._status is None and self._process.returncode is None

    async def wait(self) -> ExitStatus:
        """Wait for the process to exit.

        Returns:
            The exit status; repeated calls return the same value.
        """
        if self._status is None:
            returncode = await self._process.wait()
            self._status = ExitStatus.from_returncode(returncode)
        return self._status

    def terminate(self) -> None:
        """Send SIGTERM unless the process has already exited."""
        self._send(signal.SIGTERM)

    def kill(self) -> None:
        """Force kill the process unless it has already exited."""
        if not self.running:
            return
        try:
            self._process.kill()
        except ProcessLookupError:
            # Exited between the check and the kill
            pass

    def _send(self, signum: signal.Signals) -> None:
        if not self.running:
            return
        try:
            self._process.send_signal(signum)
        except ProcessLookupError:
            pass


@final
class ProcessLauncher:
    """Starts the executable as a child process."""

    __slots__ = ()

    async def start(self, path: str, args: Sequence[str]) -> ProcessInstance:
        """Start the executable without waiting for it.

        Args:
            path: Executable to run.
            args: Arguments passed to it.

        Returns:
            A handle to the running process.

        Raises:
            LaunchError: If the process cannot be spawned, for example when
                the file is missing, not executable, or permission is denied.
        """
        command = [path, *args]
        try:
            process = await anyio.open_process(
                command,
                stdin=None,
                stdout=None,
                stderr=None,
            )
        except OSError as e:
            msg = f"Unable to start process '{path}': {e}"
            raise LaunchError(msg, path=path, cause=e) from e

        return ProcessInstance(process, command)
