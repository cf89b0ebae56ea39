from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from pathlib import Path
from typing import final

import anyio
import pytest

from binreload.exceptions import LaunchError, WatchError
from binreload.supervisor import ExitStatus, LifecycleEvent, LifecycleEventType

SIGTERM_EXIT = ExitStatus(signal=15)
SIGKILL_EXIT = ExitStatus(signal=9)


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.unit)


@final
class FakeInstance:
    """Instance whose exit is driven by the test."""

    def __init__(self, pid: int, *, exit_on_terminate: ExitStatus | None) -> None:
        self._pid = pid
        self._exited = anyio.Event()
        self._status: ExitStatus | None = None
        self.exit_on_terminate = exit_on_terminate
        self.terminate_calls = 0
        self.kill_calls = 0

    @property
    def pid(self) -> int:
        return self._pid

    @property
    def running(self) -> bool:
        return self._status is None

    async def wait(self) -> ExitStatus:
        await self._exited.wait()
        assert self._status is not None
        return self._status

    def exit(self, status: ExitStatus | None = None) -> None:
        if self._status is None:
            self._status = status or ExitStatus(code=0)
            self._exited.set()

    def terminate(self) -> None:
        self.terminate_calls += 1
        if self.exit_on_terminate is not None:
            self.exit(self.exit_on_terminate)

    def kill(self) -> None:
        self.kill_calls += 1
        self.exit(SIGKILL_EXIT)


@final
class FakeLauncher:
    """Launcher recording every start.

    Instances exit on terminate with SIGTERM unless configured otherwise;
    `auto_exit` makes every instance exit as soon as it starts.
    """

    def __init__(
        self,
        *,
        fail_with: LaunchError | None = None,
        auto_exit: ExitStatus | None = None,
        exit_on_terminate: ExitStatus | None = SIGTERM_EXIT,
    ) -> None:
        self.fail_with = fail_with
        self.auto_exit = auto_exit
        self.exit_on_terminate = exit_on_terminate
        self.calls: list[tuple[str, tuple[str, ...]]] = []
        self.instances: list[FakeInstance] = []
        self.start_times: list[float] = []
        self._hold = False
        self._gate: anyio.Event | None = None

    def hold(self) -> None:
        """Make subsequent starts block until release()."""
        self._hold = True

    def release(self) -> None:
        self._hold = False
        if self._gate is not None:
            self._gate.set()

    @property
    def pending(self) -> bool:
        return self._gate is not None and not self._gate.is_set()

    async def start(self, path: str, args: Sequence[str]) -> FakeInstance:
        self.calls.append((path, tuple(args)))
        if self._hold:
            self._gate = anyio.Event()
            await self._gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

        instance = FakeInstance(
            1000 + len(self.instances), exit_on_terminate=self.exit_on_terminate
        )
        self.instances.append(instance)
        self.start_times.append(anyio.current_time())
        if self.auto_exit is not None:
            instance.exit(self.auto_exit)
        return instance


@final
class FakeNotifier:
    """Notifier whose changes are triggered by the test."""

    def __init__(self, *, fail_with: WatchError | None = None) -> None:
        self.fail_with = fail_with
        self.watched: list[Path] = []
        self._send, self._receive = anyio.create_memory_object_stream[None](100)

    def change(self, count: int = 1) -> None:
        for _ in range(count):
            self._send.send_nowait(None)

    async def watch(self, path: Path) -> AsyncIterator[None]:
        self.watched.append(path)
        if self.fail_with is not None:
            raise self.fail_with
        async for _ in self._receive:
            yield None


@final
class RecordingSink:
    def __init__(self) -> None:
        self.events: list[LifecycleEvent] = []

    async def write_event(self, event: LifecycleEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: LifecycleEventType) -> list[LifecycleEvent]:
        return [e for e in self.events if e.event_type == event_type]


WaitUntil = Callable[[Callable[[], bool]], Awaitable[None]]


async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    with anyio.fail_after(timeout):
        while not predicate():
            await anyio.sleep(0.005)


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def wait_until() -> WaitUntil:
    """Return an async helper polling a predicate with a timeout."""
    return _wait_until
