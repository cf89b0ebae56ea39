from pathlib import Path

import anyio
import pytest

from binreload.exceptions import LaunchError
from binreload.supervisor import ExitStatus, ProcessLauncher
from tests.integration.conftest import WriteScript

pytestmark = pytest.mark.anyio


class TestProcessLauncher:
    async def test_runs_to_completion(self) -> None:
        instance = await ProcessLauncher().start("/bin/echo", ["hello"])

        with anyio.fail_after(5):
            status = await instance.wait()

        assert status == ExitStatus(code=0)
        assert status.success
        assert not instance.running
        assert instance.pid > 0

    async def test_reports_exit_code(self, write_script: WriteScript) -> None:
        path = write_script("exit 3")

        instance = await ProcessLauncher().start(str(path), [])
        with anyio.fail_after(5):
            status = await instance.wait()

        assert status.describe() == "exit code 3"

    async def test_passes_arguments(self, write_script: WriteScript, tmp_path: Path) -> None:
        out = tmp_path / "args.txt"
        path = write_script(f'printf "%s|" "$@" > {out}')

        instance = await ProcessLauncher().start(str(path), ["--port", "8080", "a b"])
        with anyio.fail_after(5):
            _ = await instance.wait()

        assert out.read_text() == "--port|8080|a b|"

    async def test_terminate_reports_signal(self, write_script: WriteScript) -> None:
        path = write_script("exec sleep 30")
        instance = await ProcessLauncher().start(str(path), [])
        assert instance.running

        instance.terminate()
        with anyio.fail_after(5):
            status = await instance.wait()

        assert status.describe() == "signal SIGTERM"
        assert not instance.running

    async def test_kill_reports_sigkill(self, write_script: WriteScript) -> None:
        path = write_script("exec sleep 30")
        instance = await ProcessLauncher().start(str(path), [])

        instance.kill()
        with anyio.fail_after(5):
            status = await instance.wait()

        assert status == ExitStatus(signal=9)

    async def test_signals_after_exit_are_ignored(self) -> None:
        instance = await ProcessLauncher().start("/bin/echo", [])
        with anyio.fail_after(5):
            first = await instance.wait()

        instance.terminate()
        instance.kill()

        assert await instance.wait() is first

    async def test_missing_executable(self) -> None:
        with pytest.raises(LaunchError) as exc_info:
            _ = await ProcessLauncher().start("/nonexistent/app", [])

        assert exc_info.value.path == "/nonexistent/app"
        assert "/nonexistent/app" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    async def test_non_executable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "plain.txt"
        _ = path.write_text("not a program")

        with pytest.raises(LaunchError) as exc_info:
            _ = await ProcessLauncher().start(str(path), [])

        assert isinstance(exc_info.value.cause, PermissionError)
