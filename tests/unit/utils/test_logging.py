"""Unit tests for logging utilities."""

import json
from io import StringIO
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from binreload.utils import DEBUG_ENV, create_logger, open_log_stream

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem


@pytest.fixture(autouse=True)
def _clear_debug_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(DEBUG_ENV, raising=False)


class TestCreateLogger:
    def test_text_format_to_stream(self) -> None:
        stream = StringIO()
        logger = create_logger(stream=stream, color=False)

        logger.info("instance_started", pid=42)

        output = stream.getvalue()
        assert "instance_started" in output
        assert "pid=42" in output
        assert "\x1b[" not in output

    def test_json_format(self) -> None:
        stream = StringIO()
        logger = create_logger(log_format="json", stream=stream)

        logger.warning("instance_exited_unexpectedly", exit="exit code 1")

        record = json.loads(stream.getvalue().splitlines()[0])
        assert record["event"] == "instance_exited_unexpectedly"
        assert record["exit"] == "exit code 1"
        assert record["level"] == "warning"
        assert "timestamp" in record

    def test_level_filters_lower_messages(self) -> None:
        stream = StringIO()
        logger = create_logger(level="warning", stream=stream)

        logger.info("hidden")
        logger.debug("also_hidden")
        logger.error("shown")

        output = stream.getvalue()
        assert "hidden" not in output
        assert "shown" in output

    def test_unknown_level_defaults_to_info(self) -> None:
        stream = StringIO()
        logger = create_logger(level="chatty", stream=stream)

        logger.debug("hidden")
        logger.info("shown")

        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()

    def test_debug_env_forces_debug_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(DEBUG_ENV, "1")
        stream = StringIO()
        logger = create_logger(level="error", stream=stream)

        logger.debug("event_received")

        assert "event_received" in stream.getvalue()

    def test_bound_context_is_rendered(self) -> None:
        stream = StringIO()
        logger = create_logger(log_format="json", stream=stream).bind(path="./app")

        logger.info("launching", attempt=1)

        record = json.loads(stream.getvalue())
        assert record["path"] == "./app"
        assert record["attempt"] == 1


class TestOpenLogStream:
    def test_creates_log_directory_if_missing(self, fs: "FakeFilesystem") -> None:
        log_path = Path("/logs/nested/binreload.log")
        assert not log_path.parent.exists()

        with open_log_stream(str(log_path)):
            pass

        assert log_path.parent.exists()
        assert log_path.exists()

    def test_file_logging_without_colors(self, fs: "FakeFilesystem") -> None:
        with open_log_stream("/logs/binreload.log") as stream:
            logger = create_logger(color=False, stream=stream)
            logger.info("file_changed", pid=7)

        content = Path("/logs/binreload.log").read_text()
        assert "file_changed" in content
        assert "pid=7" in content
        assert "\x1b[" not in content

    def test_appends_to_existing_file(self, fs: "FakeFilesystem") -> None:
        _ = fs.create_file("/logs/binreload.log", contents="earlier line\n")

        with open_log_stream("/logs/binreload.log") as stream:
            create_logger(log_format="json", stream=stream).info("cooldown_elapsed")

        lines = Path("/logs/binreload.log").read_text().splitlines()
        assert lines[0] == "earlier line"
        assert json.loads(lines[1])["event"] == "cooldown_elapsed"
