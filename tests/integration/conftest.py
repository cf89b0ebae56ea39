import os
import stat
from collections.abc import Callable
from pathlib import Path

import pytest

WriteScript = Callable[[str], Path]


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


def _make_executable(path: Path) -> None:
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


@pytest.fixture
def app_path(tmp_path: Path) -> Path:
    return tmp_path / "bin" / "app"


@pytest.fixture
def write_script(app_path: Path) -> WriteScript:
    """Return a helper that atomically (re)places the app with a shell script.

    The new content is written next to the app and renamed over it, the way
    build tools replace binaries.
    """

    def _write(body: str) -> Path:
        app_path.parent.mkdir(parents=True, exist_ok=True)
        staging = app_path.with_name(f".{app_path.name}.tmp")
        _ = staging.write_text(f"#!/bin/sh\n{body}\n")
        _make_executable(staging)
        os.replace(staging, app_path)
        return app_path

    return _write
