"""Shared test fixtures for binreload tests."""

from collections.abc import Callable
from io import StringIO

import pytest
from rich.console import Console


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def capture_console() -> Callable[[], tuple[Console, StringIO]]:
    """Return a factory for rich consoles that write to a buffer."""

    def _make() -> tuple[Console, StringIO]:
        buffer = StringIO()
        console = Console(file=buffer, force_terminal=False, no_color=True, width=200)
        return console, buffer

    return _make
