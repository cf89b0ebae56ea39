"""Console output for supervisor lifecycle events."""

from typing import final

from rich.console import Console
from rich.style import Style
from rich.text import Text

from ._models import LifecycleEvent, LifecycleEventType


@final
class ConsoleOutputSink:
    """Output sink that prints lifecycle events to stderr.

    Formats events as `[binreload] STARTED (pid=123) - message` with color
    coding per event type. stderr keeps the child's stdout clean.
    """

    __slots__ = ("_console", "_event_styles", "_prefix")

    def __init__(self, console: Console | None = None, *, prefix: str = "binreload") -> None:
        """Initialize the output sink.

        Args:
            console: Rich Console instance for output. If None, creates one
                writing to stderr.
            prefix: Label printed in front of each event.
        """
        self._console = console or Console(stderr=True)
        self._prefix = prefix
        self._event_styles: dict[LifecycleEventType, Style] = {
            LifecycleEventType.STARTED: Style(color="green", bold=True),
            LifecycleEventType.RELOADING: Style(color="cyan", bold=True),
            LifecycleEventType.STOPPED: Style(color="yellow"),
            LifecycleEventType.CRASHED: Style(color="red", bold=True),
            LifecycleEventType.RESTARTING: Style(color="cyan"),
            LifecycleEventType.FAILED: Style(color="red", bold=True, reverse=True),
        }

    async def write_event(self, event: LifecycleEvent) -> None:
        """Write a lifecycle event with type-specific formatting.

        Args:
            event: The lifecycle event to record.
        """
        style = self._event_styles.get(event.event_type, Style())

        text = Text()
        _ = text.append(f"[{self._prefix}]", style=Style(color="blue", bold=True))
        _ = text.append(" ")
        _ = text.append(event.event_type.value.upper(), style=style)

        if event.pid is not None:
            _ = text.append(f" (pid={event.pid})", style=Style(dim=True))

        if event.exit is not None:
            _ = text.append(f" {event.exit}", style=Style(dim=True))

        if event.message:
            _ = text.append(f" - {event.message}", style=style)

        self._console.print(text)
