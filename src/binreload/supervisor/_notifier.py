"""File change notifier using watchfiles.

The watched file's parent directory is observed non-recursively and events
are filtered down to the file itself. Watching the directory rather than the
file keeps the watch alive when a build tool replaces the file with a rename.
"""

import os
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import final

import anyio
import structlog
from structlog.typing import FilteringBoundLogger
from watchfiles import Change, awatch

from binreload.exceptions import WatchError

from ._backoff import ExponentialBackoff
from ._models import DEFAULT_WATCH_DEBOUNCE_MS

# Bound on how long the watcher waits idle before reporting a timeout
_IDLE_TIMEOUT_MS = 1000


def _check_watchable(target: Path) -> None:
    """Raise WatchError unless `target` is an existing file in a readable directory."""
    if not target.exists():
        msg = f"Cannot watch '{target}': no such file"
        raise WatchError(msg, path=target)
    if target.is_dir():
        msg = f"Cannot watch '{target}': is a directory"
        raise WatchError(msg, path=target)
    if not os.access(target.parent, os.R_OK | os.X_OK):
        msg = f"Cannot watch '{target}': permission denied on '{target.parent}'"
        raise WatchError(msg, path=target)


def _only(target: Path) -> Callable[[Change, str], bool]:
    """Build a watch filter that accepts changes to `target` only."""

    def accept(_change: Change, changed_path: str) -> bool:
        return Path(changed_path).name == target.name

    return accept


@final
class WatchfilesNotifier:
    """Notifier that reports each change to a single file.

    Transient watcher failures are retried internally with exponential
    backoff and never surface to the caller.
    """

    __slots__ = ("_backoff", "_debounce", "_logger")

    def __init__(
        self,
        *,
        debounce: int = DEFAULT_WATCH_DEBOUNCE_MS,
        backoff: ExponentialBackoff | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the notifier.

        Args:
            debounce: Milliseconds over which changes are grouped into one
                notification.
            backoff: Delay calculator for re-establishing a failed watch.
            logger: Logger for watch diagnostics.
        """
        self._debounce = debounce
        self._backoff = backoff or ExponentialBackoff()
        self._logger: FilteringBoundLogger = logger or structlog.get_logger("binreload")

    async def watch(self, path: Path) -> AsyncIterator[None]:
        """Yield once per change to `path`, forever.

        A batch of changes that leaves the file missing (deleted and not yet
        recreated) is not reported; the notification comes when it reappears.

        The watch counts as established once the watcher reports for the
        first time, either a change batch or an idle timeout. Failures before
        that are fatal; failures afterwards are retried with backoff.

        Args:
            path: The file to watch.

        Yields:
            None for each change.

        Raises:
            WatchError: If the file cannot be watched at all.
        """
        target = path.absolute()
        _check_watchable(target)

        attempt = 0
        established = False
        while True:
            try:
                async for changes in awatch(
                    target.parent,
                    watch_filter=_only(target),
                    debounce=self._debounce,
                    recursive=False,
                    rust_timeout=_IDLE_TIMEOUT_MS,
                    yield_on_timeout=True,
                ):
                    if not established:
                        established = True
                        self._logger.debug("watch_established", path=str(target))
                    attempt = 0
                    if not changes:
                        continue
                    self._logger.debug(
                        "file_changes",
                        path=str(target),
                        changes=sorted(change.name for change, _ in changes),
                    )
                    if not target.exists():
                        self._logger.info("watched_file_missing", path=str(target))
                        continue
                    yield None
            except (OSError, RuntimeError) as e:
                if not established:
                    msg = f"Cannot watch '{target}': {e}"
                    raise WatchError(msg, path=target, cause=e) from e

                delay = self._backoff.delay(attempt)
                attempt += 1
                self._logger.warning(
                    "watch_interrupted",
                    path=str(target),
                    error=str(e),
                    retry_in=round(delay, 3),
                )
                await anyio.sleep(delay)
