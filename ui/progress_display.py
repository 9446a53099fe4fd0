"""
Progress reporting for the pipeline passes.

Each pass reports through the `ProgressDisplay` protocol so the core code never
depends on Rich directly. `RichProgressDisplay` draws a spinner line with a
running entry count; `NoOpProgressDisplay` is used in tests and when output is
not a terminal.

The lifecycle is:
1. Context manager entry (__enter__)
2. on_start() - Called once at the beginning of a pass
3. on_advance() - Called once per visited entry
4. on_complete() - Called once at the end of a pass
5. Context manager exit (__exit__)
"""

from enum import StrEnum
from types import TracebackType
from typing import Protocol

from rich.progress import (
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressState(StrEnum):
    """
    Progress line states with their display colors.

    Attributes:
        IN_PROGRESS: Magenta while a pass is running.
        COMPLETE: Green when a pass finished without failures.
        WARNING: Yellow when a pass finished with logged failures.
    """

    IN_PROGRESS = "magenta"
    COMPLETE = "green"
    WARNING = "yellow"


def create_progress() -> Progress:
    """
    Create a Rich Progress instance with the standard pass layout.

    Passes do not know their total up front (the tree is walked lazily), so the
    line shows a spinner, the description, a running count and elapsed time.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("[dim]{task.completed} entries"),
        TimeElapsedColumn(),
    )


class ProgressDisplay(Protocol):
    def __enter__(self) -> "ProgressDisplay":
        """Enter the progress context."""

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the progress context."""

    def on_start(self, description: str) -> None:
        """Begin a new progress line."""

    def on_advance(self, count: int = 1) -> None:
        """Advance the entry count of the current line."""

    def on_complete(self, description: str, had_failures: bool = False) -> None:
        """Finish the current line with a summary description."""


class RichProgressDisplay:
    """
    Rich implementation of ProgressDisplay.

    The Progress instance is created lazily on context entry, so an instance can
    be constructed anywhere and only draws once it is used as a context manager.
    """

    def __init__(self) -> None:
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def __enter__(self) -> "RichProgressDisplay":
        self._progress = create_progress()
        self._progress.__enter__()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._progress:
            self._progress.__exit__(exc_type, exc_val, exc_tb)

    def on_start(self, description: str) -> None:
        """
        Raises:
            RuntimeError: If not used as a context manager.
        """
        progress = self._require_progress()
        self._task = progress.add_task(
            f"[{ProgressState.IN_PROGRESS}]{description}", total=None
        )

    def on_advance(self, count: int = 1) -> None:
        progress = self._require_progress()
        if self._task is None:
            raise RuntimeError("on_start() must be called before on_advance()")
        progress.update(self._task, advance=count)

    def on_complete(self, description: str, had_failures: bool = False) -> None:
        progress = self._require_progress()
        if self._task is None:
            raise RuntimeError("on_start() must be called before on_complete()")
        state = ProgressState.WARNING if had_failures else ProgressState.COMPLETE
        # A finite total stops the spinner.
        completed = next(
            (task.completed for task in progress.tasks if task.id == self._task), 0
        )
        progress.update(
            self._task,
            total=completed,
            completed=completed,
            description=f"[{state}]{description}",
        )

    def _require_progress(self) -> Progress:
        if not self._progress:
            raise RuntimeError(
                "RichProgressDisplay must be used as a context manager. "
                "Use: with RichProgressDisplay() as rpd:"
            )
        return self._progress


class NoOpProgressDisplay:
    """No-op implementation of ProgressDisplay for tests and non-interactive runs."""

    def __enter__(self) -> "NoOpProgressDisplay":
        return self

    def __exit__(self, *args) -> None:
        """Exit the progress context (no-op)."""

    def on_start(self, description: str) -> None:
        """No-op: does nothing."""

    def on_advance(self, count: int = 1) -> None:
        """No-op: does nothing."""

    def on_complete(self, description: str, had_failures: bool = False) -> None:
        """No-op: does nothing."""
