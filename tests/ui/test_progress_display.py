"""
Tests for the progress_display module.

Tests cover:
- create_progress: column layout
- RichProgressDisplay: context manager, on_start, on_advance, on_complete, error cases
- NoOpProgressDisplay: basic functionality (no-op behavior)

Note: RichProgressDisplay tests use mocks to avoid creating actual Rich UI components.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from rich.progress import Progress

from ui.progress_display import (
    NoOpProgressDisplay,
    ProgressState,
    RichProgressDisplay,
    create_progress,
)


@pytest.fixture
def mock_progress(mocker):
    progress = MagicMock()
    progress.add_task.return_value = 7
    progress.tasks = [SimpleNamespace(id=7, completed=42)]
    mocker.patch("ui.progress_display.create_progress", return_value=progress)
    return progress


@pytest.mark.unit
def test_create_progress_returns_progress():
    progress = create_progress()

    assert isinstance(progress, Progress)
    assert len(progress.columns) == 4


# ============================================================================
# Tests for RichProgressDisplay
# ============================================================================


@pytest.mark.unit
@pytest.mark.mock
def test_rich_progress_display_context_manager(mock_progress):
    """RichProgressDisplay should enter and exit the progress instance."""
    display = RichProgressDisplay()

    with display as rpd:
        assert rpd is display
        assert display._progress is mock_progress
        mock_progress.__enter__.assert_called_once()

    mock_progress.__exit__.assert_called_once_with(None, None, None)


@pytest.mark.unit
@pytest.mark.mock
def test_rich_progress_display_exit_with_exception(mock_progress):
    """__exit__ should pass the exception through to the progress instance."""
    display = RichProgressDisplay()
    display.__enter__()

    exc_val = ValueError("Test error")
    display.__exit__(ValueError, exc_val, None)

    mock_progress.__exit__.assert_called_once_with(ValueError, exc_val, None)


@pytest.mark.unit
def test_rich_progress_display_exit_without_progress():
    """__exit__ should handle case when progress is None."""
    display = RichProgressDisplay()

    # Should not raise error even if progress is None
    display.__exit__(None, None, None)


@pytest.mark.unit
@pytest.mark.mock
def test_rich_progress_display_on_start(mock_progress):
    """on_start should add an indeterminate task in the in-progress color."""
    display = RichProgressDisplay()
    with display:
        display.on_start("Removing empty items...")

    mock_progress.add_task.assert_called_once_with(
        f"[{ProgressState.IN_PROGRESS}]Removing empty items...", total=None
    )
    assert display._task == 7


@pytest.mark.unit
def test_rich_progress_display_on_start_without_context_raises_error():
    """on_start should raise RuntimeError if not used as context manager."""
    display = RichProgressDisplay()

    with pytest.raises(RuntimeError, match="must be used as a context manager"):
        display.on_start("Test")


@pytest.mark.unit
@pytest.mark.mock
def test_rich_progress_display_on_advance(mock_progress):
    display = RichProgressDisplay()
    with display:
        display.on_start("Test")
        display.on_advance()
        display.on_advance(count=3)

    assert [c.kwargs for c in mock_progress.update.call_args_list] == [
        {"advance": 1},
        {"advance": 3},
    ]


@pytest.mark.unit
@pytest.mark.mock
def test_rich_progress_display_on_advance_without_on_start_raises_error(mock_progress):
    """on_advance should raise RuntimeError if on_start was not called first."""
    display = RichProgressDisplay()
    with display:
        with pytest.raises(
            RuntimeError, match="on_start\\(\\) must be called before on_advance\\(\\)"
        ):
            display.on_advance()


@pytest.mark.unit
@pytest.mark.mock
@pytest.mark.parametrize(
    "had_failures,state",
    [(False, ProgressState.COMPLETE), (True, ProgressState.WARNING)],
)
def test_rich_progress_display_on_complete(mock_progress, had_failures, state):
    """on_complete should freeze the count and switch to the final color."""
    display = RichProgressDisplay()
    with display:
        display.on_start("Test")
        display.on_complete("Done", had_failures=had_failures)

    mock_progress.update.assert_called_with(
        7, total=42, completed=42, description=f"[{state}]Done"
    )


@pytest.mark.unit
@pytest.mark.mock
def test_rich_progress_display_on_complete_without_on_start_raises_error(
    mock_progress,
):
    display = RichProgressDisplay()
    with display:
        with pytest.raises(RuntimeError, match="on_start"):
            display.on_complete("Done")


# ============================================================================
# Tests for NoOpProgressDisplay
# ============================================================================


@pytest.mark.unit
def test_noop_progress_display_context_manager():
    """NoOpProgressDisplay should work as a context manager."""
    display = NoOpProgressDisplay()

    with display as npd:
        assert npd is display


@pytest.mark.unit
def test_noop_progress_display_methods_do_nothing():
    """NoOpProgressDisplay methods should not raise."""
    display = NoOpProgressDisplay()

    with display:
        display.on_start("Test")
        display.on_advance()
        display.on_advance(count=5)
        display.on_complete("Done", had_failures=True)
