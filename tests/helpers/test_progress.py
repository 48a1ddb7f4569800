"""Tests for progress bar utilities."""

from rich.console import Console
from rich.progress import Progress

from src.helpers.progress import advance_callback, create_standard_progress


class TestCreateStandardProgress:
    """Tests for create_standard_progress function."""

    def test_creates_progress_instance(self) -> None:
        """Test that function creates Progress instance."""
        progress = create_standard_progress()
        assert isinstance(progress, Progress)

    def test_uses_provided_console(self) -> None:
        """Test that function uses provided console."""
        console = Console()
        progress = create_standard_progress(console=console)
        assert progress.console == console

    def test_expand_parameter(self) -> None:
        """Test expand parameter is applied."""
        progress = create_standard_progress(expand=True)
        assert progress.expand is True

    def test_has_time_columns(self) -> None:
        """Test that progress has elapsed and remaining time columns."""
        progress = create_standard_progress()
        column_types = [type(col).__name__ for col in progress.columns]
        assert "TimeElapsedColumn" in column_types
        assert "TimeRemainingColumn" in column_types


class TestAdvanceCallback:
    """Tests for advance_callback function."""

    def test_advances_by_one_per_call(self) -> None:
        """Test each call advances the task by one."""
        progress = create_standard_progress(console=Console(quiet=True))
        task_id = progress.add_task("Day 10", total=3)
        callback = advance_callback(progress, task_id)

        callback(72000)
        callback(72001)

        assert progress.tasks[0].completed == 2

    def test_only_advances_its_own_task(self) -> None:
        """Test callbacks of different tasks are independent."""
        progress = create_standard_progress(console=Console(quiet=True))
        first = progress.add_task("Day 10", total=None)
        second = progress.add_task("Day 11", total=None)

        advance_callback(progress, second)(79200)

        assert progress.tasks[first].completed == 0
        assert progress.tasks[second].completed == 1
