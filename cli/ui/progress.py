"""
cli/ui/progress.py - Stack 작업 진행 상황 표시

BoundedScheduler의 progress_tracker 인터페이스(set_total, on_complete)를 구현하는
스레드 세이프 진행 상황 추적기입니다.

Example:
    from cli.ui.progress import stack_progress

    with stack_progress("Removing child stacks") as tracker:
        outcome = manager.before_remove(progress_tracker=tracker)

    success, failed, total = tracker.stats
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

if TYPE_CHECKING:
    from rich.console import Console

from .console import console as default_console


class SuccessFailColumn(ProgressColumn):
    """Custom column showing success/fail counts: '40✓ 10✗'"""

    def __init__(self, tracker: StackProgressTracker) -> None:
        super().__init__()
        self._tracker = tracker

    def render(self, task: Task) -> Text:
        """Render the column with success (green) and fail (red) counts."""
        success, failed, _ = self._tracker.stats
        text = Text()
        text.append(f"{success}", style="green")
        text.append("✓ ", style="green")  # checkmark
        text.append(f"{failed}", style="red")
        text.append("✗", style="red")  # x mark
        return text


class StackProgressTracker:
    """Thread-safe stack operation progress tracker.

    Tracks success and failure counts separately with real-time display.
    on_complete() may be called from any thread.
    """

    def __init__(self, progress: Progress, task_id: TaskID, description: str) -> None:
        self._progress = progress
        self._task_id = task_id
        self._description = description
        self._lock = threading.Lock()
        self._success = 0
        self._failed = 0
        self._total = 0

    def set_total(self, total: int) -> None:
        """Set the total number of stacks.

        Args:
            total: Total number of stacks to process
        """
        with self._lock:
            self._total = total
            self._progress.update(self._task_id, total=total)

    def on_complete(self, success: bool) -> None:
        """Record stack completion.

        Args:
            success: True if the stack operation succeeded
        """
        with self._lock:
            if success:
                self._success += 1
            else:
                self._failed += 1
            self._progress.update(self._task_id, completed=self._success + self._failed)

    @property
    def stats(self) -> tuple[int, int, int]:
        """Get current statistics (success, failed, total)."""
        with self._lock:
            return (self._success, self._failed, self._total)

    @property
    def total_count(self) -> int:
        """Get total stack count."""
        with self._lock:
            return self._total


@contextmanager
def stack_progress(
    description: str,
    console: Console | None = None,
) -> Generator[StackProgressTracker, None, None]:
    """Context manager for stack operation progress.

    Args:
        description: Description for the progress bar
        console: Rich Console to use (default: cli.ui.console)

    Yields:
        StackProgressTracker to pass as progress_tracker
    """
    cons = console or default_console

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn(""),  # Placeholder for SuccessFailColumn
        TextColumn("/"),
        MofNCompleteColumn(),
        BarColumn(bar_width=40),
        TimeElapsedColumn(),
        console=cons,
        expand=False,
        transient=False,
    )

    with progress:
        task_id = progress.add_task(f"[cyan]{description}", total=None)
        tracker = StackProgressTracker(progress, task_id, description)

        # Replace placeholder column with actual SuccessFailColumn
        columns: list[ProgressColumn] = [
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            SuccessFailColumn(tracker),
            TextColumn("/"),
            MofNCompleteColumn(),
            BarColumn(bar_width=40),
            TimeElapsedColumn(),
        ]
        progress.columns = tuple(columns)

        aborted = False
        try:
            yield tracker
        except BaseException:
            aborted = True
            raise
        finally:
            _success, failed, total = tracker.stats
            if total > 0:
                if aborted:
                    final_desc = f"[red]{description} aborted"
                elif failed:
                    final_desc = f"[yellow]{description} done ({failed} failed)"
                else:
                    final_desc = f"[green]{description} done"
                progress.update(task_id, description=final_desc)
