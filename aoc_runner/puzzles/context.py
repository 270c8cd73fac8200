"""
Solve Context Module - Shared context for puzzle execution.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional


class TaskCancelled(Exception):
    """Raised inside a solver when its task has been cancelled."""


@dataclass
class SolveContext:
    """
    Context passed to solvers containing the puzzle input,
    cancellation, and progress reporting.

    Attributes:
        raw_input: Puzzle input text
        cancel_flag: Threading event for cancellation
        start_time: When computation started
        progress_callback: Optional callback for progress updates
    """
    raw_input: str
    cancel_flag: threading.Event = field(default_factory=threading.Event)
    start_time: float = field(default_factory=time.perf_counter)
    progress_callback: Optional[Callable[[float, str], None]] = None

    def is_cancelled(self) -> bool:
        """
        Check if cancellation was requested.

        Returns:
            True if the solver should stop execution
        """
        return self.cancel_flag.is_set()

    def raise_if_cancelled(self) -> None:
        """
        Abort the solver if cancellation was requested.

        Solvers call this between steps; there is no preemption.

        Raises:
            TaskCancelled: If the cancel flag is set
        """
        if self.cancel_flag.is_set():
            raise TaskCancelled()

    def report_progress(self, percent: float, message: str = "") -> None:
        """
        Report progress to UI.

        Args:
            percent: Progress from 0.0 to 1.0
            message: Optional status message
        """
        if self.progress_callback:
            self.progress_callback(percent, message)

    def elapsed_ms(self) -> float:
        """Milliseconds elapsed since computation started."""
        return (time.perf_counter() - self.start_time) * 1000

    def lines(self):
        """Non-empty input lines with surrounding whitespace stripped."""
        return [line.strip() for line in self.raw_input.splitlines() if line.strip()]
