"""
Base Puzzle Module - Abstract base class for puzzle solvers.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, TypeVar

from .context import SolveContext


T = TypeVar("T")


class PuzzleSolver(ABC):
    """
    Abstract base class for all daily puzzle solvers.

    Subclasses must implement the solve() method and define
    name and title class attributes. Every solver is driven through
    the same contract: input text in, answer text out.

    Attributes:
        name: Puzzle identifier used by the registry (e.g. "day01")
        title: Human-readable puzzle title for the UI
    """
    name: str = "base"
    title: str = "Base puzzle"

    @abstractmethod
    def solve(self, context: SolveContext) -> str:
        """
        Compute the answer for the puzzle input.

        Should periodically call context.raise_if_cancelled() so a
        cancelled run stops early.

        Args:
            context: Solve context with input, cancellation, progress

        Returns:
            Answer text to display

        Raises:
            ValueError: If the input cannot be parsed
        """
        pass

    def iter_with_progress(self, context: SolveContext, items: List[T],
                           label: str = "") -> Iterable[T]:
        """
        Iterate items, checking cancellation and reporting progress per item.

        Args:
            context: Solve context
            items: Items to iterate
            label: Progress note prefix

        Yields:
            Each item in order
        """
        total = len(items)
        for index, item in enumerate(items):
            context.raise_if_cancelled()
            yield item
            if total:
                context.report_progress((index + 1) / total, f"{label} {index + 1}/{total}".strip())

    @staticmethod
    def format_parts(part_one: object, part_two: object) -> str:
        """Format a two-part answer for display."""
        return f"Part 1: {part_one}\nPart 2: {part_two}"
