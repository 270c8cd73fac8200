"""
Puzzles Package - Registry of daily puzzle solvers.

Every solver is driven through the same contract: puzzle input text in,
answer text out. Solvers are selected at runtime by id.

Public API:
    - PuzzleSolver: Abstract base for solvers
    - SolveContext: Input, cancellation and progress for one run
    - TaskCancelled: Raised by a solver that noticed cancellation
    - create_puzzle(): Factory function
    - get_puzzle_ids(): List available puzzles
    - get_puzzle_info(): Get puzzle metadata

Usage:
    from aoc_runner.puzzles import create_puzzle, SolveContext

    solver = create_puzzle("day01")
    answer = solver.solve(SolveContext(raw_input=text))
"""

from .context import SolveContext, TaskCancelled
from .base import PuzzleSolver
from .factory import (
    create_puzzle,
    get_puzzle_ids,
    get_puzzle_info,
    register_puzzle,
)

# Import solvers to register them
from . import days

__all__ = [
    "SolveContext",
    "TaskCancelled",
    "PuzzleSolver",
    "create_puzzle",
    "get_puzzle_ids",
    "get_puzzle_info",
    "register_puzzle",
]
