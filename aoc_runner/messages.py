"""
Messages Module - Values flowing through the application loop.

Messages are produced by the event source and the task runner and consumed
exactly once by the update function. Commands are the declarative side
effects that update asks the loop driver to perform.
"""

from dataclasses import dataclass
from typing import Union


__all__ = [
    "KeyPressed",
    "Resized",
    "Tick",
    "RunPuzzle",
    "CancelRun",
    "TaskProgress",
    "TaskFinished",
    "TaskFailed",
    "Quit",
    "Message",
    "StartTask",
    "CancelTask",
    "Shutdown",
    "Command",
]


# --- Messages -------------------------------------------------------------

@dataclass(frozen=True)
class KeyPressed:
    """A decoded key press (e.g. "j", "up", "enter", "ctrl+c")."""
    key: str


@dataclass(frozen=True)
class Resized:
    """Terminal was resized to (width, height) characters."""
    width: int
    height: int


@dataclass(frozen=True)
class Tick:
    """
    Periodic timer event driving the redraw cadence.

    Attributes:
        timestamp: Monotonic time in seconds when the tick was emitted
    """
    timestamp: float


@dataclass(frozen=True)
class RunPuzzle:
    """Request to switch the active puzzle and run it."""
    puzzle_id: str


@dataclass(frozen=True)
class CancelRun:
    """Request to cancel the current run, if any."""


@dataclass(frozen=True)
class TaskProgress:
    """
    Progress report from a running solver.

    Attributes:
        task_id: Task that reported progress
        fraction: Progress from 0.0 to 1.0
        note: Optional short status text
    """
    task_id: int
    fraction: float
    note: str = ""


@dataclass(frozen=True)
class TaskFinished:
    """A background task completed with an answer."""
    task_id: int
    puzzle_id: str
    answer: str
    elapsed_ms: float = 0.0


@dataclass(frozen=True)
class TaskFailed:
    """A background task failed; error is a human-readable description."""
    task_id: int
    puzzle_id: str
    error: str


@dataclass(frozen=True)
class Quit:
    """Terminal request to end the session."""
    reason: str = "user"


Message = Union[
    KeyPressed, Resized, Tick, RunPuzzle, CancelRun,
    TaskProgress, TaskFinished, TaskFailed, Quit,
]


# --- Commands -------------------------------------------------------------

@dataclass(frozen=True)
class StartTask:
    """Start solving puzzle_id in the background under task_id."""
    task_id: int
    puzzle_id: str


@dataclass(frozen=True)
class CancelTask:
    """Cancel the background task with task_id."""
    task_id: int


@dataclass(frozen=True)
class Shutdown:
    """Stop the event source, the task runner and the event loop."""


Command = Union[StartTask, CancelTask, Shutdown]
