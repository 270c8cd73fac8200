"""
Model Module - Application state and the pure update function.

The loop driver owns exactly one AppState and replaces it with the result of
update() for every message. update() never performs side effects; anything
that touches the outside world is returned as a Command for the driver to
execute.

State Flow:
    IDLE ---RunPuzzle---> RUNNING ---TaskFinished---> IDLE
                             |
                             +------TaskFailed------> ERRORED
    (any) ---Quit---> QUIT
"""

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import List, Optional, Sequence, Tuple

from .messages import (
    Message, Command,
    KeyPressed, Resized, Tick, RunPuzzle, CancelRun,
    TaskProgress, TaskFinished, TaskFailed, Quit,
    StartTask, CancelTask, Shutdown,
)


__all__ = [
    "RunStatus",
    "AppState",
    "initial_state",
    "update",
]


class RunStatus(Enum):
    """
    Loop driver states.

    States:
        IDLE: Nothing running, last answer (if any) on screen
        RUNNING: Exactly one task is live
        ERRORED: Last run failed, error on screen
        QUIT: Terminal state, the loop is shutting down
    """
    IDLE = auto()
    RUNNING = auto()
    ERRORED = auto()
    QUIT = auto()


KEYS_DOWN = ("j", "down")
KEYS_UP = ("k", "up")
KEYS_RUN = ("enter", "space")
KEYS_CANCEL = ("c",)
KEYS_QUIT = ("q", "esc", "ctrl+c")

# Tick rate is averaged over windows of at least this many seconds
TICK_RATE_WINDOW_SEC = 1.0


@dataclass(frozen=True)
class AppState:
    """
    The single source of truth for what is drawn.

    Attributes:
        puzzle_ids: Available puzzles, in display order
        puzzle_titles: Titles parallel to puzzle_ids
        cursor: Index of the highlighted puzzle
        selected: Puzzle of the latest run (None before the first run)
        status: Current RunStatus
        output: Latest answer text, or None
        error: Latest error text, or None
        active_task: Id of the live task (set iff status is RUNNING)
        next_task_id: Id handed to the next StartTask command
        progress: Progress of the live task, 0.0 to 1.0
        progress_note: Short status text reported by the solver
        elapsed_ms: Computation time of the latest answer
        size: Terminal size as (width, height)
        ticks: Ticks received so far
        tick_rate: Measured ticks per second
        tick_window_start: Timestamp the current tick-rate window opened
        tick_window_count: Ticks seen in the current window
    """
    puzzle_ids: Tuple[str, ...] = ()
    puzzle_titles: Tuple[str, ...] = ()
    cursor: int = 0
    selected: Optional[str] = None
    status: RunStatus = RunStatus.IDLE
    output: Optional[str] = None
    error: Optional[str] = None
    active_task: Optional[int] = None
    next_task_id: int = 1
    progress: float = 0.0
    progress_note: str = ""
    elapsed_ms: Optional[float] = None
    size: Tuple[int, int] = (80, 24)
    ticks: int = 0
    tick_rate: float = 0.0
    tick_window_start: Optional[float] = None
    tick_window_count: int = 0

    @property
    def is_running(self) -> bool:
        """True while a task is live."""
        return self.status == RunStatus.RUNNING

    @property
    def should_quit(self) -> bool:
        return self.status == RunStatus.QUIT

    @property
    def highlighted(self) -> Optional[str]:
        """Puzzle id under the cursor."""
        if not self.puzzle_ids:
            return None
        return self.puzzle_ids[self.cursor]

    def get_status_string(self) -> str:
        """Get human-readable status for the UI."""
        status_strings = {
            RunStatus.IDLE: "Idle",
            RunStatus.RUNNING: "Running",
            RunStatus.ERRORED: "Error",
            RunStatus.QUIT: "Quitting",
        }
        base = status_strings[self.status]
        if self.status == RunStatus.RUNNING and self.selected:
            return f"{base} ({self.selected})"
        return base


def initial_state(puzzle_ids: Sequence[str], titles: Sequence[str] = (),
                  selected: Optional[str] = None) -> AppState:
    """
    Build the starting state.

    Args:
        puzzle_ids: Registered puzzle ids in display order
        titles: Puzzle titles parallel to puzzle_ids
        selected: Puzzle to place the cursor on (ignored if unknown)

    Returns:
        Idle AppState
    """
    ids = tuple(puzzle_ids)
    cursor = ids.index(selected) if selected in ids else 0
    return AppState(puzzle_ids=ids, puzzle_titles=tuple(titles), cursor=cursor)


def update(state: AppState, message: Message) -> Tuple[AppState, List[Command]]:
    """
    Fold one message into the state.

    Deterministic and side-effect free: the same state and message always
    produce the same result.

    Args:
        state: Current state
        message: Message to consume

    Returns:
        (new_state, commands) where commands must be executed in order
    """
    if state.status == RunStatus.QUIT:
        return state, []

    if isinstance(message, Tick):
        return _on_tick(state, message), []
    elif isinstance(message, KeyPressed):
        return _on_key(state, message.key)
    elif isinstance(message, Resized):
        return replace(state, size=(message.width, message.height)), []
    elif isinstance(message, RunPuzzle):
        return _on_run_puzzle(state, message.puzzle_id)
    elif isinstance(message, CancelRun):
        return _on_cancel_run(state)
    elif isinstance(message, TaskProgress):
        return _on_task_progress(state, message), []
    elif isinstance(message, TaskFinished):
        return _on_task_finished(state, message), []
    elif isinstance(message, TaskFailed):
        return _on_task_failed(state, message), []
    elif isinstance(message, Quit):
        return _on_quit(state, message)

    return state, []


def _on_tick(state: AppState, tick: Tick) -> AppState:
    """Count the tick and refresh the tick-rate estimate."""
    start = state.tick_window_start
    count = state.tick_window_count + 1
    rate = state.tick_rate

    if start is None:
        start = tick.timestamp
        count = 0
    else:
        elapsed = tick.timestamp - start
        if elapsed >= TICK_RATE_WINDOW_SEC:
            rate = count / elapsed
            start = tick.timestamp
            count = 0

    return replace(
        state,
        ticks=state.ticks + 1,
        tick_rate=rate,
        tick_window_start=start,
        tick_window_count=count,
    )


def _on_key(state: AppState, key: str) -> Tuple[AppState, List[Command]]:
    """Map a key press onto cursor movement or a request message."""
    if key in KEYS_QUIT:
        return _on_quit(state, Quit("user"))
    if key in KEYS_DOWN:
        return _move_cursor(state, 1), []
    if key in KEYS_UP:
        return _move_cursor(state, -1), []
    if key in KEYS_RUN and state.highlighted is not None:
        return _on_run_puzzle(state, state.highlighted)
    if key in KEYS_CANCEL:
        return _on_cancel_run(state)
    return state, []


def _move_cursor(state: AppState, delta: int) -> AppState:
    if not state.puzzle_ids:
        return state
    cursor = min(max(state.cursor + delta, 0), len(state.puzzle_ids) - 1)
    return replace(state, cursor=cursor)


def _on_run_puzzle(state: AppState, puzzle_id: str) -> Tuple[AppState, List[Command]]:
    """
    Switch the active puzzle and start it.

    Any live task is cancelled first, so the commands come out as
    [CancelTask(old), StartTask(new)].
    """
    commands: List[Command] = []
    if state.active_task is not None:
        commands.append(CancelTask(state.active_task))

    if puzzle_id not in state.puzzle_ids:
        return replace(
            state,
            selected=puzzle_id,
            status=RunStatus.ERRORED,
            output=None,
            error=f"Unknown puzzle: {puzzle_id}",
            active_task=None,
            progress=0.0,
            progress_note="",
            elapsed_ms=None,
        ), commands

    task_id = state.next_task_id
    commands.append(StartTask(task_id, puzzle_id))
    return replace(
        state,
        cursor=state.puzzle_ids.index(puzzle_id),
        selected=puzzle_id,
        status=RunStatus.RUNNING,
        output=None,
        error=None,
        active_task=task_id,
        next_task_id=task_id + 1,
        progress=0.0,
        progress_note="",
        elapsed_ms=None,
    ), commands


def _on_cancel_run(state: AppState) -> Tuple[AppState, List[Command]]:
    if state.active_task is None:
        return state, []
    return replace(
        state,
        status=RunStatus.IDLE,
        active_task=None,
        progress=0.0,
        progress_note="cancelled",
    ), [CancelTask(state.active_task)]


def _on_task_progress(state: AppState, message: TaskProgress) -> AppState:
    if message.task_id != state.active_task:
        return state
    fraction = min(max(message.fraction, 0.0), 1.0)
    return replace(state, progress=fraction, progress_note=message.note)


def _on_task_finished(state: AppState, message: TaskFinished) -> AppState:
    # Results from cancelled or superseded tasks never reach the screen
    if message.task_id != state.active_task:
        return state
    return replace(
        state,
        status=RunStatus.IDLE,
        output=message.answer,
        error=None,
        active_task=None,
        progress=1.0,
        progress_note="",
        elapsed_ms=message.elapsed_ms,
    )


def _on_task_failed(state: AppState, message: TaskFailed) -> AppState:
    if message.task_id != state.active_task:
        return state
    return replace(
        state,
        status=RunStatus.ERRORED,
        output=None,
        error=message.error,
        active_task=None,
        progress=0.0,
        progress_note="",
    )


def _on_quit(state: AppState, message: Quit) -> Tuple[AppState, List[Command]]:
    commands: List[Command] = []
    if state.active_task is not None:
        commands.append(CancelTask(state.active_task))
    commands.append(Shutdown())
    return replace(
        state,
        status=RunStatus.QUIT,
        active_task=None,
        progress_note=message.reason,
    ), commands
