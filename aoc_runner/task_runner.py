"""
Task Runner Module for aoc-runner

Runs a puzzle solver on a background QThread so the terminal keeps
refreshing during long computations. Results travel back to the main
thread as Qt signals (queued, thread-safe) carrying TaskFinished /
TaskFailed / TaskProgress messages.

At most one task is live. Starting a task cancels the previous one, and
nothing is delivered for a handle once it has been cancelled.
"""

import logging
import threading
import time
from typing import Callable, List, Optional

from PyQt5.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from .messages import Message, TaskFailed, TaskFinished, TaskProgress
from .puzzles import PuzzleSolver, SolveContext, TaskCancelled, create_puzzle


# Configure module logger
logger = logging.getLogger(__name__)


InputLoader = Callable[[str], str]
SolverFactory = Callable[[str], PuzzleSolver]
ProgressCallback = Callable[[float, str], None]


def execute(
    task_id: int,
    puzzle_id: str,
    create_solver: SolverFactory,
    load_input: InputLoader,
    cancel_flag: threading.Event,
    progress_callback: Optional[ProgressCallback] = None,
) -> Optional[Message]:
    """
    Run one puzzle to completion and describe the outcome as a message.

    Every exception raised while loading input or solving is converted to
    TaskFailed, so a broken solver can never take down the loop. The time
    reported in TaskFinished covers solving only, not reading the input.

    Args:
        task_id: Id of the task being run
        puzzle_id: Puzzle to solve
        create_solver: Factory mapping puzzle id to solver
        load_input: Callable returning the input text for a puzzle id
        cancel_flag: Set when the task is cancelled
        progress_callback: Optional progress sink

    Returns:
        TaskFinished or TaskFailed, or None if the task was cancelled
    """
    try:
        solver = create_solver(puzzle_id)
        raw_input = load_input(puzzle_id)
        context = SolveContext(
            raw_input=raw_input,
            cancel_flag=cancel_flag,
            progress_callback=progress_callback,
        )
        answer = solver.solve(context)
    except TaskCancelled:
        logger.info(f"Task {task_id} ({puzzle_id}) stopped after cancellation")
        return None
    except Exception as e:
        logger.exception(f"Task {task_id} ({puzzle_id}) failed")
        return TaskFailed(task_id, puzzle_id, f"{type(e).__name__}: {e}")

    elapsed_ms = context.elapsed_ms()

    # Solvers that never poll still finish; their result is dropped
    if cancel_flag.is_set():
        logger.info(f"Task {task_id} ({puzzle_id}) finished after cancellation, result dropped")
        return None

    logger.info(f"Task {task_id} ({puzzle_id}) finished in {elapsed_ms:.1f}ms")
    return TaskFinished(task_id, puzzle_id, str(answer), elapsed_ms)


class TaskHandle:
    """
    Handle to one in-flight puzzle run.

    Attributes:
        task_id: Id assigned by the update function
        puzzle_id: Puzzle being solved
        cancel_flag: Cooperative cancellation signal
        worker: Thread running the solver
    """

    def __init__(self, task_id: int, puzzle_id: str):
        self.task_id = task_id
        self.puzzle_id = puzzle_id
        self.cancel_flag = threading.Event()
        self.worker: Optional["PuzzleWorker"] = None

    def cancel(self) -> None:
        """Request cancellation. Advisory: the solver stops at its next poll."""
        self.cancel_flag.set()

    @property
    def is_cancelled(self) -> bool:
        return self.cancel_flag.is_set()

    @property
    def is_running(self) -> bool:
        """True while the worker thread has not finished."""
        return self.worker is not None and not self.worker.isFinished()

    def __repr__(self) -> str:
        return f"TaskHandle(task_id={self.task_id}, puzzle_id={self.puzzle_id!r}, cancelled={self.is_cancelled})"


class PuzzleWorker(QThread):
    """
    Background worker thread for one puzzle run.

    Signals:
        message_ready(object): Emits TaskProgress, then at most one
            TaskFinished or TaskFailed

    Example:
        worker = PuzzleWorker(handle, create_puzzle, loader)
        worker.message_ready.connect(runner.on_message)
        worker.start()
    """

    message_ready = pyqtSignal(object)

    # Minimum seconds between progress reports
    PROGRESS_INTERVAL_SEC = 0.05

    def __init__(self, handle: TaskHandle, create_solver: SolverFactory, load_input: InputLoader):
        """
        Initialize the worker.

        Args:
            handle: Handle describing the task
            create_solver: Factory mapping puzzle id to solver
            load_input: Callable returning the input text for a puzzle id
        """
        super().__init__()
        self.handle = handle
        self._create_solver = create_solver
        self._load_input = load_input
        self._last_progress = 0.0

    def run(self):
        """Solve the puzzle. Called when the thread starts."""
        logger.debug(f"Worker started for {self.handle!r}")
        message = execute(
            self.handle.task_id,
            self.handle.puzzle_id,
            self._create_solver,
            self._load_input,
            self.handle.cancel_flag,
            self._report_progress,
        )
        if message is not None:
            self.message_ready.emit(message)

    def _report_progress(self, fraction: float, note: str) -> None:
        """Forward progress, throttled so the loop is not flooded."""
        if self.handle.is_cancelled:
            return
        now = time.perf_counter()
        if fraction < 1.0 and now - self._last_progress < self.PROGRESS_INTERVAL_SEC:
            return
        self._last_progress = now
        self.message_ready.emit(TaskProgress(self.handle.task_id, fraction, note))


class TaskRunner(QObject):
    """
    Starts, cancels and reaps puzzle workers.

    Lives on the main thread. Worker messages are filtered against the live
    handle before being re-emitted, so a cancelled task never delivers.

    Signals:
        message_ready(object): Messages for the loop driver
    """

    message_ready = pyqtSignal(object)

    def __init__(self, load_input: InputLoader, create_solver: SolverFactory = create_puzzle,
                 parent: Optional[QObject] = None):
        """
        Initialize the runner.

        Args:
            load_input: Callable returning the input text for a puzzle id
            create_solver: Factory mapping puzzle id to solver
            parent: Optional Qt parent
        """
        super().__init__(parent)
        self._load_input = load_input
        self._create_solver = create_solver
        self._handle: Optional[TaskHandle] = None

        # Cancelled or completed handles whose thread may still be running
        self._retired: List[TaskHandle] = []

    @property
    def live_handle(self) -> Optional[TaskHandle]:
        """Handle of the live task, if any."""
        return self._handle

    @property
    def pending_threads(self) -> int:
        """Number of worker threads not yet finished (live and retired)."""
        handles = self._retired + ([self._handle] if self._handle else [])
        return sum(1 for h in handles if h.is_running)

    def start(self, task_id: int, puzzle_id: str) -> TaskHandle:
        """
        Start solving a puzzle in the background.

        Any live task is cancelled first.

        Args:
            task_id: Id carried by every message of this task
            puzzle_id: Puzzle to solve

        Returns:
            Handle of the new task
        """
        if self._handle is not None:
            self.cancel(self._handle.task_id)

        handle = TaskHandle(task_id, puzzle_id)
        worker = PuzzleWorker(handle, self._create_solver, self._load_input)
        worker.message_ready.connect(self._on_worker_message)
        worker.finished.connect(self._reap)
        handle.worker = worker

        self._handle = handle
        logger.info(f"Starting task {task_id} for {puzzle_id}")
        worker.start()
        return handle

    def cancel(self, task_id: int) -> bool:
        """
        Cancel the live task if it has the given id.

        Args:
            task_id: Task to cancel

        Returns:
            True if a live task was cancelled
        """
        handle = self._handle
        if handle is None or handle.task_id != task_id:
            logger.debug(f"Cancel for task {task_id} ignored, not live")
            return False

        handle.cancel()
        self._handle = None
        self._retired.append(handle)
        logger.info(f"Cancelled task {task_id} ({handle.puzzle_id})")
        return True

    def shutdown(self, wait_ms: int = 2000) -> None:
        """
        Cancel everything and wait for worker threads to stop.

        Args:
            wait_ms: Per-thread wait before the thread is terminated
        """
        if self._handle is not None:
            self.cancel(self._handle.task_id)

        for handle in self._retired:
            handle.cancel()
            worker = handle.worker
            if worker is None:
                continue
            if not worker.wait(wait_ms):
                logger.warning(f"Worker for task {handle.task_id} did not stop gracefully, terminating")
                worker.terminate()
                worker.wait()
        self._retired = []
        logger.info("Task runner shut down")

    @pyqtSlot(object)
    def _on_worker_message(self, message: Message) -> None:
        """Deliver a worker message if it belongs to the live task."""
        handle = self._handle
        if handle is None or handle.task_id != message.task_id or handle.is_cancelled:
            logger.debug(f"Dropped message from stale task: {message!r}")
            return

        if isinstance(message, (TaskFinished, TaskFailed)):
            self._handle = None
            self._retired.append(handle)

        self.message_ready.emit(message)

    @pyqtSlot()
    def _reap(self) -> None:
        """Forget handles whose threads have finished."""
        self._retired = [h for h in self._retired if h.is_running]
