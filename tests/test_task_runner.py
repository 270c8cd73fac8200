"""
Tests for the task body and the QThread-based task runner.

Worker results cross threads as queued signals, so each test waits for the
worker threads and then processes pending Qt events.

Usage:
    pytest tests/test_task_runner.py
"""

import threading
import time

from aoc_runner.inputs import PuzzleInputError
from aoc_runner.messages import TaskFailed, TaskFinished, TaskProgress
from aoc_runner.puzzles import SolveContext, create_puzzle
from aoc_runner.task_runner import TaskRunner, execute

from conftest import Blocking, Failing, FixedAnswer, Stubborn


def no_input(puzzle_id: str) -> str:
    return ""


def drain(qapp, *handles):
    """Wait for worker threads, then deliver their queued signals."""
    for handle in handles:
        assert handle.worker.wait(5000)
    qapp.processEvents()
    qapp.processEvents()


def results(received):
    return [m for m in received if not isinstance(m, TaskProgress)]


# --- execute() ------------------------------------------------------------

def test_execute_returns_answer():
    message = execute(1, "fixed", lambda _: FixedAnswer("42"), no_input, threading.Event())
    assert isinstance(message, TaskFinished)
    assert (message.task_id, message.puzzle_id, message.answer) == (1, "fixed", "42")
    assert message.elapsed_ms >= 0.0


def test_execute_times_solving_not_input_loading():
    def slow_input(puzzle_id):
        time.sleep(0.2)
        return ""

    message = execute(1, "fixed", lambda _: FixedAnswer("42"), slow_input, threading.Event())
    assert isinstance(message, TaskFinished)
    assert message.elapsed_ms < 200.0


def test_solve_context_elapsed_grows():
    context = SolveContext(raw_input="")
    first = context.elapsed_ms()
    time.sleep(0.01)
    assert context.elapsed_ms() >= first + 10.0


def test_execute_converts_solver_error():
    message = execute(3, "failing", lambda _: Failing(), no_input, threading.Event())
    assert message == TaskFailed(3, "failing", "ValueError: bad input")


def test_execute_converts_input_error():
    def missing(puzzle_id):
        raise PuzzleInputError(f"No input for {puzzle_id}")

    message = execute(1, "fixed", lambda _: FixedAnswer(), missing, threading.Event())
    assert isinstance(message, TaskFailed)
    assert message.error == "PuzzleInputError: No input for fixed"


def test_execute_unknown_puzzle_fails():
    message = execute(1, "day99", create_puzzle, no_input, threading.Event())
    assert isinstance(message, TaskFailed)
    assert "Unknown puzzle" in message.error


def test_execute_cancelled_delivers_nothing():
    flag = threading.Event()
    flag.set()
    release = threading.Event()
    assert execute(1, "blocking", lambda _: Blocking(release), no_input, flag) is None

    # A solver that never polls still has its result dropped
    release.set()
    assert execute(1, "stubborn", lambda _: Stubborn(release), no_input, flag) is None


def test_execute_real_puzzle():
    message = execute(1, "day01", create_puzzle, lambda _: "1abc2\n", threading.Event())
    assert message.answer == "Part 1: 12\nPart 2: 12"


# --- TaskRunner -----------------------------------------------------------

def test_runner_delivers_exactly_one_result(qapp):
    runner = TaskRunner(no_input, create_solver=lambda _: FixedAnswer("42"))
    received = []
    runner.message_ready.connect(received.append)

    handle = runner.start(1, "fixed")
    assert runner.live_handle is handle
    drain(qapp, handle)

    assert results(received) == [received[-1]]
    assert isinstance(received[-1], TaskFinished)
    assert received[-1].answer == "42"
    assert runner.live_handle is None
    runner.shutdown()


def test_runner_delivers_failure(qapp):
    runner = TaskRunner(no_input, create_solver=lambda _: Failing())
    received = []
    runner.message_ready.connect(received.append)

    handle = runner.start(5, "failing")
    drain(qapp, handle)

    assert results(received) == [TaskFailed(5, "failing", "ValueError: bad input")]
    runner.shutdown()


def test_cancelled_task_delivers_nothing(qapp):
    release = threading.Event()
    runner = TaskRunner(no_input, create_solver=lambda _: Stubborn(release))
    received = []
    runner.message_ready.connect(received.append)

    handle = runner.start(1, "stubborn")
    assert runner.cancel(1)
    assert handle.is_cancelled
    assert runner.live_handle is None

    release.set()
    drain(qapp, handle)
    assert received == []
    runner.shutdown()


def test_cancel_unknown_task_is_ignored(qapp):
    runner = TaskRunner(no_input, create_solver=lambda _: FixedAnswer())
    assert runner.cancel(99) is False
    handle = runner.start(1, "fixed")
    assert runner.cancel(2) is False
    drain(qapp, handle)
    runner.shutdown()


def test_starting_new_task_cancels_previous(qapp):
    release = threading.Event()
    solvers = {"blocking": Blocking(release), "fixed": FixedAnswer("second")}
    runner = TaskRunner(no_input, create_solver=lambda puzzle_id: solvers[puzzle_id])
    received = []
    runner.message_ready.connect(received.append)

    first = runner.start(1, "blocking")
    second = runner.start(2, "fixed")
    assert first.is_cancelled
    assert not second.is_cancelled
    assert runner.live_handle is second

    release.set()
    drain(qapp, first, second)

    assert all(message.task_id == 2 for message in received)
    assert [m.answer for m in results(received)] == ["second"]
    runner.shutdown()


def test_shutdown_stops_polling_workers(qapp):
    release = threading.Event()
    runner = TaskRunner(no_input, create_solver=lambda _: Blocking(release))
    received = []
    runner.message_ready.connect(received.append)

    handle = runner.start(1, "blocking")
    runner.shutdown(wait_ms=5000)

    assert handle.is_cancelled
    assert not handle.is_running
    assert runner.pending_threads == 0
    qapp.processEvents()
    assert received == []
