"""
Tests for the pure update function.

Usage:
    pytest tests/test_model.py
"""

import random

from aoc_runner.event_source import decode_keys
from aoc_runner.messages import (
    KeyPressed, Resized, Tick, RunPuzzle, CancelRun,
    TaskProgress, TaskFinished, TaskFailed, Quit,
    StartTask, CancelTask, Shutdown,
)
from aoc_runner.model import AppState, RunStatus, initial_state, update


PUZZLES = ["day01", "day02", "day03"]


def fresh() -> AppState:
    return initial_state(PUZZLES, ["One", "Two", "Three"])


def running(puzzle_id: str = "day01") -> AppState:
    state, _ = update(fresh(), RunPuzzle(puzzle_id))
    return state


def test_initial_state_is_idle():
    state = fresh()
    assert state.status == RunStatus.IDLE
    assert state.active_task is None
    assert state.output is None
    assert state.highlighted == "day01"


def test_initial_state_cursor_on_selected_puzzle():
    assert initial_state(PUZZLES, selected="day02").cursor == 1
    assert initial_state(PUZZLES, selected="missing").cursor == 0


def test_run_then_finish_scenario():
    state, commands = update(fresh(), RunPuzzle("day01"))
    assert commands == [StartTask(1, "day01")]
    assert state.status == RunStatus.RUNNING
    assert state.selected == "day01"
    assert state.active_task == 1

    state, commands = update(state, TaskFinished(1, "day01", "42", 3.5))
    assert commands == []
    assert state.status == RunStatus.IDLE
    assert state.output == "42"
    assert state.elapsed_ms == 3.5
    assert state.active_task is None


def test_switch_puzzle_cancels_before_starting():
    state, commands = update(running("day01"), RunPuzzle("day02"))
    assert commands == [CancelTask(1), StartTask(2, "day02")]
    assert state.status == RunStatus.RUNNING
    assert state.selected == "day02"
    assert state.active_task == 2
    assert state.cursor == 1


def test_disconnect_while_running_goes_straight_to_quit():
    state, commands = update(running(), Quit("terminal disconnected"))
    assert state.status == RunStatus.QUIT
    assert commands == [CancelTask(1), Shutdown()]
    assert state.error is None


def test_quit_while_idle_only_shuts_down():
    state, commands = update(fresh(), Quit())
    assert state.should_quit
    assert commands == [Shutdown()]


def test_messages_after_quit_are_ignored():
    state, _ = update(fresh(), Quit())
    for message in (RunPuzzle("day01"), Tick(1.0), KeyPressed("j"), Quit()):
        new_state, commands = update(state, message)
        assert new_state == state
        assert commands == []


def test_failure_sets_errored():
    state, _ = update(running(), TaskFailed(1, "day01", "ValueError: bad"))
    assert state.status == RunStatus.ERRORED
    assert state.error == "ValueError: bad"
    assert state.active_task is None


def test_new_run_clears_error():
    state, _ = update(running(), TaskFailed(1, "day01", "boom"))
    state, commands = update(state, RunPuzzle("day01"))
    assert commands == [StartTask(2, "day01")]
    assert state.error is None
    assert state.status == RunStatus.RUNNING


def test_cancelled_result_never_changes_state():
    state, commands = update(running(), CancelRun())
    assert commands == [CancelTask(1)]
    assert state.status == RunStatus.IDLE

    after, commands = update(state, TaskFinished(1, "day01", "late"))
    assert after == state
    assert commands == []

    after, _ = update(state, TaskFailed(1, "day01", "late failure"))
    assert after == state


def test_superseded_result_is_ignored():
    state, _ = update(running("day01"), RunPuzzle("day02"))
    after, _ = update(state, TaskFinished(1, "day01", "stale"))
    assert after == state
    assert after.status == RunStatus.RUNNING


def test_cancel_when_idle_does_nothing():
    state, commands = update(fresh(), CancelRun())
    assert state == fresh()
    assert commands == []


def test_unknown_puzzle_is_an_error():
    state, commands = update(running(), RunPuzzle("day99"))
    assert commands == [CancelTask(1)]
    assert state.status == RunStatus.ERRORED
    assert "day99" in state.error
    assert state.active_task is None


def test_progress_only_for_active_task():
    state = running()
    state, _ = update(state, TaskProgress(1, 0.5, "line 5/10"))
    assert state.progress == 0.5
    assert state.progress_note == "line 5/10"

    unchanged, _ = update(state, TaskProgress(7, 0.9))
    assert unchanged == state

    clamped, _ = update(state, TaskProgress(1, 1.7))
    assert clamped.progress == 1.0


def test_key_navigation_is_clamped():
    state, _ = update(fresh(), KeyPressed("k"))
    assert state.cursor == 0

    for key in ("j", "down", "j", "j"):
        state, _ = update(state, KeyPressed(key))
    assert state.cursor == 2

    state, _ = update(state, KeyPressed("up"))
    assert state.cursor == 1


def test_enter_runs_highlighted_puzzle():
    state, _ = update(fresh(), KeyPressed("j"))
    state, commands = update(state, KeyPressed("enter"))
    assert commands == [StartTask(1, "day02")]
    assert state.selected == "day02"


def test_cancel_and_quit_keys():
    state, commands = update(running(), KeyPressed("c"))
    assert commands == [CancelTask(1)]

    for key in ("q", "esc", "ctrl+c"):
        quit_state, commands = update(running(), KeyPressed(key))
        assert quit_state.should_quit
        assert commands[-1] == Shutdown()


def test_space_runs_highlighted_puzzle():
    state, commands = update(fresh(), KeyPressed(decode_keys(b" ")[0]))
    assert commands == [StartTask(1, "day01")]
    assert state.status == RunStatus.RUNNING


def test_function_and_modified_keys_do_not_quit():
    state = running()
    for key in decode_keys(b"\x1bOP\x1b[15~\x1b[1;2A\x1bj"):
        state, commands = update(state, KeyPressed(key))
        assert Shutdown() not in commands
    assert state.status == RunStatus.RUNNING


def test_unknown_key_leaves_state_unchanged():
    state, commands = update(fresh(), KeyPressed("x"))
    assert state == fresh()
    assert commands == []


def test_resize_records_size():
    state, commands = update(fresh(), Resized(120, 40))
    assert state.size == (120, 40)
    assert commands == []


def test_tick_rate_measured_from_timestamps():
    state = fresh()
    for timestamp in (10.0, 10.5, 11.0):
        state, _ = update(state, Tick(timestamp))
    assert state.ticks == 3
    assert state.tick_rate == 2.0
    assert state.tick_window_start == 11.0


def _random_messages(seed: int, count: int = 300):
    rng = random.Random(seed)
    messages = []
    for _ in range(count):
        task_id = rng.randint(1, 12)
        choice = rng.randint(0, 9)
        if choice == 0:
            messages.append(RunPuzzle(rng.choice(PUZZLES + ["day99"])))
        elif choice == 1:
            messages.append(CancelRun())
        elif choice == 2:
            messages.append(TaskFinished(task_id, "day01", str(task_id)))
        elif choice == 3:
            messages.append(TaskFailed(task_id, "day01", "error"))
        elif choice == 4:
            messages.append(TaskProgress(task_id, rng.random()))
        elif choice == 5:
            messages.append(Tick(len(messages) * 0.25))
        elif choice == 6:
            messages.append(Resized(rng.randint(20, 200), rng.randint(10, 60)))
        else:
            messages.append(KeyPressed(rng.choice(["j", "k", "enter", "c", "x"])))
    return messages


def test_update_is_deterministic():
    for seed in range(5):
        messages = _random_messages(seed)
        first = fresh()
        second = fresh()
        for message in messages:
            first, _ = update(first, message)
        for message in messages:
            second, _ = update(second, message)
        assert first == second


def test_at_most_one_live_task_after_every_update():
    for seed in range(10):
        state = fresh()
        live = set()
        for message in _random_messages(seed) + [Quit()]:
            state, commands = update(state, message)
            for command in commands:
                if isinstance(command, StartTask):
                    live.add(command.task_id)
                elif isinstance(command, CancelTask):
                    live.discard(command.task_id)
            if isinstance(message, (TaskFinished, TaskFailed)):
                live.discard(message.task_id)

            assert len(live) <= 1
            assert (state.active_task is not None) == (state.status == RunStatus.RUNNING)
            if live:
                assert live == {state.active_task}
        assert not live
