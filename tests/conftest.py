"""
Shared fixtures for aoc-runner tests.
"""

import threading

import pytest
from PyQt5.QtCore import QCoreApplication

from aoc_runner.puzzles import PuzzleSolver, SolveContext


@pytest.fixture(scope="session")
def qapp():
    """Qt application instance needed for timers, notifiers and queued signals."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Point config and data directories at a temporary location."""
    monkeypatch.setenv("AOC_RUNNER_CONFIG", str(tmp_path / "config"))
    monkeypatch.setenv("AOC_RUNNER_DATA", str(tmp_path / "data"))
    return tmp_path


class FixedAnswer(PuzzleSolver):
    """Returns a fixed answer immediately."""
    name = "fixed"
    title = "Fixed answer"

    def __init__(self, answer: str = "42"):
        self.answer = answer

    def solve(self, context: SolveContext) -> str:
        return self.answer


class Failing(PuzzleSolver):
    name = "failing"
    title = "Always fails"

    def solve(self, context: SolveContext) -> str:
        raise ValueError("bad input")


class Blocking(PuzzleSolver):
    """Polls for cancellation until released."""
    name = "blocking"
    title = "Blocks until released"

    def __init__(self, release: threading.Event):
        self.release = release

    def solve(self, context: SolveContext) -> str:
        while not self.release.wait(0.01):
            context.raise_if_cancelled()
        return "late"


class Stubborn(PuzzleSolver):
    """Never polls for cancellation."""
    name = "stubborn"
    title = "Ignores cancellation"

    def __init__(self, release: threading.Event):
        self.release = release

    def solve(self, context: SolveContext) -> str:
        self.release.wait(5.0)
        return "ignored"
