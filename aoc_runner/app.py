"""
Application Module - Loop driver and component wiring.

The LoopDriver owns the AppState. Messages from the event source and the
task runner reach it as queued Qt signals on the main thread, so they are
handled one at a time in arrival order. For each message it folds the state
with update(), executes the returned commands, and redraws on ticks.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from PyQt5.QtCore import QCoreApplication, QObject, pyqtSignal, pyqtSlot

from .event_source import EventSource
from .inputs import load_input
from .messages import (
    Command, Message, Resized, Tick,
    CancelTask, Shutdown, StartTask,
)
from .model import AppState, initial_state, update
from .puzzles import get_puzzle_info
from .renderer import render
from .settings import get_input_dir, save_settings
from .task_runner import TaskRunner
from .terminal import Terminal


logger = logging.getLogger(__name__)


DrawCallback = Callable[[AppState], None]


class LoopDriver(QObject):
    """
    Single consumer of the message stream.

    Signals:
        puzzle_started(str): Emitted when a StartTask command is executed
        finished(): Emitted after a Shutdown command has been executed
    """

    puzzle_started = pyqtSignal(str)
    finished = pyqtSignal()

    def __init__(self, state: AppState, event_source: EventSource, runner: TaskRunner,
                 draw: DrawCallback, parent: Optional[QObject] = None):
        """
        Initialize the loop driver.

        Args:
            state: Initial application state
            event_source: Source of terminal and tick messages
            runner: Background task runner
            draw: Callback drawing a state on the terminal
            parent: Optional Qt parent
        """
        super().__init__(parent)
        self._state = state
        self._event_source = event_source
        self._runner = runner
        self._draw = draw
        self._stopped = False

        event_source.message_ready.connect(self.dispatch)
        runner.message_ready.connect(self.dispatch)

    @property
    def state(self) -> AppState:
        return self._state

    def start(self) -> None:
        """Draw the first frame and start listening for events."""
        self._draw(self._state)
        self._event_source.start()
        logger.info("Loop driver started")

    @pyqtSlot(object)
    def dispatch(self, message: Message) -> None:
        """
        Handle one message.

        Args:
            message: Message from the event source or the task runner
        """
        if self._stopped:
            return

        previous_status = self._state.status
        self._state, commands = update(self._state, message)
        if self._state.status != previous_status:
            logger.info(f"Status {previous_status.name} -> {self._state.status.name} on {type(message).__name__}")

        for command in commands:
            self._execute(command)

        if not self._stopped and isinstance(message, (Tick, Resized)):
            self._draw(self._state)

    def _execute(self, command: Command) -> None:
        """Perform one side effect requested by update()."""
        logger.debug(f"Executing {command!r}")
        if isinstance(command, StartTask):
            self._runner.start(command.task_id, command.puzzle_id)
            self.puzzle_started.emit(command.puzzle_id)
        elif isinstance(command, CancelTask):
            self._runner.cancel(command.task_id)
        elif isinstance(command, Shutdown):
            self._shutdown()
        else:
            raise TypeError(f"Unknown command: {command!r}")

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        """Stop consuming messages and shut the event source and runner down."""
        if self._stopped:
            return
        self._stopped = True
        self._event_source.stop()
        self._runner.shutdown()

    def _shutdown(self) -> None:
        logger.info(f"Shutting down ({self._state.progress_note})")
        self.stop()
        self.finished.emit()


class Application:
    """
    Main application controller.

    Manages the lifecycle of the terminal, the event source and the task
    runner, connecting signals between them.
    """

    def __init__(self, settings: Dict[str, Any], tick_rate_ms: Optional[int] = None,
                 input_dir: Optional[str] = None, puzzle: Optional[str] = None):
        """
        Initialize the application.

        Args:
            settings: Loaded settings (saved back when a puzzle is run)
            tick_rate_ms: Tick interval, overrides the saved setting
            input_dir: Input directory for this run, overrides the saved setting
            puzzle: Puzzle to highlight on start, overrides the last one run
        """
        self.settings = settings
        self.tick_rate_ms = tick_rate_ms or int(settings.get("tick_rate_ms", 250))
        # Command line overrides are not written back to settings.json
        self.input_dir = Path(input_dir).expanduser() if input_dir else get_input_dir(settings)
        self.initial_puzzle = puzzle or settings.get("last_puzzle")

        self.terminal: Optional[Terminal] = None
        self.driver: Optional[LoopDriver] = None

    def setup(self, terminal: Terminal) -> LoopDriver:
        """Create the components and connect signals."""
        self.terminal = terminal

        info = get_puzzle_info()
        state = initial_state(
            [p["name"] for p in info],
            [p["title"] for p in info],
            selected=self.initial_puzzle,
        )

        event_source = EventSource(self.tick_rate_ms, size_provider=terminal.size)
        runner = TaskRunner(lambda puzzle_id: load_input(puzzle_id, self.input_dir))
        self.driver = LoopDriver(state, event_source, runner, self._draw)

        self.driver.puzzle_started.connect(self._on_puzzle_started)
        self.driver.finished.connect(QCoreApplication.quit)

        logger.info(f"Application initialized: {len(info)} puzzles, inputs from {self.input_dir}")
        return self.driver

    def _draw(self, state: AppState) -> None:
        self.terminal.draw(render(state))

    def _on_crash(self) -> None:
        """Leave the event loop with a failure code after an unhandled exception."""
        if self.driver is not None:
            self.driver.stop()
        QCoreApplication.exit(1)

    def _on_puzzle_started(self, puzzle_id: str) -> None:
        """Remember the last puzzle run."""
        self.settings["last_puzzle"] = puzzle_id
        save_settings(self.settings)

    def run(self, qt_app: QCoreApplication) -> int:
        """
        Run the event loop until Quit.

        Returns:
            Exit code
        """
        with Terminal(on_crash=self._on_crash) as terminal:
            driver = self.setup(terminal)
            driver.start()
            code = qt_app.exec_()
            driver.stop()
        logger.info(f"Event loop exited with code {code}")
        return code
