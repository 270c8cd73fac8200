"""
Terminal Module - Terminal setup, teardown and frame drawing.

Puts the terminal in cbreak mode without signal keys (so ctrl+c arrives as
a key), switches to the alternate screen through rich's Live display, and
restores everything on exit. An exception hook restores the terminal before
a traceback is printed.
"""

import logging
import os
import sys
import termios
import tty
from typing import Callable, Optional, Tuple

from rich.console import Console, RenderableType
from rich.live import Live
from rich.text import Text

logger = logging.getLogger(__name__)


class Terminal:
    """
    The terminal the application draws on.

    Example:
        with Terminal() as terminal:
            terminal.draw(render(state))
    """

    def __init__(self, console: Optional[Console] = None, fd: Optional[int] = None,
                 on_crash: Optional[Callable[[], None]] = None):
        """
        Initialize the terminal wrapper.

        Args:
            console: Rich console to draw with (default: a new Console)
            fd: Input descriptor to configure (default: stdin)
            on_crash: Called after an unhandled exception has been reported
        """
        self.console = console or Console()
        self._fd = fd if fd is not None else sys.stdin.fileno()
        self._on_crash = on_crash
        self._saved_attrs = None
        self._live: Optional[Live] = None
        self._previous_hook = None

    @property
    def is_active(self) -> bool:
        return self._live is not None

    def size(self) -> Tuple[int, int]:
        """Current size as (width, height)."""
        size = self.console.size
        return size.width, size.height

    def enter(self) -> None:
        """Enable cbreak mode, enter the alternate screen and hide the cursor."""
        if self._live is not None:
            return

        if os.isatty(self._fd):
            self._saved_attrs = termios.tcgetattr(self._fd)
            tty.setcbreak(self._fd)
            attrs = termios.tcgetattr(self._fd)
            attrs[3] &= ~termios.ISIG
            termios.tcsetattr(self._fd, termios.TCSANOW, attrs)

        self._previous_hook = sys.excepthook
        sys.excepthook = self._excepthook

        self._live = Live(
            Text(""),
            console=self.console,
            screen=True,
            auto_refresh=False,
            redirect_stdout=False,
            redirect_stderr=False,
        )
        self._live.start()
        logger.info("Terminal entered")

    def exit(self) -> None:
        """Leave the alternate screen and restore terminal settings."""
        if self._live is not None:
            live, self._live = self._live, None
            live.stop()

        if self._saved_attrs is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None

        if self._previous_hook is not None:
            sys.excepthook = self._previous_hook
            self._previous_hook = None
        logger.info("Terminal restored")

    def draw(self, renderable: RenderableType) -> None:
        """
        Replace the frame on screen.

        Args:
            renderable: Frame built by the renderer
        """
        if self._live is None:
            raise RuntimeError("Terminal.draw() called outside enter()/exit()")
        self._live.update(renderable, refresh=True)

    def _excepthook(self, exc_type, exc, tb) -> None:
        previous = self._previous_hook or sys.__excepthook__
        self.exit()
        logger.critical("Unhandled exception, terminal restored", exc_info=(exc_type, exc, tb))
        previous(exc_type, exc, tb)
        if self._on_crash is not None:
            self._on_crash()

    def __enter__(self) -> "Terminal":
        self.enter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.exit()
