"""
Event Source Module for aoc-runner

Merges terminal input and a periodic tick timer into a single stream of
messages, delivered through the message_ready signal on the main thread.

Input is read without blocking: a QSocketNotifier wakes the event loop when
stdin is readable, so the consumer is never held up longer than one tick.
End-of-file or a read error on stdin ends the session with a Quit message.
"""

import codecs
import logging
import os
import shutil
import sys
import time
from typing import Callable, List, Optional, Tuple

from PyQt5.QtCore import QObject, QSocketNotifier, QTimer, pyqtSignal

from .messages import KeyPressed, Quit, Resized, Tick


logger = logging.getLogger(__name__)


SizeProvider = Callable[[], Tuple[int, int]]

READ_CHUNK = 64

ESC = "\x1b"

# CSI / SS3 sequences sent by common terminals, keyed by introducer,
# first parameter (for "~" sequences) and final character
ESCAPE_SEQUENCES = {
    "[A": "up",
    "[B": "down",
    "[C": "right",
    "[D": "left",
    "[H": "home",
    "[F": "end",
    "[Z": "shift+tab",
    "[1~": "home",
    "[2~": "insert",
    "[3~": "delete",
    "[4~": "end",
    "[5~": "pgup",
    "[6~": "pgdn",
    "[7~": "home",
    "[8~": "end",
    "[11~": "f1",
    "[12~": "f2",
    "[13~": "f3",
    "[14~": "f4",
    "[15~": "f5",
    "[17~": "f6",
    "[18~": "f7",
    "[19~": "f8",
    "[20~": "f9",
    "[21~": "f10",
    "[23~": "f11",
    "[24~": "f12",
    "OA": "up",
    "OB": "down",
    "OC": "right",
    "OD": "left",
    "OH": "home",
    "OF": "end",
    "OP": "f1",
    "OQ": "f2",
    "OR": "f3",
    "OS": "f4",
}

# xterm modifier parameter, e.g. the 5 in ESC [1;5A (ctrl+up)
MODIFIERS = {
    2: "shift",
    3: "alt",
    4: "alt+shift",
    5: "ctrl",
    6: "ctrl+shift",
    7: "ctrl+alt",
    8: "ctrl+alt+shift",
}

CONTROL_KEYS = {
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    " ": "space",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x00": "ctrl+space",
    "\x1c": "ctrl+\\",
    "\x1d": "ctrl+]",
    "\x1e": "ctrl+^",
    "\x1f": "ctrl+_",
}


def _is_parameter(ch: str) -> bool:
    return "\x30" <= ch <= "\x3f"


def _is_intermediate(ch: str) -> bool:
    return "\x20" <= ch <= "\x2f"


def _is_final(ch: str) -> bool:
    return "\x40" <= ch <= "\x7e"


def _sequence_name(introducer: str, params: str, final: str) -> Optional[str]:
    """Name a complete CSI/SS3 sequence, or None for ones we do not handle."""
    fields = params.split(";")
    first = fields[0] if final == "~" else ""
    name = ESCAPE_SEQUENCES.get(f"{introducer}{first}{final}")
    if name is None:
        return None

    if len(fields) > 1 and fields[1].isdigit():
        modifier = MODIFIERS.get(int(fields[1]))
        if modifier:
            return f"{modifier}+{name}"
    return name


def split_keys(text: str, more: bool = False) -> Tuple[List[str], str]:
    """
    Decode terminal text into key names, keeping an unfinished tail.

    An escape sequence cut off at the end of the text is returned as the
    tail so it can be completed by the next read. A trailing lone ESC is
    the escape key, unless more input is known to be pending.

    Args:
        text: Decoded terminal input
        more: True if the read filled its buffer and more input may follow

    Returns:
        (key names, unconsumed tail)
    """
    keys: List[str] = []
    i = 0

    while i < len(text):
        ch = text[i]

        if ch != ESC:
            if ch in CONTROL_KEYS:
                keys.append(CONTROL_KEYS[ch])
            elif ord(ch) < 0x20:
                keys.append(f"ctrl+{chr(ord(ch) + 0x60)}")
            else:
                keys.append(ch)
            i += 1
            continue

        if i + 1 == len(text):
            if more:
                return keys, text[i:]
            keys.append("esc")
            break

        nxt = text[i + 1]
        if nxt in "[O":
            j = i + 2
            while j < len(text) and _is_parameter(text[j]):
                j += 1
            params_end = j
            while j < len(text) and _is_intermediate(text[j]):
                j += 1
            if j == len(text):
                return keys, text[i:]
            if _is_final(text[j]):
                name = _sequence_name(nxt, text[i + 2:params_end], text[j])
                if name is not None:
                    keys.append(name)
                i = j + 1
            else:
                # Malformed; drop the introducer and decode the rest as keys
                i = j
            continue

        if nxt == ESC or ord(nxt) < 0x20 or nxt == "\x7f":
            keys.append("esc")
            i += 1
        else:
            keys.append(f"alt+{nxt}")
            i += 2

    return keys, ""


def decode_keys(data: bytes) -> List[str]:
    """
    Decode raw terminal bytes into key names.

    Unfinished escape sequences at the end of data are dropped; EventSource
    uses split_keys() to carry them over to the next read instead.

    Example:
        decode_keys(b"j\\x1b[Bq") -> ["j", "down", "q"]

    Args:
        data: Bytes read from the terminal in one go

    Returns:
        Key names in the order they were typed
    """
    keys, _tail = split_keys(data.decode("utf-8", errors="replace"))
    return keys


def terminal_size() -> Tuple[int, int]:
    """Current terminal size as (width, height)."""
    size = shutil.get_terminal_size()
    return size.columns, size.lines


class EventSource(QObject):
    """
    Terminal input and tick timer, merged into one message stream.

    Restartable: stop() unsubscribes from input and the timer, and start()
    subscribes again.

    Signals:
        message_ready(object): Emits KeyPressed, Resized, Tick or Quit
    """

    message_ready = pyqtSignal(object)

    def __init__(self, tick_rate_ms: int = 250, fd: Optional[int] = None,
                 size_provider: Optional[SizeProvider] = None,
                 parent: Optional[QObject] = None):
        """
        Initialize the event source.

        Args:
            tick_rate_ms: Tick interval in milliseconds
            fd: File descriptor to read keys from (default: stdin)
            size_provider: Callable returning the terminal size
            parent: Optional Qt parent
        """
        super().__init__(parent)
        self.tick_rate_ms = tick_rate_ms
        self._fd = fd if fd is not None else sys.stdin.fileno()
        self._size_provider = size_provider or terminal_size
        self._notifier: Optional[QSocketNotifier] = None
        self._last_size: Optional[Tuple[int, int]] = None
        self._active = False

        # Bytes of a character or escape sequence split across reads
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

        self._timer = QTimer(self)
        self._timer.setInterval(tick_rate_ms)
        self._timer.timeout.connect(self._on_tick)

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self) -> None:
        """Subscribe to terminal input and start ticking."""
        if self._active:
            return

        self._notifier = QSocketNotifier(self._fd, QSocketNotifier.Read, self)
        self._notifier.activated.connect(self._on_readable)

        # First tick after (re)subscribing always reports the size
        self._last_size = None
        self._decoder.reset()
        self._pending = ""
        self._timer.start()
        self._active = True
        logger.info(f"Event source started (tick every {self.tick_rate_ms}ms)")

    def stop(self) -> None:
        """Unsubscribe from terminal input and stop ticking."""
        if not self._active:
            return

        self._timer.stop()
        if self._notifier is not None:
            self._notifier.setEnabled(False)
            self._notifier.deleteLater()
            self._notifier = None
        self._active = False
        logger.info("Event source stopped")

    def _on_tick(self) -> None:
        """Emit Resized when the size changed, then Tick."""
        size = self._size_provider()
        if size != self._last_size:
            self._last_size = size
            self.message_ready.emit(Resized(*size))
        self.message_ready.emit(Tick(time.monotonic()))

    def _on_readable(self, *_args) -> None:
        """Read whatever is available on the terminal and emit key presses."""
        try:
            data = os.read(self._fd, READ_CHUNK)
        except OSError as e:
            logger.error(f"Terminal read failed: {e}")
            self._disconnect(f"terminal read error: {e}")
            return

        if not data:
            logger.warning("Terminal input closed")
            self._disconnect("terminal disconnected")
            return

        text = self._pending + self._decoder.decode(data)
        keys, self._pending = split_keys(text, more=len(data) == READ_CHUNK)

        for key in keys:
            logger.debug(f"Key pressed: {key!r}")
            self.message_ready.emit(KeyPressed(key))

    def _disconnect(self, reason: str) -> None:
        self.stop()
        self.message_ready.emit(Quit(reason))
