"""Terminal keyboard input.

A daemon thread reads single key presses from the controlling terminal
and hands them to a callback as normalized key names. When the text to
play is piped into stdin, keys are read from ``/dev/tty`` instead.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
import threading
from collections.abc import Callable
from typing import TextIO

logger = logging.getLogger(__name__)

_POLL_SECONDS = 0.1

_ESCAPE_SEQUENCES: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
}

# Windows extended keys arrive as "\x00" or "\xe0" followed by a scan code
_WINDOWS_SCAN_CODES: dict[str, str] = {
    "H": "up",
    "P": "down",
    "M": "right",
    "K": "left",
}


def decode_key(read_char: Callable[[], str]) -> str:
    """Decode one key press from a character source.

    Returns the character itself, or a name for special keys
    (``"space"``, ``"enter"``, ``"ctrl+c"``, ``"escape"``, arrow keys).
    Unrecognized escape sequences decode to ``""``.
    """
    ch = read_char()
    if ch in ("\r", "\n"):
        return "enter"
    if ch == "\x03":
        return "ctrl+c"
    if ch == " ":
        return "space"
    if ch == "\t":
        return "tab"
    if ch == "\x1b":
        ch2 = read_char()
        if ch2 in ("[", "O"):
            return _ESCAPE_SEQUENCES.get(read_char(), "")
        return "escape"
    if ch in ("\x00", "\xe0"):
        return _WINDOWS_SCAN_CODES.get(read_char(), "")
    return ch


def _read_byte(fd: int) -> str:
    """Read one byte straight from the descriptor, bypassing Python buffering."""
    data = os.read(fd, 1)
    if not data:
        raise EOFError
    return data.decode("latin-1")


def _open_terminal() -> TextIO | None:
    """Return a readable handle on the controlling terminal, or None."""
    try:
        if sys.stdin.isatty():
            return sys.stdin
    except (AttributeError, ValueError):
        pass
    if platform.system() == "Windows":
        return None
    try:
        return open("/dev/tty", encoding="utf-8", errors="replace")
    except OSError:
        return None


class KeyboardHandler:
    """Daemon thread that reads keypresses and forwards them.

    The terminal is put into cbreak mode for the lifetime of the thread
    and restored on ``stop()``. Reads are polled so the thread notices
    the stop request within ``_POLL_SECONDS``.
    """

    def __init__(self, on_key: Callable[[str], None]) -> None:
        self._on_key = on_key
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Start the keyboard thread. Returns False if no terminal is available."""
        if platform.system() == "Windows":
            target, args = self._run_windows, ()
        else:
            terminal = _open_terminal()
            if terminal is None:
                logger.info("No terminal available; keyboard input disabled")
                return False
            target, args = self._run_posix, (terminal,)

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=target, args=args, daemon=True, name="keyboard-handler"
        )
        self._thread.start()
        return True

    def stop(self) -> None:
        """Signal the keyboard thread to stop and wait briefly for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=_POLL_SECONDS * 5)
            self._thread = None

    def _emit(self, key: str) -> None:
        if key:
            self._on_key(key)

    def _run_posix(self, terminal: TextIO) -> None:
        import select
        import termios
        import tty

        fd = terminal.fileno()
        old_settings = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)
            while not self._stop_event.is_set():
                ready, _, _ = select.select([fd], [], [], _POLL_SECONDS)
                if not ready:
                    continue
                try:
                    key = decode_key(lambda: _read_byte(fd))
                except (EOFError, OSError):
                    break
                self._emit(key)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
            if terminal is not sys.stdin:
                terminal.close()

    def _run_windows(self) -> None:
        import msvcrt
        import time

        while not self._stop_event.is_set():
            if not msvcrt.kbhit():
                time.sleep(_POLL_SECONDS)
                continue
            self._emit(decode_key(msvcrt.getwch))
