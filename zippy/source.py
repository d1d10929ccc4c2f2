"""Input source opening for file and piped stdin input.

Playback reads either a file given on the command line or whatever is
piped into stdin. An interactive stdin is never read: it means the user
forgot to provide input.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import BinaryIO

from zippy.errors import NoInputError


def _stdin_is_interactive() -> bool:
    """Check if stdin is an interactive terminal."""
    try:
        return sys.stdin.isatty()
    except (AttributeError, ValueError):
        return False


def open_input(file_path: Path | None) -> BinaryIO:
    """Open the playback input as a closable binary source.

    Args:
        file_path: Path to the input file, or None to use stdin.

    Returns:
        A binary file object. For stdin the returned object does not
        close the underlying descriptor when closed.

    Raises:
        NoInputError: If no path is given and stdin is a terminal.
        OSError: If the file cannot be opened.
    """
    if file_path is not None:
        return open(file_path, "rb")

    if _stdin_is_interactive():
        raise NoInputError("no input provided")

    # Unbuffered: close() must not wait on a read blocked in the fetch thread.
    return open(sys.stdin.fileno(), "rb", buffering=0, closefd=False)


def read_input(file_path: Path | None) -> str:
    """Read the whole playback input as text.

    Raises:
        NoInputError: If no path is given and stdin is a terminal.
        OSError: If the file cannot be read.
    """
    if file_path is not None:
        return Path(file_path).read_bytes().decode("utf-8", errors="replace")

    if _stdin_is_interactive():
        raise NoInputError("no input provided")

    return sys.stdin.buffer.read().decode("utf-8", errors="replace")
