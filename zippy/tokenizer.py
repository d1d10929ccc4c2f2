"""Whitespace tokenization of playback input.

``tokenize`` splits a complete text in one go for eager playback.
``Tokenizer`` pulls one token at a time from a binary source for lazy
playback, so arbitrarily long or slow (piped) input never has to be
held in memory.
"""

from __future__ import annotations

import io
from typing import BinaryIO


def tokenize(text: str) -> list[str]:
    """Split text into words on any run of whitespace."""
    return text.split()


class Tokenizer:
    """Incremental whitespace tokenizer over a binary source.

    Each ``next()`` call reads characters until a complete token is
    available and returns ``(token, exhausted, error)``:

    - ``("word", False, None)``: a token followed by whitespace.
    - ``("word", True, None)``: the final token, ended by end-of-input.
    - ``("", True, None)``: end-of-input with nothing left.
    - ``("", True, error)``: the read failed; every later call returns
      the same error.
    """

    def __init__(self, source: BinaryIO) -> None:
        self._reader = io.TextIOWrapper(source, encoding="utf-8", errors="replace")
        self._done = False
        self._error: Exception | None = None

    def next(self) -> tuple[str, bool, Exception | None]:
        """Read the next token from the source."""
        if self._error is not None:
            return "", True, self._error
        if self._done:
            return "", True, None

        chars: list[str] = []
        while True:
            try:
                ch = self._reader.read(1)
            except (OSError, ValueError) as exc:
                # ValueError: the source was closed underneath us (restart)
                self._error = exc
                return "", True, exc

            if not ch:
                self._done = True
                return "".join(chars), True, None

            if ch.isspace():
                if chars:
                    return "".join(chars), False, None
                continue

            chars.append(ch)
