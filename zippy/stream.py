"""Playback streams: the word supply behind the controller.

Defines the PlaybackStream interface and its two implementations:

- ``EagerStream`` holds every token up front. Seeking and restart are
  synchronous index moves.
- ``LazyStream`` pulls one token at a time from its source. Each step
  forward hands back a ``FetchRequest`` that the runtime executes off the
  event loop; the outcome comes back later as a ``FetchResult`` event and
  is applied through ``handle_fetch_result()``.

The controller only ever talks to this interface and checks the
capability queries (``seekable()``, ``restartable()``) before calling
optional operations.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from zippy.errors import NoInputError, StreamInitError, StreamReadError, ZippyError
from zippy.schemas.events import FetchResult
from zippy.source import open_input, read_input
from zippy.tokenizer import Tokenizer, tokenize

logger = logging.getLogger(__name__)

_NO_INPUT_MESSAGE = "Provide input via --file or stdin."
_NO_WORDS_MESSAGE = "No words found in input."


@dataclass(frozen=True)
class FetchRequest:
    """A pending request for the next token of a lazy stream.

    ``run()`` blocks on the source, so the runtime calls it from a worker
    thread and posts the returned result back onto the event queue.
    """

    tokenizer: Tokenizer
    generation: int

    def run(self) -> FetchResult:
        token, exhausted, error = self.tokenizer.next()
        return FetchResult(
            token=token,
            exhausted=exhausted,
            error=error,
            generation=self.generation,
        )


class PlaybackStream(ABC):
    """Interface shared by eager and lazy streams."""

    # ── Lifecycle ─────────────────────────────────────────────

    @abstractmethod
    def prime(self) -> FetchRequest | None:
        """Return the request that delivers the first word, if one is needed."""

    @abstractmethod
    def close(self) -> None:
        """Release the input source. Safe to call more than once."""

    # ── Movement ──────────────────────────────────────────────

    @abstractmethod
    def advance(self) -> FetchRequest | None:
        """Move one word forward.

        Returns:
            A FetchRequest when the next word has to be fetched
            asynchronously, or None when the move completed (or was not
            possible) synchronously.
        """

    @abstractmethod
    def retreat(self) -> None:
        """Move one word back. Only valid when ``seekable()`` is True."""

    @abstractmethod
    def restart(self) -> FetchRequest | None:
        """Return to the unplayed initial state. No-op unless restartable."""

    def handle_fetch_result(self, result: FetchResult) -> bool:
        """Apply a completed fetch. Returns True if the result was applied."""
        return False

    # ── Queries ───────────────────────────────────────────────

    @abstractmethod
    def current(self) -> tuple[str, bool]:
        """The current word and whether one has been delivered."""

    @abstractmethod
    def seekable(self) -> bool:
        """Whether ``advance()``/``retreat()`` may be used for seeking."""

    @abstractmethod
    def restartable(self) -> bool:
        """Whether ``restart()`` has any effect."""

    @abstractmethod
    def can_advance(self) -> bool:
        """Whether another word may still become current."""

    @abstractmethod
    def pending(self) -> bool:
        """Whether a fetch request is in flight."""

    @abstractmethod
    def error(self) -> Exception | None:
        """The terminal read error, if the stream failed."""

    @abstractmethod
    def position(self) -> int:
        """Zero-based index of the current word, -1 before the first."""

    @abstractmethod
    def total(self) -> tuple[bool, int]:
        """``(known, count)`` of words in the whole input."""


class EagerStream(PlaybackStream):
    """Stream over a fully materialized list of words."""

    def __init__(self, words: Iterable[str], restartable: bool = False) -> None:
        self._words = list(words)
        self._idx = 0
        self._restartable = restartable

    def prime(self) -> FetchRequest | None:
        return None

    def close(self) -> None:
        pass

    def advance(self) -> FetchRequest | None:
        if self._idx < len(self._words) - 1:
            self._idx += 1
        return None

    def retreat(self) -> None:
        if self._idx > 0:
            self._idx -= 1

    def restart(self) -> FetchRequest | None:
        if self._restartable:
            self._idx = 0
        return None

    def current(self) -> tuple[str, bool]:
        if not 0 <= self._idx < len(self._words):
            return "", False
        return self._words[self._idx], True

    def seekable(self) -> bool:
        return True

    def restartable(self) -> bool:
        return self._restartable

    def can_advance(self) -> bool:
        return self._idx < len(self._words) - 1

    def pending(self) -> bool:
        return False

    def error(self) -> Exception | None:
        return None

    def position(self) -> int:
        if not self._words:
            return -1
        return self._idx

    def total(self) -> tuple[bool, int]:
        return True, len(self._words)


class LazyStream(PlaybackStream):
    """Stream that fetches one token at a time from its source.

    At most one fetch is outstanding: ``advance()`` while a fetch is in
    flight returns None instead of queueing another request. Each request
    is tagged with the stream's generation, which ``restart()`` bumps, so
    results from a superseded source are recognized and dropped.

    The stream owns its source and closes it exactly once: on
    exhaustion, on a read error, on restart, or on ``close()``.
    """

    def __init__(
        self,
        source: BinaryIO,
        file_path: Path | None = None,
        *,
        opener: Callable[[Path | None], BinaryIO] = open_input,
    ) -> None:
        self._file_path = file_path
        self._opener = opener
        self._source: BinaryIO | None = source
        self._tokenizer: Tokenizer | None = Tokenizer(source)
        self._generation = 0
        self._reset_progress()

    @property
    def generation(self) -> int:
        """Current fetch generation; results from older ones are ignored."""
        return self._generation

    def _reset_progress(self) -> None:
        self._done = False
        self._err: Exception | None = None
        self._in_flight = False
        self._has_current = False
        self._current_word = ""
        self._idx = -1
        self._total = 0

    def _close_source(self) -> None:
        if self._source is None:
            return
        try:
            self._source.close()
        except OSError:
            logger.warning("Failed to close input source", exc_info=True)
        self._source = None

    def _finish(self) -> None:
        self._done = True
        self._total = self._idx + 1
        self._close_source()

    # ── Lifecycle ─────────────────────────────────────────────

    def prime(self) -> FetchRequest | None:
        if self._has_current:
            return None
        return self.advance()

    def close(self) -> None:
        self._close_source()

    # ── Movement ──────────────────────────────────────────────

    def advance(self) -> FetchRequest | None:
        if self._done or self._in_flight or self._tokenizer is None:
            return None
        self._in_flight = True
        return FetchRequest(tokenizer=self._tokenizer, generation=self._generation)

    def retreat(self) -> None:
        raise NotImplementedError("lazy streams do not support seeking")

    def restart(self) -> FetchRequest | None:
        if not self.restartable():
            return None

        self._close_source()
        self._generation += 1
        self._reset_progress()
        self._tokenizer = None

        try:
            source = self._opener(self._file_path)
        except (OSError, ZippyError) as exc:
            logger.warning("Reopening %s failed: %s", self._file_path, exc)
            self._err = exc
            self._done = True
            return None

        logger.info("Restarted lazy stream on %s (generation %d)", self._file_path, self._generation)
        self._source = source
        self._tokenizer = Tokenizer(source)
        return self.advance()

    def handle_fetch_result(self, result: FetchResult) -> bool:
        if result.generation != self._generation or not self._in_flight:
            logger.debug(
                "Dropping stale fetch result (generation %d, current %d)",
                result.generation, self._generation,
            )
            return False

        self._in_flight = False

        if result.error is not None:
            err = StreamReadError(f"reading input failed: {result.error}")
            err.__cause__ = result.error
            self._err = err
            logger.warning("Input read failed after %d words: %s", self._idx + 1, result.error)
            self._finish()
            return True

        if result.token:
            self._idx += 1
            self._has_current = True
            self._current_word = result.token

        if result.exhausted:
            self._finish()
            logger.info("Input exhausted after %d words", self._total)
        return True

    # ── Queries ───────────────────────────────────────────────

    def current(self) -> tuple[str, bool]:
        if not self._has_current:
            return "", False
        return self._current_word, True

    def seekable(self) -> bool:
        return False

    def restartable(self) -> bool:
        return self._file_path is not None

    def can_advance(self) -> bool:
        return not self._done

    def pending(self) -> bool:
        return self._in_flight

    def error(self) -> Exception | None:
        return self._err

    def position(self) -> int:
        if not self._has_current:
            return -1
        return self._idx

    def total(self) -> tuple[bool, int]:
        if self._done:
            return True, self._total
        return False, 0


def build_stream(lazy: bool, file_path: Path | None) -> PlaybackStream:
    """Construct the playback stream for the given input.

    Args:
        lazy: Stream tokens on demand instead of reading everything first.
        file_path: Input file, or None to read piped stdin.

    Returns:
        A LazyStream or an EagerStream. Either is restartable only when
        reading from a file.

    Raises:
        StreamInitError: If no input is available, the file cannot be
            read, or (eager mode) the input holds no words.
    """
    if lazy:
        try:
            source = open_input(file_path)
        except (NoInputError, OSError) as exc:
            raise StreamInitError(_NO_INPUT_MESSAGE, show_usage=True) from exc
        return LazyStream(source, file_path)

    try:
        text = read_input(file_path)
    except (NoInputError, OSError) as exc:
        raise StreamInitError(_NO_INPUT_MESSAGE, show_usage=True) from exc

    words = tokenize(text)
    if not words:
        raise StreamInitError(_NO_WORDS_MESSAGE)
    logger.info("Loaded %d words", len(words))
    return EagerStream(words, restartable=file_path is not None)
