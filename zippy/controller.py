"""Event-driven playback controller.

The controller is a two-state machine (paused / playing) layered over a
PlaybackStream. It never sleeps or blocks: timing and fetch execution
are delegated to a Scheduler, and their outcomes come back as events
through ``dispatch()``.

Ticks are numbered. Only the most recently scheduled tick is honoured,
so rescheduling (speed change, pause/resume) never leaves two tick
chains running side by side.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import StrEnum

from zippy.schemas.events import FetchResult, KeyEvent, PlayerEvent, TickEvent
from zippy.schemas.player import PlaybackSnapshot, PlayerConfig
from zippy.stream import FetchRequest, PlaybackStream

logger = logging.getLogger(__name__)


class Command(StrEnum):
    """Player actions a key can be bound to."""

    TOGGLE_PLAY = "toggle_play"
    FASTER = "faster"
    SLOWER = "slower"
    SEEK_FORWARD = "seek_forward"
    SEEK_BACKWARD = "seek_backward"
    RESTART = "restart"
    QUIT = "quit"


KEY_BINDINGS: dict[str, Command] = {
    "space": Command.TOGGLE_PLAY,
    "+": Command.FASTER,
    "=": Command.FASTER,
    "up": Command.FASTER,
    "-": Command.SLOWER,
    "_": Command.SLOWER,
    "down": Command.SLOWER,
    "right": Command.SEEK_FORWARD,
    "l": Command.SEEK_FORWARD,
    "left": Command.SEEK_BACKWARD,
    "h": Command.SEEK_BACKWARD,
    "r": Command.RESTART,
    "q": Command.QUIT,
    "ctrl+c": Command.QUIT,
}


def word_interval(wpm: int) -> float:
    """Seconds each word stays on screen at the given rate."""
    if wpm <= 0:
        return 1.0
    return 60.0 / wpm


def clamp_wpm(wpm: int, low: int, high: int) -> int:
    return max(low, min(high, wpm))


class Scheduler(ABC):
    """Runtime services the controller relies on."""

    @abstractmethod
    def schedule_tick(self, delay: float, seq: int) -> None:
        """Deliver ``TickEvent(seq=seq)`` after ``delay`` seconds."""

    @abstractmethod
    def issue_fetch(self, request: FetchRequest) -> None:
        """Run ``request`` off the event loop and deliver its FetchResult."""


class PlaybackController:
    """Drives a PlaybackStream from key, tick and fetch-result events."""

    def __init__(
        self,
        stream: PlaybackStream,
        scheduler: Scheduler,
        config: PlayerConfig | None = None,
    ) -> None:
        self._stream = stream
        self._scheduler = scheduler
        self._config = config or PlayerConfig()
        self._wpm = self._config.start_wpm
        self._playing = False
        self._tick_seq = 0

    @property
    def stream(self) -> PlaybackStream:
        return self._stream

    @property
    def playing(self) -> bool:
        return self._playing

    @property
    def wpm(self) -> int:
        return self._wpm

    @property
    def interval(self) -> float:
        """Current word interval in seconds."""
        return word_interval(self._wpm)

    # ── Event entry points ────────────────────────────────────

    def start(self) -> None:
        """Request the first word. Playback itself starts paused."""
        request = self._stream.prime()
        if request is not None:
            self._scheduler.issue_fetch(request)

    def dispatch(self, event: PlayerEvent) -> bool:
        """Handle one event. Returns False when the player should quit."""
        if isinstance(event, KeyEvent):
            return self.handle_key(event.key)
        if isinstance(event, TickEvent):
            self.on_tick(event)
        elif isinstance(event, FetchResult):
            self.on_fetch_result(event)
        return True

    def handle_key(self, key: str) -> bool:
        command = KEY_BINDINGS.get(key)
        if command is None:
            return True
        if command == Command.QUIT:
            return False

        if command == Command.TOGGLE_PLAY:
            self.toggle_play()
        elif command == Command.FASTER:
            self.change_speed(self._config.wpm_step)
        elif command == Command.SLOWER:
            self.change_speed(-self._config.wpm_step)
        elif command == Command.SEEK_FORWARD:
            self.seek_forward()
        elif command == Command.SEEK_BACKWARD:
            self.seek_backward()
        elif command == Command.RESTART:
            self.restart()
        return True

    # ── Commands ──────────────────────────────────────────────

    def toggle_play(self) -> None:
        if self._playing:
            self._pause()
            return
        if self._stream.error() is not None:
            return
        self._playing = True
        logger.debug("Playing at %d wpm", self._wpm)
        self._schedule_tick()

    def change_speed(self, delta: int) -> None:
        self._wpm = clamp_wpm(self._wpm + delta, self._config.min_wpm, self._config.max_wpm)
        logger.debug("Rate set to %d wpm", self._wpm)
        if self._playing:
            self._schedule_tick()

    def seek_forward(self) -> None:
        if self._stream.seekable():
            self._stream.advance()

    def seek_backward(self) -> None:
        if self._stream.seekable():
            self._stream.retreat()

    def restart(self) -> None:
        if not self._stream.restartable():
            return
        request = self._stream.restart()
        logger.debug("Restarted stream")
        if request is not None:
            # The tick waits for the first word to arrive.
            self._scheduler.issue_fetch(request)
            return
        if self._stream.error() is not None:
            self._pause()
        elif self._playing:
            self._schedule_tick()

    def on_tick(self, event: TickEvent) -> None:
        if not self._playing or event.seq != self._tick_seq:
            return
        if self._stream.error() is not None or not self._stream.can_advance():
            self._pause()
            return

        request = self._stream.advance()
        if request is not None:
            self._scheduler.issue_fetch(request)
        elif not self._stream.pending():
            self._schedule_tick()

    def on_fetch_result(self, result: FetchResult) -> None:
        if not self._stream.handle_fetch_result(result):
            return
        if self._stream.error() is not None:
            self._pause()
            return

        _, present = self._stream.current()
        if present and self._playing:
            self._schedule_tick()
        elif not present and not self._stream.can_advance():
            self._pause()

    # ── Rendering inputs ──────────────────────────────────────

    def snapshot(self) -> PlaybackSnapshot:
        word, present = self._stream.current()
        known, total = self._stream.total()
        error = self._stream.error()
        return PlaybackSnapshot(
            word=word if present else None,
            position=self._stream.position(),
            total_known=known,
            total=total,
            wpm=self._wpm,
            playing=self._playing,
            seekable=self._stream.seekable(),
            restartable=self._stream.restartable(),
            finished=not self._stream.can_advance(),
            error=str(error) if error is not None else None,
        )

    # ── Internals ─────────────────────────────────────────────

    def _pause(self) -> None:
        if self._playing:
            logger.debug("Paused at position %d", self._stream.position())
        self._playing = False
        # Invalidate any tick still on its way.
        self._tick_seq += 1

    def _schedule_tick(self) -> None:
        self._tick_seq += 1
        self._scheduler.schedule_tick(self.interval, self._tick_seq)
