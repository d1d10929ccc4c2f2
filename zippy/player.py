"""Asyncio runtime for the word player.

Owns the single event queue that serializes everything the controller
sees: key presses (from the keyboard thread), timer ticks (from
``loop.call_later``), token fetch results (from fetch worker threads)
and terminal resizes (from SIGWINCH). Events are handled one at a time
on the event loop, so controller and stream state never needs locking.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import threading
from typing import Protocol

from zippy.controller import PlaybackController, Scheduler
from zippy.display import PlayerDisplay
from zippy.keyboard import KeyboardHandler
from zippy.schemas.events import KeyEvent, PlayerEvent, ResizeEvent, TickEvent
from zippy.schemas.player import PlaybackSnapshot, PlayerConfig
from zippy.stream import FetchRequest, PlaybackStream

logger = logging.getLogger(__name__)


class Display(Protocol):
    def start(self, snapshot: PlaybackSnapshot) -> None: ...

    def refresh(self, snapshot: PlaybackSnapshot) -> None: ...

    def stop(self) -> None: ...


class Player(Scheduler):
    """Runs a PlaybackController until the user quits.

    Fetch requests run on short-lived daemon threads: a read blocked on
    a silent pipe must never keep the process alive after quit.
    """

    def __init__(
        self,
        stream: PlaybackStream,
        config: PlayerConfig | None = None,
        *,
        display: Display | None = None,
        keyboard: bool = True,
    ) -> None:
        self._stream = stream
        self._controller = PlaybackController(stream, self, config)
        self._display = display
        self._keyboard = KeyboardHandler(self._on_key) if keyboard else None
        self._queue: asyncio.Queue[PlayerEvent] = asyncio.Queue()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._tick_handle: asyncio.TimerHandle | None = None

    @property
    def controller(self) -> PlaybackController:
        return self._controller

    # ── Event delivery ────────────────────────────────────────

    def post(self, event: PlayerEvent) -> None:
        """Queue an event. Safe to call from any thread."""
        loop = self._loop
        if loop is None:
            self._queue.put_nowait(event)
        else:
            try:
                loop.call_soon_threadsafe(self._queue.put_nowait, event)
            except RuntimeError:
                logger.debug("Event loop closed; dropping %s", type(event).__name__)

    def _on_key(self, key: str) -> None:
        self.post(KeyEvent(key=key))

    def _on_resize(self) -> None:
        self.post(ResizeEvent())

    # ── Scheduler ─────────────────────────────────────────────

    def schedule_tick(self, delay: float, seq: int) -> None:
        # Replaces any pending tick, so a speed change applies to the next word.
        if self._loop is None:
            raise RuntimeError("Player is not running")
        if self._tick_handle is not None:
            self._tick_handle.cancel()
        self._tick_handle = self._loop.call_later(
            delay, self._queue.put_nowait, TickEvent(seq=seq)
        )

    def issue_fetch(self, request: FetchRequest) -> None:
        threading.Thread(
            target=self._fetch, args=(request,), daemon=True, name="token-fetch"
        ).start()

    def _fetch(self, request: FetchRequest) -> None:
        self.post(request.run())

    # ── Main loop ─────────────────────────────────────────────

    async def run(self) -> None:
        """Process events until a quit key arrives."""
        self._loop = asyncio.get_running_loop()
        self._install_resize_handler()

        if self._display is not None:
            self._display.start(self._controller.snapshot())
        if self._keyboard is not None:
            self._keyboard.start()
        self._controller.start()
        logger.info("Player started at %d wpm", self._controller.wpm)

        try:
            while True:
                event = await self._queue.get()
                if not self._controller.dispatch(event):
                    break
                if self._display is not None:
                    self._display.refresh(self._controller.snapshot())
        finally:
            self._shutdown()

    def _install_resize_handler(self) -> None:
        sigwinch = getattr(signal, "SIGWINCH", None)
        if sigwinch is None:
            return
        try:
            self._loop.add_signal_handler(sigwinch, self._on_resize)
        except (NotImplementedError, RuntimeError, ValueError):
            logger.debug("Resize signal handler unavailable")

    def _shutdown(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
        sigwinch = getattr(signal, "SIGWINCH", None)
        if sigwinch is not None and self._loop is not None:
            try:
                self._loop.remove_signal_handler(sigwinch)
            except (NotImplementedError, RuntimeError, ValueError):
                logger.debug("Resize signal handler already removed")
        if self._keyboard is not None:
            self._keyboard.stop()
        if self._display is not None:
            self._display.stop()
        self._stream.close()
        logger.info("Player stopped at position %d", self._stream.position())


def run_player(stream: PlaybackStream, config: PlayerConfig) -> None:
    """Run the interactive player on a fresh event loop."""
    player = Player(stream, config, display=PlayerDisplay())
    asyncio.run(player.run())
