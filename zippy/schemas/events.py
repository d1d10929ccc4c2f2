"""Event schemas delivered through the player's event queue.

Every input the controller reacts to arrives as one of these models:
key presses from the keyboard thread, timer ticks from the event loop,
token fetch results from the fetch worker, and terminal resizes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class KeyEvent(BaseModel):
    """A single decoded key press (e.g. ``"space"``, ``"left"``, ``"q"``)."""

    key: str = Field(description="Normalized key name")


class TickEvent(BaseModel):
    """A playback timer firing."""

    seq: int = Field(ge=0, description="Sequence number of the scheduled tick")


class ResizeEvent(BaseModel):
    """The terminal viewport changed size.

    Carries no dimensions: the display measures the console when it
    redraws, so the event only forces a refresh.
    """


class FetchResult(BaseModel):
    """Outcome of one asynchronous token fetch from a lazy stream."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    token: str = Field(default="", description="Fetched token, empty when none")
    exhausted: bool = Field(
        default=False, description="True once the source has no more input"
    )
    error: Exception | None = Field(
        default=None, description="Read failure, terminal for the stream"
    )
    generation: int = Field(
        default=0, ge=0, description="Stream generation the fetch was issued in"
    )


PlayerEvent = KeyEvent | TickEvent | ResizeEvent | FetchResult
