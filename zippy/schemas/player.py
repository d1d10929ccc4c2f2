"""Player configuration and render snapshot schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class PlayerConfig(BaseModel):
    """Playback settings.

    Loaded from ``defaults.toml`` and the user's config file, then
    overridden by command-line flags.
    """

    start_wpm: int = Field(default=500, gt=0, description="Initial words per minute")
    wpm_step: int = Field(default=25, gt=0, description="WPM change per speed key press")
    min_wpm: int = Field(default=50, ge=50, le=1200, description="Lowest selectable rate")
    max_wpm: int = Field(default=1200, ge=50, le=1200, description="Highest selectable rate")
    lazy: bool = Field(
        default=False, description="Stream tokens on demand instead of buffering"
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> PlayerConfig:
        if self.min_wpm > self.max_wpm:
            raise ValueError(
                f"min_wpm ({self.min_wpm}) must not exceed max_wpm ({self.max_wpm})"
            )
        return self


class PlaybackSnapshot(BaseModel):
    """Everything the renderer needs to draw one frame.

    Produced by the controller on demand; the renderer never touches the
    controller or stream directly.
    """

    word: str | None = Field(default=None, description="Current word, None before the first")
    position: int = Field(default=-1, ge=-1, description="Zero-based index of the word")
    total_known: bool = False
    total: int = Field(default=0, ge=0)
    wpm: int = Field(ge=0)
    playing: bool = False
    seekable: bool = False
    restartable: bool = False
    finished: bool = Field(
        default=False, description="The stream cannot advance any further"
    )
    error: str | None = None
