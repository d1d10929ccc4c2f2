"""Pydantic schemas for player events, configuration and snapshots."""

from zippy.schemas.events import (
    FetchResult,
    KeyEvent,
    PlayerEvent,
    ResizeEvent,
    TickEvent,
)
from zippy.schemas.player import PlaybackSnapshot, PlayerConfig

__all__ = [
    "FetchResult",
    "KeyEvent",
    "PlayerEvent",
    "ResizeEvent",
    "TickEvent",
    "PlaybackSnapshot",
    "PlayerConfig",
]
