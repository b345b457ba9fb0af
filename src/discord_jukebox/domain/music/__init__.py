"""
Music Bounded Context

Tracks, the per-guild playback queue and the states a session moves through.
"""

from discord_jukebox.domain.music.entities import PlaybackQueue, Track
from discord_jukebox.domain.music.value_objects import (
    EnqueueMode,
    LoopMode,
    PauseToggle,
    PlayerState,
    SourceKind,
    TrackEndReason,
)

__all__ = [
    # Entities
    "Track",
    "PlaybackQueue",
    # Value Objects
    "SourceKind",
    "LoopMode",
    "EnqueueMode",
    "PlayerState",
    "PauseToggle",
    "TrackEndReason",
]
