"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum

from discord_jukebox.domain.shared.exceptions import InvalidModeError
from discord_jukebox.domain.shared.messages import ErrorMessages


class SourceKind(Enum):
    """Where a track's audio comes from."""

    STREAM = "stream"
    OBJECT_STORAGE = "object_storage"
    SOUND_EFFECT = "sound_effect"


class LoopMode(Enum):
    """Loop mode settings for queue playback."""

    NONE = "none"
    TRACK = "track"  # replay the finished track next
    QUEUE = "queue"  # append the finished track to the back

    @classmethod
    def parse(cls, value: LoopMode | str) -> LoopMode:
        """Accept a member or its value (case-insensitive); anything else is rejected."""
        if isinstance(value, LoopMode):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidModeError(value)


class EnqueueMode(Enum):
    """Where a newly requested track goes."""

    QUEUE = "queue"  # back of the queue
    NEXT = "next"  # front of the queue
    NOW = "now"  # front of the queue, then skip the current track

    @classmethod
    def parse(cls, value: EnqueueMode | str) -> EnqueueMode:
        if isinstance(value, EnqueueMode):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidModeError(value, ErrorMessages.INVALID_ENQUEUE_MODE)


class PlayerState(Enum):
    """Sequencer state of one session.

    Transitions:
    - IDLE -> LOADING (play)
    - LOADING -> PLAYING | PLAYING_SFX (source attached)
    - LOADING -> IDLE | LOADING (source failed, auto-advance)
    - PLAYING <-> PAUSED (pause/resume, sink level only)
    - PLAYING | PLAYING_SFX | PAUSED -> LOADING | IDLE (stream ended)
    """

    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    PLAYING_SFX = "playing_sfx"

    @property
    def is_active(self) -> bool:
        return self is not PlayerState.IDLE

    @property
    def is_audible(self) -> bool:
        return self in {PlayerState.PLAYING, PlayerState.PLAYING_SFX}


class TrackEndReason(Enum):
    """Terminal event for one played source."""

    FINISHED = "finished"
    ERRORED = "errored"
    STOPPED = "stopped"
    # Never reached the sink: the audio source could not be acquired.
    FAILED_TO_START = "failed_to_start"


class PauseToggle(Enum):
    """Outcome of a pause/resume toggle."""

    PAUSED = "paused"
    RESUMED = "resumed"
    NOOP = "noop"
