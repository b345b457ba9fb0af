"""DTOs returned by the music controller."""

from __future__ import annotations

from pydantic import BaseModel

from ...domain.music.entities import Track
from ...domain.music.value_objects import LoopMode, PlayerState
from ...domain.shared.messages import DiscordUIMessages
from ...domain.shared.types import NonNegativeInt, VolumePercent


class EnqueueResult(BaseModel):
    """Where a requested track landed.

    ``position`` is 0 when the track is (about to be) playing, otherwise its
    1-based position in the queue.
    """

    track: Track
    position: NonNegativeInt = 0
    queue_length: NonNegativeInt = 0

    @property
    def is_now_playing(self) -> bool:
        return self.position == 0

    @property
    def position_label(self) -> str:
        if self.is_now_playing:
            return DiscordUIMessages.POSITION_NOW_PLAYING
        return DiscordUIMessages.POSITION_IN_QUEUE.format(position=self.position)


class PlaylistResult(BaseModel):
    tracks: list[Track]
    started: bool = False

    @property
    def count(self) -> int:
        return len(self.tracks)


class StatusSnapshot(BaseModel):
    """Point-in-time view of one guild's session."""

    connected: bool
    player_state: PlayerState = PlayerState.IDLE
    channel_id: str | None = None
    now_playing: Track | None = None
    queue: list[Track] = []
    history: list[Track] = []
    loop_mode: LoopMode = LoopMode.NONE
    volume: VolumePercent = 100
    sfx_volume: VolumePercent = 100

    @classmethod
    def disconnected(cls) -> StatusSnapshot:
        return cls(connected=False)

    @property
    def total_duration_seconds(self) -> int | None:
        """Sum of known queue durations; None when any entry is unknown."""
        durations = [t.duration_seconds for t in self.queue]
        if any(d is None for d in durations):
            return None
        return sum(d for d in durations if d is not None)
