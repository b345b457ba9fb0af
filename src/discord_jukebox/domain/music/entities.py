"""Core domain entities for the music bounded context."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.music.value_objects import LoopMode, SourceKind
from discord_jukebox.domain.shared.exceptions import (
    NoHistoryError,
    OutOfRangeError,
    QueueIndexNotFoundError,
)
from discord_jukebox.domain.shared.types import (
    VOLUME_MAX,
    VOLUME_MIN,
    VOLUME_UNITY,
    DurationSeconds,
    NonEmptyStr,
    NonNegativeInt,
    TrackTitleStr,
    VolumePercent,
)


def format_duration(seconds: int | None) -> str:
    """Format seconds as M:SS or H:MM:SS; unknown durations render as 'Unknown'."""
    if seconds is None:
        return "Unknown"

    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class Track(BaseModel):
    """Immutable value object representing a playable track.

    ``source_locator`` is opaque to everything but the resolver that produced
    the track: a webpage URL for streams, a key for object storage, an effect
    URL for sound effects.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    title: TrackTitleStr
    source_locator: NonEmptyStr
    duration_seconds: DurationSeconds | None = None
    author: NonEmptyStr = "Unknown"
    album: NonEmptyStr | None = None
    thumbnail_url: NonEmptyStr | None = None
    source_kind: SourceKind = SourceKind.STREAM

    @property
    def duration_formatted(self) -> str:
        return format_duration(self.duration_seconds)

    @property
    def is_sound_effect(self) -> bool:
        return self.source_kind is SourceKind.SOUND_EFFECT

    @property
    def display_title(self) -> str:
        """Title with duration when it is known."""
        if self.duration_seconds is not None:
            return f"{self.title} [{self.duration_formatted}]"
        return self.title


def check_volume(field: str, level: object) -> int:
    if isinstance(level, bool) or not isinstance(level, int):
        raise OutOfRangeError(field, level, VOLUME_MIN, VOLUME_MAX)
    if not VOLUME_MIN <= level <= VOLUME_MAX:
        raise OutOfRangeError(field, level, VOLUME_MIN, VOLUME_MAX)
    return level


class PlaybackQueue(BaseModel):
    """Queue, history, loop mode and volumes for a single guild.

    Pure bookkeeping: no I/O and no awareness of connections or players.
    The owning session serialises every call.

    Invariants:
    - ``queue`` never holds the ``now_playing`` entry.
    - ``history`` is most-recent-first; unbounded when ``history_limit`` is 0.
    - volumes stay within [0, 200]; bad values are rejected, never clamped.
    """

    model_config = ConfigDict(strict=True)

    queue: list[Track] = Field(default_factory=list)
    history: list[Track] = Field(default_factory=list)
    now_playing: Track | None = None
    loop_mode: LoopMode = LoopMode.NONE
    volume: VolumePercent = VOLUME_UNITY
    sfx_volume: VolumePercent = VOLUME_UNITY
    history_limit: NonNegativeInt = 0

    @property
    def queue_length(self) -> int:
        return len(self.queue)

    @property
    def has_tracks(self) -> bool:
        return self.now_playing is not None or bool(self.queue)

    # ── queue ─────────────────────────────────────────────────────────

    def enqueue(self, track: Track) -> int:
        """Append to the back and return the new queue length."""
        self.queue.append(track)
        return len(self.queue)

    def enqueue_front(self, track: Track) -> int:
        """Prepend so the track plays next; returns the new queue length."""
        self.queue.insert(0, track)
        return len(self.queue)

    def dequeue_front(self) -> Track | None:
        if not self.queue:
            return None
        return self.queue.pop(0)

    def peek(self) -> Track | None:
        return self.queue[0] if self.queue else None

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise QueueIndexNotFoundError(-1, len(self.queue))
        if not 0 <= index < len(self.queue):
            raise QueueIndexNotFoundError(index, len(self.queue))

    def remove_at(self, index: int) -> Track:
        """Remove by 0-based index, validated against the live queue."""
        self._check_index(index)
        return self.queue.pop(index)

    def move_to_front(self, index: int) -> Track:
        self._check_index(index)
        track = self.queue.pop(index)
        self.queue.insert(0, track)
        return track

    def clear_queue(self) -> int:
        count = len(self.queue)
        self.queue.clear()
        return count

    def clear_history(self) -> int:
        count = len(self.history)
        self.history.clear()
        return count

    # ── modes ─────────────────────────────────────────────────────────

    def set_loop_mode(self, mode: LoopMode | str) -> LoopMode:
        self.loop_mode = LoopMode.parse(mode)
        return self.loop_mode

    def set_volume(self, level: int) -> int:
        self.volume = check_volume("volume", level)
        return self.volume

    def set_sfx_volume(self, level: int) -> int:
        self.sfx_volume = check_volume("sfx_volume", level)
        return self.sfx_volume

    def volume_for(self, track: Track) -> int:
        """Gain to use for ``track``: sound effects have their own level."""
        return self.sfx_volume if track.is_sound_effect else self.volume

    # ── transitions ───────────────────────────────────────────────────

    def begin(self, track: Track) -> None:
        self.now_playing = track

    def finish(self, track: Track, *, record: bool = True) -> None:
        """Apply end-of-track bookkeeping for ``track`` and clear now-playing.

        Loop mode and history are independent: every recorded track, sound
        effects included, is pushed onto history, and a looped track is
        pushed there too. Sound effects are never looped. With
        ``record=False`` (rewind, failed start) nothing is looped or recorded.
        """
        if self.now_playing is track:
            self.now_playing = None

        if not record:
            return

        if not track.is_sound_effect:
            self._requeue_for_loop(track)

        self.history.insert(0, track)
        if self.history_limit and len(self.history) > self.history_limit:
            del self.history[self.history_limit :]

    def _requeue_for_loop(self, track: Track) -> None:
        if self.loop_mode is LoopMode.TRACK:
            # Keep pending sound effects ahead of the replay.
            insert_at = 0
            while insert_at < len(self.queue) and self.queue[insert_at].is_sound_effect:
                insert_at += 1
            self.queue.insert(insert_at, track)
        elif self.loop_mode is LoopMode.QUEUE:
            self.queue.append(track)

    def rewind(self) -> Track:
        """Put the current track and the most recent history entry back on the queue.

        Afterwards the queue reads ``[previous, current, ...rest]``. Raises
        ``NoHistoryError`` when nothing has been recorded yet.
        """
        if not self.history:
            raise NoHistoryError()

        previous = self.history.pop(0)
        if self.now_playing is not None and not self.now_playing.is_sound_effect:
            self.queue.insert(0, self.now_playing)
        self.queue.insert(0, previous)
        return previous
