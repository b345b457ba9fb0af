"""Per-guild audio session: connection, sink, queue state and the active stream."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...domain.music.entities import check_volume
from ...domain.music.value_objects import LoopMode, PauseToggle, PlayerState
from ...domain.shared.exceptions import NothingPlayingError
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.music.entities import PlaybackQueue, Track
    from ..interfaces.voice_transport import AudioPlayer, VoiceConnection

logger = logging.getLogger(__name__)


@dataclass
class ActiveStream:
    """The one source a session is loading or playing.

    ``generation`` tags every termination event issued for this stream; an
    event whose tag no longer matches ``AudioSession.stream`` is stale.
    """

    generation: int
    track: Track
    loader: asyncio.Task[None] | None = None
    started: bool = False
    stopping: bool = False
    ended: bool = False
    # Induced by play-previous: skip loop and history bookkeeping on end.
    rewind: bool = False


class AudioSession:
    """All state for one guild's voice session.

    Every mutation happens while ``lock`` is held; the sequencer and the
    controller acquire it, the methods here assume it is already held.
    """

    def __init__(
        self,
        guild_id: str,
        *,
        connection: VoiceConnection,
        player: AudioPlayer,
        playback: PlaybackQueue,
    ) -> None:
        self.guild_id = guild_id
        self.connection = connection
        self.player = player
        self.playback = playback

        self.lock = asyncio.Lock()
        self.state = PlayerState.IDLE
        self.generation = 0
        self.stream: ActiveStream | None = None
        self.idle_task: asyncio.Task[None] | None = None
        self.closed = False
        self._paused_from: PlayerState | None = None

    def __repr__(self) -> str:
        return (
            f"AudioSession(guild_id={self.guild_id!r}, state={self.state.value}, "
            f"generation={self.generation}, queue={self.playback.queue_length})"
        )

    @property
    def channel_id(self) -> str:
        return self.connection.channel_id

    @property
    def now_playing(self) -> Track | None:
        return self.playback.now_playing

    @property
    def is_idle(self) -> bool:
        return self.stream is None

    def next_generation(self) -> int:
        self.generation += 1
        return self.generation

    # ── queue ─────────────────────────────────────────────────────────

    def enqueue(self, track: Track) -> int:
        length = self.playback.enqueue(track)
        logger.info(LogTemplates.QUEUE_ENQUEUED, track.title, self.guild_id, length)
        return length

    def enqueue_front(self, track: Track) -> int:
        length = self.playback.enqueue_front(track)
        logger.info(LogTemplates.QUEUE_ENQUEUED_FRONT, track.title, self.guild_id)
        return length

    def dequeue_front(self) -> Track | None:
        return self.playback.dequeue_front()

    def remove_at(self, index: int) -> Track:
        track = self.playback.remove_at(index)
        logger.info(LogTemplates.QUEUE_REMOVED, track.title, self.guild_id)
        return track

    def move_to_front(self, index: int) -> Track:
        track = self.playback.move_to_front(index)
        logger.info(LogTemplates.QUEUE_MOVED_TO_FRONT, track.title, self.guild_id)
        return track

    def clear_queue(self) -> int:
        count = self.playback.clear_queue()
        logger.info(LogTemplates.QUEUE_CLEARED, count, self.guild_id)
        return count

    def clear_history(self) -> int:
        count = self.playback.clear_history()
        logger.info(LogTemplates.HISTORY_CLEARED, count, self.guild_id)
        return count

    # ── modes ─────────────────────────────────────────────────────────

    def set_loop_mode(self, mode: LoopMode | str) -> LoopMode:
        loop_mode = self.playback.set_loop_mode(mode)
        logger.info(LogTemplates.LOOP_MODE_CHANGED, loop_mode.value, self.guild_id)
        return loop_mode

    def set_volume(self, level: int) -> int:
        """Change the music volume and apply it to the live sink.

        Range is validated before the active-track check so a bad value is
        always reported as such.
        """
        if not self.state.is_active:
            check_volume("volume", level)
            raise NothingPlayingError("volume")

        volume = self.playback.set_volume(level)
        self._apply_live_volume(is_sound_effect=False, level=volume)
        logger.info(LogTemplates.VOLUME_CHANGED, "Volume", volume, self.guild_id)
        return volume

    def set_sfx_volume(self, level: int) -> int:
        volume = self.playback.set_sfx_volume(level)
        self._apply_live_volume(is_sound_effect=True, level=volume)
        logger.info(LogTemplates.VOLUME_CHANGED, "SFX volume", volume, self.guild_id)
        return volume

    def _apply_live_volume(self, *, is_sound_effect: bool, level: int) -> None:
        stream = self.stream
        if stream is None or not stream.started:
            return
        if stream.track.is_sound_effect == is_sound_effect:
            self.player.set_volume(level)

    # ── sink ──────────────────────────────────────────────────────────

    def mark_started(self, stream: ActiveStream) -> None:
        stream.started = True
        stream.loader = None
        self._paused_from = None
        self.state = (
            PlayerState.PLAYING_SFX if stream.track.is_sound_effect else PlayerState.PLAYING
        )

    def mark_idle(self) -> None:
        self.stream = None
        self._paused_from = None
        self.state = PlayerState.IDLE

    def toggle_pause(self) -> PauseToggle:
        """Pause or resume at the sink; nothing else about the session changes."""
        if self.state.is_audible:
            if self.player.pause():
                self._paused_from = self.state
                self.state = PlayerState.PAUSED
                logger.info(LogTemplates.PLAYBACK_PAUSED, self.guild_id)
                return PauseToggle.PAUSED
            return PauseToggle.NOOP

        if self.state is PlayerState.PAUSED:
            if self.player.resume():
                self.state = self._paused_from or PlayerState.PLAYING
                self._paused_from = None
                logger.info(LogTemplates.PLAYBACK_RESUMED, self.guild_id)
                return PauseToggle.RESUMED
            return PauseToggle.NOOP

        return PauseToggle.NOOP

    # ── timers and teardown ───────────────────────────────────────────

    def cancel_idle_timer(self) -> None:
        task = self.idle_task
        self.idle_task = None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            logger.debug(LogTemplates.IDLE_TIMER_CANCELLED, self.guild_id)

    async def close(self) -> None:
        """Release everything this session holds. Idempotent.

        After this returns no stream is attached, the idle timer and any
        in-flight loader are cancelled and the connection is gone. Late
        termination events are discarded because ``closed`` is set first.
        """
        if self.closed:
            return
        self.closed = True
        self.cancel_idle_timer()

        stream = self.stream
        self.next_generation()
        self.mark_idle()
        self.playback.now_playing = None

        if stream is not None:
            stream.ended = True
            if stream.loader is not None and not stream.loader.done():
                stream.loader.cancel()
            if stream.started:
                try:
                    self.player.stop()
                except Exception as exc:
                    logger.warning(LogTemplates.SINK_STOP_FAILED, self.guild_id, exc)

        try:
            await self.connection.disconnect()
        except Exception as exc:
            logger.warning(LogTemplates.VOICE_DISCONNECT_FAILED, self.guild_id, exc)
