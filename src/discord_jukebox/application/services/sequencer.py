"""Playback sequencer: starts tracks and runs the end-of-stream transition."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from functools import partial
from typing import TYPE_CHECKING, Any

from ...domain.music.value_objects import EnqueueMode, PlayerState, TrackEndReason
from ...domain.shared.exceptions import NotConnectedError, ResolutionError
from ...domain.shared.messages import LogTemplates
from .audio_session import ActiveStream

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ..interfaces.track_resolver import TrackResolver
    from .audio_session import AudioSession

logger = logging.getLogger(__name__)

IdleCallback = Callable[[str], Awaitable[object]]


class PlaybackSequencer:
    """Drives every session through IDLE -> LOADING -> PLAYING -> ... -> IDLE.

    Methods without a ``_locked`` suffix take the session lock themselves.
    ``_locked`` helpers must be called with it held.

    The only way a stream leaves a session is ``_end_locked``: natural ends,
    errors, skips, failed starts and rewinds all funnel through it, and it
    runs at most once per stream.
    """

    def __init__(
        self,
        resolver: TrackResolver,
        *,
        idle_disconnect_seconds: float = 30.0,
        on_idle: IdleCallback | None = None,
    ) -> None:
        self._resolver = resolver
        self._idle_seconds = idle_disconnect_seconds
        self._on_idle = on_idle

    def set_idle_callback(self, callback: IdleCallback) -> None:
        self._on_idle = callback

    # ── commands ──────────────────────────────────────────────────────

    @staticmethod
    def _require_open(session: AudioSession) -> None:
        # Callers resolve tracks before taking the lock; the session may have left since.
        if session.closed:
            raise NotConnectedError(session.guild_id)

    async def enqueue(
        self, session: AudioSession, track: Track, mode: EnqueueMode = EnqueueMode.QUEUE
    ) -> int:
        """Add ``track`` and start playback if the session is idle.

        Returns 0 when the track is playing (or about to, for ``now``),
        otherwise its 1-based queue position. Raises ``NotConnectedError``
        once the session has been closed.
        """
        async with session.lock:
            self._require_open(session)
            if mode is EnqueueMode.QUEUE:
                position = session.enqueue(track)
            else:
                session.enqueue_front(track)
                position = 1

            if session.is_idle:
                await self._advance_locked(session)
            elif mode is EnqueueMode.NOW:
                await self._skip_locked(session)
                return 0

            if session.now_playing is track:
                return 0
            return position

    async def enqueue_many(self, session: AudioSession, tracks: list[Track]) -> bool:
        """Append ``tracks`` in order; returns whether playback started."""
        async with session.lock:
            self._require_open(session)
            for track in tracks:
                session.enqueue(track)
            if tracks and session.is_idle:
                await self._advance_locked(session)
                return True
            return False

    def skip(self, session: AudioSession) -> Coroutine[Any, Any, bool]:
        """Terminate the stream active at call time; awaits to False when there was none.

        The target is bound before the lock is awaited, so a second skip
        issued against the same stream cannot carry over to its successor.
        """
        return self._skip_stream(session, session.stream)

    async def _skip_stream(self, session: AudioSession, target: ActiveStream | None) -> bool:
        if target is None:
            return False
        async with session.lock:
            if session.stream is not target:
                logger.debug(LogTemplates.TRACK_SKIP_IN_FLIGHT, session.guild_id)
                return True
            return await self._skip_locked(session)

    async def play_sfx(self, session: AudioSession, effect: Track) -> None:
        """Interrupt whatever is playing with ``effect``; the queue resumes afterwards.

        The effect goes to the queue front and the current track is skipped,
        so the interrupted track is not resumed mid-way.
        """
        async with session.lock:
            self._require_open(session)
            logger.info(LogTemplates.SFX_INTERRUPT, session.guild_id, effect.title)
            session.enqueue_front(effect)
            if session.is_idle:
                await self._advance_locked(session)
            else:
                await self._skip_locked(session)

    async def play_previous(self, session: AudioSession) -> Track:
        """Replay the most recent history entry, then continue with the current track."""
        async with session.lock:
            self._require_open(session)
            previous = session.playback.rewind()
            logger.info(LogTemplates.PLAY_PREVIOUS, session.guild_id, previous.title)
            if session.is_idle:
                await self._advance_locked(session)
            else:
                await self._skip_locked(session, rewind=True)
            return previous

    async def play_from_queue_at(self, session: AudioSession, index: int) -> Track:
        async with session.lock:
            self._require_open(session)
            track = session.move_to_front(index)
            if session.is_idle:
                await self._advance_locked(session)
            else:
                await self._skip_locked(session)
            return track

    # ── transitions ───────────────────────────────────────────────────

    async def _skip_locked(self, session: AudioSession, *, rewind: bool = False) -> bool:
        stream = session.stream
        if stream is None:
            return False

        stream.rewind = stream.rewind or rewind
        if stream.stopping:
            logger.debug(LogTemplates.TRACK_SKIP_IN_FLIGHT, session.guild_id)
            return True

        stream.stopping = True
        logger.info(LogTemplates.TRACK_SKIPPED, stream.track.title, session.guild_id)

        if not stream.started:
            # Still acquiring the source: nothing reached the sink to emit an end event.
            if stream.loader is not None and not stream.loader.done():
                stream.loader.cancel()
            await self._end_locked(session, stream, TrackEndReason.STOPPED)
            return True

        session.player.stop()
        return True

    async def _begin_locked(self, session: AudioSession, track: Track) -> None:
        session.cancel_idle_timer()
        generation = session.next_generation()
        session.playback.begin(track)
        session.state = PlayerState.LOADING

        stream = ActiveStream(generation=generation, track=track)
        session.stream = stream
        logger.info(LogTemplates.TRACK_LOADING, track.title, session.guild_id, generation)
        stream.loader = asyncio.create_task(
            self._load(session, stream), name=f"audio-loader-{session.guild_id}-{generation}"
        )

    async def _load(self, session: AudioSession, stream: ActiveStream) -> None:
        track = stream.track
        failure: str | None = None
        try:
            source = await self._resolver.open_audio_source(track)
        except asyncio.CancelledError:
            logger.debug(LogTemplates.LOADER_CANCELLED, track.title, session.guild_id)
            raise
        except ResolutionError as exc:
            failure = exc.message
        except Exception as exc:
            logger.exception("Unexpected error opening audio for %s", track.title)
            failure = repr(exc)

        async with session.lock:
            if not self._is_current(session, stream):
                return

            if failure is None:
                try:
                    session.player.play(
                        source,
                        volume=session.playback.volume_for(track),
                        title=track.title,
                        on_end=partial(self._on_stream_end, session, stream.generation),
                    )
                except Exception as exc:
                    logger.exception("Audio sink refused %s", track.title)
                    failure = repr(exc)

            if failure is not None:
                logger.warning(
                    LogTemplates.TRACK_FAILED_TO_START, track.title, session.guild_id, failure
                )
                await self._end_locked(session, stream, TrackEndReason.FAILED_TO_START)
                return

            session.mark_started(stream)
            logger.info(
                LogTemplates.TRACK_STARTED, track.title, session.guild_id, stream.generation
            )

    async def _on_stream_end(
        self, session: AudioSession, generation: int, reason: TrackEndReason
    ) -> None:
        """Termination observer handed to the sink, tagged with its generation."""
        async with session.lock:
            stream = session.stream
            if stream is None or stream.generation != generation or session.closed:
                logger.debug(
                    LogTemplates.STALE_COMPLETION, session.guild_id, generation, session.generation
                )
                return
            await self._end_locked(session, stream, reason)

    def _is_current(self, session: AudioSession, stream: ActiveStream) -> bool:
        return not session.closed and not stream.ended and session.stream is stream

    async def _end_locked(
        self, session: AudioSession, stream: ActiveStream, reason: TrackEndReason
    ) -> None:
        if not self._is_current(session, stream):
            return

        stream.ended = True
        session.mark_idle()
        record = reason is not TrackEndReason.FAILED_TO_START and not stream.rewind
        session.playback.finish(stream.track, record=record)
        logger.info(LogTemplates.TRACK_ENDED, stream.track.title, session.guild_id, reason.value)

        await self._advance_locked(session)

    async def _advance_locked(self, session: AudioSession) -> None:
        track = session.dequeue_front()
        if track is not None:
            await self._begin_locked(session, track)
            return

        session.mark_idle()
        self._start_idle_timer_locked(session)

    # ── idle disconnect ───────────────────────────────────────────────

    def _start_idle_timer_locked(self, session: AudioSession) -> None:
        session.cancel_idle_timer()
        logger.info(LogTemplates.QUEUE_DRAINED, session.guild_id, self._idle_seconds)
        session.idle_task = asyncio.create_task(
            self._idle_countdown(session), name=f"idle-disconnect-{session.guild_id}"
        )

    async def _idle_countdown(self, session: AudioSession) -> None:
        await asyncio.sleep(self._idle_seconds)

        async with session.lock:
            if session.idle_task is not asyncio.current_task():
                return
            session.idle_task = None
            if session.closed or not session.is_idle or session.playback.has_tracks:
                return

        logger.info(LogTemplates.IDLE_DISCONNECT, session.guild_id)
        if self._on_idle is not None:
            await self._on_idle(session.guild_id)
