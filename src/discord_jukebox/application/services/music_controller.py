"""Music controller: the command surface every front end calls into."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.music.value_objects import EnqueueMode, LoopMode, PauseToggle
from ...domain.shared.exceptions import (
    NotConnectedError,
    NothingPlayingError,
    ResolutionError,
)
from ...domain.shared.messages import ErrorMessages
from .models import EnqueueResult, PlaylistResult, StatusSnapshot

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ..interfaces.track_resolver import SoundEffectLibrary, TrackResolver
    from ..interfaces.voice_transport import JoinRequest
    from .audio_session import AudioSession
    from .sequencer import PlaybackSequencer
    from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class MusicController:
    """Per-guild music commands keyed by an opaque guild id.

    Queue indices are 0-based. Failures raise ``DomainError`` subclasses and
    leave the session as it was. Commands that accept ``join`` connect first
    when the guild has no session; without it they raise ``NotConnectedError``.
    """

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        sequencer: PlaybackSequencer,
        resolver: TrackResolver,
        sound_effects: SoundEffectLibrary,
        storage: TrackResolver | None = None,
        search_limit: int = 5,
    ) -> None:
        self._registry = registry
        self._sequencer = sequencer
        self._resolver = resolver
        self._sound_effects = sound_effects
        self._storage = storage
        self._search_limit = search_limit

    # ── connection ────────────────────────────────────────────────────

    def _require(self, guild_id: str) -> AudioSession:
        session = self._registry.get(guild_id)
        if session is None or session.closed:
            raise NotConnectedError(guild_id)
        return session

    async def _session_for(self, guild_id: str, join: JoinRequest | None) -> AudioSession:
        if join is None:
            return self._require(guild_id)
        return await self._registry.get_or_create(guild_id, join)

    async def join(self, guild_id: str, join: JoinRequest) -> bool:
        """Connect unless already connected; returns whether a new session was made."""
        existed = guild_id in self._registry
        await self._registry.get_or_create(guild_id, join)
        return not existed

    async def leave(self, guild_id: str) -> None:
        self._require(guild_id)
        await self._registry.remove(guild_id)

    async def stop(self, guild_id: str) -> int:
        """Drop the queue and leave; returns how many queued tracks were discarded."""
        session = self._require(guild_id)
        async with session.lock:
            discarded = session.clear_queue()
        await self._registry.remove(guild_id)
        return discarded

    # ── enqueue ───────────────────────────────────────────────────────

    async def enqueue(
        self,
        guild_id: str,
        query: str,
        mode: EnqueueMode | str = EnqueueMode.QUEUE,
        *,
        join: JoinRequest | None = None,
    ) -> EnqueueResult:
        enqueue_mode = EnqueueMode.parse(mode)
        session = await self._session_for(guild_id, join)

        track = await self._resolver.resolve_one(query)
        if track is None:
            raise ResolutionError(query, ErrorMessages.NO_RESULTS)
        return await self._enqueue_track(session, track, enqueue_mode)

    async def enqueue_storage_file(
        self,
        guild_id: str,
        key: str,
        mode: EnqueueMode | str = EnqueueMode.QUEUE,
        *,
        join: JoinRequest | None = None,
    ) -> EnqueueResult:
        enqueue_mode = EnqueueMode.parse(mode)
        if self._storage is None:
            raise ResolutionError(key, ErrorMessages.UNSUPPORTED_SOURCE.format(kind="object_storage"))
        session = await self._session_for(guild_id, join)

        track = await self._storage.resolve_one(key)
        if track is None:
            raise ResolutionError(key, ErrorMessages.STORAGE_UNKNOWN_KEY)
        return await self._enqueue_track(session, track, enqueue_mode)

    async def _enqueue_track(
        self, session: AudioSession, track: Track, mode: EnqueueMode
    ) -> EnqueueResult:
        # Resolution ran without the lock; the session may have gone meanwhile.
        if session.closed:
            raise NotConnectedError(session.guild_id)
        position = await self._sequencer.enqueue(session, track, mode)
        return EnqueueResult(
            track=track, position=position, queue_length=session.playback.queue_length
        )

    async def enqueue_playlist(
        self, guild_id: str, url: str, *, join: JoinRequest | None = None
    ) -> PlaylistResult:
        session = await self._session_for(guild_id, join)
        tracks = await self._resolver.resolve_playlist(url)
        if not tracks:
            raise ResolutionError(url, ErrorMessages.NOT_A_PLAYLIST)
        if session.closed:
            raise NotConnectedError(guild_id)
        started = await self._sequencer.enqueue_many(session, tracks)
        return PlaylistResult(tracks=tracks, started=started)

    # ── transport controls ────────────────────────────────────────────

    async def skip(self, guild_id: str) -> Track:
        """Skip the current track and return it."""
        session = self._require(guild_id)
        current = session.now_playing
        if current is None or not await self._sequencer.skip(session):
            raise NothingPlayingError("skip")
        return current

    async def toggle_pause(self, guild_id: str) -> PauseToggle:
        session = self._require(guild_id)
        async with session.lock:
            outcome = session.toggle_pause()
        if outcome is PauseToggle.NOOP:
            raise NothingPlayingError("pause")
        return outcome

    async def play_previous(self, guild_id: str) -> Track:
        session = self._require(guild_id)
        return await self._sequencer.play_previous(session)

    async def play_from_queue_at(self, guild_id: str, index: int) -> Track:
        session = self._require(guild_id)
        return await self._sequencer.play_from_queue_at(session, index)

    async def play_sfx(
        self, guild_id: str, effect_id: str, *, join: JoinRequest | None = None
    ) -> Track:
        effect = self._sound_effects.effect(effect_id)
        session = await self._session_for(guild_id, join)
        await self._sequencer.play_sfx(session, effect)
        return effect

    # ── settings ──────────────────────────────────────────────────────

    async def set_loop(self, guild_id: str, mode: LoopMode | str) -> LoopMode:
        loop_mode = LoopMode.parse(mode)
        session = self._require(guild_id)
        async with session.lock:
            return session.set_loop_mode(loop_mode)

    async def set_volume(self, guild_id: str, level: int) -> int:
        session = self._require(guild_id)
        async with session.lock:
            return session.set_volume(level)

    async def set_sfx_volume(self, guild_id: str, level: int) -> int:
        session = self._require(guild_id)
        async with session.lock:
            return session.set_sfx_volume(level)

    # ── queue editing ─────────────────────────────────────────────────

    async def remove_from_queue(self, guild_id: str, index: int) -> Track:
        session = self._require(guild_id)
        async with session.lock:
            return session.remove_at(index)

    async def move_to_front(self, guild_id: str, index: int) -> Track:
        session = self._require(guild_id)
        async with session.lock:
            return session.move_to_front(index)

    async def clear_queue(self, guild_id: str) -> int:
        session = self._require(guild_id)
        async with session.lock:
            return session.clear_queue()

    async def clear_history(self, guild_id: str) -> int:
        session = self._require(guild_id)
        async with session.lock:
            return session.clear_history()

    # ── queries ───────────────────────────────────────────────────────

    async def get_status(self, guild_id: str) -> StatusSnapshot:
        session = self._registry.get(guild_id)
        if session is None or session.closed:
            return StatusSnapshot.disconnected()

        async with session.lock:
            playback = session.playback
            return StatusSnapshot(
                connected=True,
                player_state=session.state,
                channel_id=session.channel_id,
                now_playing=playback.now_playing,
                queue=list(playback.queue),
                history=list(playback.history),
                loop_mode=playback.loop_mode,
                volume=playback.volume,
                sfx_volume=playback.sfx_volume,
            )

    async def search(self, query: str, limit: int | None = None) -> list[Track]:
        return await self._resolver.search(query, limit or self._search_limit)

    async def search_storage(self, query: str, limit: int | None = None) -> list[Track]:
        if self._storage is None:
            return []
        return await self._storage.search(query, limit or self._search_limit)

    def list_sound_effects(self) -> list[Track]:
        return self._sound_effects.list_effects()
