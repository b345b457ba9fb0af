"""Session registry: guild id to live audio session."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from ...domain.music.entities import PlaybackQueue
from ...domain.shared.messages import LogTemplates
from .audio_session import AudioSession

if TYPE_CHECKING:
    from ..interfaces.voice_transport import JoinRequest, VoiceTransport

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns every ``AudioSession`` in the process.

    An entry exists exactly while its voice connection is established. Create
    and remove for one guild are serialised by a per-guild lock; guilds never
    contend with each other.
    """

    def __init__(
        self,
        voice_transport: VoiceTransport,
        *,
        default_volume: int = 100,
        default_sfx_volume: int = 100,
        history_limit: int = 0,
    ) -> None:
        self._transport = voice_transport
        self._default_volume = default_volume
        self._default_sfx_volume = default_sfx_volume
        self._history_limit = history_limit
        self._sessions: dict[str, AudioSession] = {}
        self._guild_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._sessions

    def get(self, guild_id: str) -> AudioSession | None:
        return self._sessions.get(guild_id)

    def guild_ids(self) -> list[str]:
        return list(self._sessions)

    async def get_or_create(self, guild_id: str, join: JoinRequest) -> AudioSession:
        """Return the guild's session, connecting first when there is none.

        Joining while connected is a no-op, whatever channel is requested.
        A session whose connection has dropped is closed and replaced.
        Raises ``JoinFailedError`` from the transport with nothing registered.
        """
        async with self._guild_locks[guild_id]:
            session = self._sessions.get(guild_id)
            if session is not None:
                if session.connection.is_connected():
                    logger.debug(LogTemplates.SESSION_ALREADY_EXISTS, guild_id)
                    return session
                logger.warning(LogTemplates.SESSION_STALE, guild_id)
                del self._sessions[guild_id]
                async with session.lock:
                    await session.close()

            connection = await self._transport.connect(guild_id, join)
            try:
                player = connection.attach_player()
            except BaseException:
                await connection.disconnect()
                raise

            session = AudioSession(
                guild_id,
                connection=connection,
                player=player,
                playback=PlaybackQueue(
                    volume=self._default_volume,
                    sfx_volume=self._default_sfx_volume,
                    history_limit=self._history_limit,
                ),
            )
            self._sessions[guild_id] = session
            logger.info(LogTemplates.SESSION_CREATED, guild_id, join.channel_id)
            return session

    async def remove(self, guild_id: str) -> bool:
        """Tear the guild's session down and forget it. Idempotent."""
        async with self._guild_locks[guild_id]:
            session = self._sessions.pop(guild_id, None)
            if session is None:
                logger.debug(LogTemplates.SESSION_REMOVE_MISSING, guild_id)
                return False

            async with session.lock:
                await session.close()

        logger.info(LogTemplates.SESSION_REMOVED, guild_id)
        return True

    async def close_all(self) -> int:
        """Remove every session; used at shutdown."""
        closed = 0
        for guild_id in self.guild_ids():
            try:
                if await self.remove(guild_id):
                    closed += 1
            except Exception as exc:
                logger.error(LogTemplates.SESSION_CLOSE_ERROR, guild_id, exc)
        logger.info(LogTemplates.REGISTRY_CLOSED, closed)
        return closed
