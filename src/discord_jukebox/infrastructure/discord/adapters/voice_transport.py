"""discord.py implementation of the voice transport, connection and audio sink."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from discord_jukebox.application.interfaces.voice_transport import (
    AudioPlayer,
    JoinRequest,
    TrackEndCallback,
    VoiceConnection,
    VoiceTransport,
)
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.value_objects import TrackEndReason
from discord_jukebox.domain.shared.exceptions import JoinFailedError
from discord_jukebox.domain.shared.messages import LogTemplates
from discord_jukebox.domain.shared.validators import parse_snowflake
from discord_jukebox.infrastructure.audio.ffmpeg_source import (
    FFmpegConfig,
    FFmpegSourceFactory,
    percent_to_gain,
)

if TYPE_CHECKING:
    from discord_jukebox.application.interfaces.track_resolver import StreamSource

logger = logging.getLogger(__name__)


class DiscordAudioPlayer(AudioPlayer):
    """Feeds FFmpeg sources into one ``discord.VoiceClient``.

    discord.py runs ``after`` on its audio thread; the terminal event is
    marshalled back onto the bot's loop with ``run_coroutine_threadsafe``.
    """

    def __init__(
        self,
        voice_client: discord.VoiceClient,
        loop: asyncio.AbstractEventLoop,
        source_factory: FFmpegSourceFactory,
        guild_id: str,
    ) -> None:
        self._vc = voice_client
        self._loop = loop
        self._sources = source_factory
        self._guild_id = guild_id
        self._stop_requested = False

    def play(
        self,
        source: StreamSource,
        *,
        volume: int,
        title: str,
        on_end: TrackEndCallback,
    ) -> None:
        audio = self._sources.create(source, volume)
        self._stop_requested = False
        guild_id = self._guild_id

        def after_callback(error: Exception | None = None) -> None:
            if error is not None:
                reason = TrackEndReason.ERRORED
            elif self._stop_requested:
                reason = TrackEndReason.STOPPED
            else:
                reason = TrackEndReason.FINISHED
            logger.info(LogTemplates.SINK_ENDED, guild_id, reason.value, error)

            future = asyncio.run_coroutine_threadsafe(on_end(reason), self._loop)
            future.add_done_callback(_log_callback_failure(guild_id))

        try:
            self._vc.play(audio, after=after_callback)
        except Exception:
            self._sources.release(audio)
            raise
        logger.info(LogTemplates.SINK_STARTED, title, guild_id, volume)

    def stop(self) -> None:
        if self._vc.is_playing() or self._vc.is_paused():
            self._stop_requested = True
            self._vc.stop()

    def pause(self) -> bool:
        if self._vc.is_playing():
            self._vc.pause()
            return True
        return False

    def resume(self) -> bool:
        if self._vc.is_paused():
            self._vc.resume()
            return True
        return False

    def set_volume(self, volume: int) -> None:
        source = self._vc.source
        if isinstance(source, discord.PCMVolumeTransformer):
            source.volume = percent_to_gain(volume)


def _log_callback_failure(guild_id: str):
    def _done(future: asyncio.Future[None]) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error(LogTemplates.SINK_CALLBACK_ERROR, guild_id, exc)

    return _done


class DiscordVoiceConnection(VoiceConnection):
    def __init__(
        self,
        voice_client: discord.VoiceClient,
        loop: asyncio.AbstractEventLoop,
        source_factory: FFmpegSourceFactory,
        guild_id: str,
    ) -> None:
        self._vc = voice_client
        self._loop = loop
        self._sources = source_factory
        self._guild_id = guild_id
        self._player: DiscordAudioPlayer | None = None
        self.channel_id = str(voice_client.channel.id) if voice_client.channel else ""

    def attach_player(self) -> AudioPlayer:
        if self._player is None:
            self._player = DiscordAudioPlayer(self._vc, self._loop, self._sources, self._guild_id)
        return self._player

    def is_connected(self) -> bool:
        return self._vc.is_connected()

    async def disconnect(self) -> None:
        if not self._vc.is_connected():
            return
        await self._vc.disconnect(force=True)
        logger.info(LogTemplates.VOICE_DISCONNECTED, self._guild_id)


class DiscordVoiceTransport(VoiceTransport):
    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._sources = FFmpegSourceFactory(FFmpegConfig.from_settings(self._settings))

    # TODO(integ): Exercise connect against a live test guild: success, timeout and Forbidden.
    async def connect(self, guild_id: str, request: JoinRequest) -> VoiceConnection:
        try:
            guild_snowflake = parse_snowflake(guild_id)
            channel_snowflake = parse_snowflake(request.channel_id)
        except ValueError as e:
            raise JoinFailedError(guild_id, request.channel_id, str(e)) from e

        guild = self._bot.get_guild(guild_snowflake)
        if guild is None:
            logger.warning(LogTemplates.GUILD_NOT_FOUND, guild_id)
            raise JoinFailedError(guild_id, request.channel_id, "guild not found")

        channel = guild.get_channel(channel_snowflake)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, request.channel_id)
            raise JoinFailedError(guild_id, request.channel_id, "not a voice channel")

        # A leftover client (e.g. after a gateway reconnect) blocks a fresh connect.
        stale = guild.voice_client
        if isinstance(stale, discord.VoiceClient):
            await stale.disconnect(force=True)

        try:
            async with asyncio.timeout(self._settings.connect_timeout_seconds):
                voice_client = await channel.connect(self_deaf=True)
        except TimeoutError as e:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, request.channel_id)
            raise JoinFailedError(guild_id, request.channel_id, "timed out") from e
        except discord.Forbidden as e:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, request.channel_id)
            raise JoinFailedError(guild_id, request.channel_id, "missing permissions") from e
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            raise JoinFailedError(guild_id, request.channel_id, str(e)) from e
        except Exception as e:
            logger.exception("Failed to connect to voice")
            raise JoinFailedError(guild_id, request.channel_id, repr(e)) from e

        logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
        return DiscordVoiceConnection(voice_client, self._bot.loop, self._sources, guild_id)
