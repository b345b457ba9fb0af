"""Slash-command music cog delegating to the music controller.

Domain errors are left to propagate to the bot's tree error handler, which
answers them ephemerally.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_jukebox.application.interfaces.voice_transport import JoinRequest
from discord_jukebox.domain.music.value_objects import PauseToggle
from discord_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages
from discord_jukebox.domain.shared.types import VOLUME_MAX, VOLUME_MIN
from discord_jukebox.utils.reply import format_status, format_track_line, truncate

if TYPE_CHECKING:
    from ....application.services.models import EnqueueResult
    from ....application.services.music_controller import MusicController
    from ....config.container import Container

logger = logging.getLogger(__name__)

ENQUEUE_MODE_CHOICES = [
    app_commands.Choice(name="Add to queue", value="queue"),
    app_commands.Choice(name="Play next", value="next"),
    app_commands.Choice(name="Play now", value="now"),
]

LOOP_MODE_CHOICES = [
    app_commands.Choice(name="Off", value="none"),
    app_commands.Choice(name="Track", value="track"),
    app_commands.Choice(name="Queue", value="queue"),
]

Position = app_commands.Range[int, 1]
Volume = app_commands.Range[int, VOLUME_MIN, VOLUME_MAX]


def _guild_key(interaction: discord.Interaction) -> str:
    assert interaction.guild_id is not None
    return str(interaction.guild_id)


def _join_request(interaction: discord.Interaction) -> JoinRequest | None:
    user = interaction.user
    if not isinstance(user, discord.Member) or not user.voice or not user.voice.channel:
        return None
    channel = user.voice.channel
    return JoinRequest(channel_id=str(channel.id), channel_name=channel.name)


def _enqueued_message(result: EnqueueResult) -> str:
    track = result.track
    return DiscordUIMessages.SUCCESS_ENQUEUED.format(
        title=truncate(track.title),
        duration=track.duration_formatted,
        author=truncate(track.author, 40),
        position=result.position_label,
    )


@app_commands.guild_only()
class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @property
    def controller(self) -> MusicController:
        return self.container.music_controller

    async def _require_voice(self, interaction: discord.Interaction) -> JoinRequest | None:
        join = _join_request(interaction)
        if join is None:
            await interaction.response.send_message(
                DiscordUIMessages.ERROR_PREFIX.format(message=ErrorMessages.USER_NOT_IN_VOICE),
                ephemeral=True,
            )
        return join

    # ── connection ────────────────────────────────────────────────────

    @app_commands.command(name="join", description="Join your voice channel.")
    async def join(self, interaction: discord.Interaction) -> None:
        join = await self._require_voice(interaction)
        if join is None:
            return
        # Voice connection can exceed the 3-second interaction deadline.
        await interaction.response.defer()
        await self.controller.join(_guild_key(interaction), join)
        await interaction.followup.send(
            DiscordUIMessages.SUCCESS_JOINED.format(channel=join.channel_name or join.channel_id)
        )

    @app_commands.command(name="leave", description="Disconnect from the voice channel.")
    async def leave(self, interaction: discord.Interaction) -> None:
        await self.controller.leave(_guild_key(interaction))
        await interaction.response.send_message(DiscordUIMessages.SUCCESS_LEFT)

    @app_commands.command(name="stop", description="Stop playback, clear the queue and leave.")
    async def stop(self, interaction: discord.Interaction) -> None:
        await self.controller.stop(_guild_key(interaction))
        await interaction.response.send_message(DiscordUIMessages.SUCCESS_STOPPED)

    # ── enqueue ───────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song by URL or search query.")
    @app_commands.describe(query="YouTube URL or search query", mode="Where the track goes")
    @app_commands.choices(mode=ENQUEUE_MODE_CHOICES)
    async def play(
        self,
        interaction: discord.Interaction,
        query: str,
        mode: app_commands.Choice[str] | None = None,
    ) -> None:
        join = await self._require_voice(interaction)
        if join is None:
            return
        await interaction.response.defer()

        result = await self.controller.enqueue(
            _guild_key(interaction), query, mode.value if mode else "queue", join=join
        )
        await interaction.followup.send(_enqueued_message(result))

    @app_commands.command(name="playlist", description="Queue every track of a playlist.")
    @app_commands.describe(url="Playlist URL")
    async def playlist(self, interaction: discord.Interaction, url: str) -> None:
        join = await self._require_voice(interaction)
        if join is None:
            return
        await interaction.response.defer()

        result = await self.controller.enqueue_playlist(_guild_key(interaction), url, join=join)
        await interaction.followup.send(
            DiscordUIMessages.SUCCESS_PLAYLIST_ENQUEUED.format(count=result.count)
        )

    @app_commands.command(name="file", description="Play an uploaded audio file.")
    @app_commands.describe(key="Storage key of the file", mode="Where the track goes")
    @app_commands.choices(mode=ENQUEUE_MODE_CHOICES)
    async def file(
        self,
        interaction: discord.Interaction,
        key: str,
        mode: app_commands.Choice[str] | None = None,
    ) -> None:
        join = await self._require_voice(interaction)
        if join is None:
            return
        await interaction.response.defer()

        result = await self.controller.enqueue_storage_file(
            _guild_key(interaction), key, mode.value if mode else "queue", join=join
        )
        await interaction.followup.send(_enqueued_message(result))

    @app_commands.command(name="sfx", description="Interrupt playback with a sound effect.")
    @app_commands.describe(effect="Sound effect to play")
    async def sfx(self, interaction: discord.Interaction, effect: str) -> None:
        join = await self._require_voice(interaction)
        if join is None:
            return
        await interaction.response.defer()

        track = await self.controller.play_sfx(_guild_key(interaction), effect, join=join)
        await interaction.followup.send(DiscordUIMessages.SUCCESS_SFX.format(title=track.title))

    @sfx.autocomplete("effect")
    async def _sfx_autocomplete(
        self, interaction: discord.Interaction, current: str
    ) -> list[app_commands.Choice[str]]:
        needle = current.lower()
        choices = []
        for track in self.controller.list_sound_effects():
            effect_id = track.source_locator.rsplit("/", 1)[-1].removesuffix(".mp3")
            if needle in effect_id:
                choices.append(app_commands.Choice(name=track.title, value=effect_id))
        return choices[:25]

    # ── transport controls ────────────────────────────────────────────

    @app_commands.command(name="skip", description="Skip the current track.")
    async def skip(self, interaction: discord.Interaction) -> None:
        await self.controller.skip(_guild_key(interaction))
        await interaction.response.send_message(DiscordUIMessages.SUCCESS_SKIPPED)

    @app_commands.command(name="pause", description="Pause or resume playback.")
    async def pause(self, interaction: discord.Interaction) -> None:
        outcome = await self.controller.toggle_pause(_guild_key(interaction))
        message = (
            DiscordUIMessages.SUCCESS_PAUSED
            if outcome is PauseToggle.PAUSED
            else DiscordUIMessages.SUCCESS_RESUMED
        )
        await interaction.response.send_message(message)

    @app_commands.command(name="previous", description="Go back to the previous track.")
    async def previous(self, interaction: discord.Interaction) -> None:
        track = await self.controller.play_previous(_guild_key(interaction))
        await interaction.response.send_message(
            DiscordUIMessages.SUCCESS_PREVIOUS.format(title=truncate(track.title))
        )

    @app_commands.command(name="jump", description="Play a queued track right away.")
    @app_commands.describe(position="Queue position (1 = next)")
    async def jump(self, interaction: discord.Interaction, position: Position) -> None:
        track = await self.controller.play_from_queue_at(_guild_key(interaction), position - 1)
        await interaction.response.send_message(
            DiscordUIMessages.SUCCESS_JUMPED.format(title=truncate(track.title))
        )

    # ── settings ──────────────────────────────────────────────────────

    @app_commands.command(name="loop", description="Set the loop mode.")
    @app_commands.choices(mode=LOOP_MODE_CHOICES)
    async def loop(self, interaction: discord.Interaction, mode: app_commands.Choice[str]) -> None:
        loop_mode = await self.controller.set_loop(_guild_key(interaction), mode.value)
        await interaction.response.send_message(
            DiscordUIMessages.SUCCESS_LOOP.format(mode=loop_mode.value)
        )

    @app_commands.command(name="volume", description="Set the music volume (0-200).")
    async def volume(self, interaction: discord.Interaction, level: Volume) -> None:
        applied = await self.controller.set_volume(_guild_key(interaction), level)
        await interaction.response.send_message(DiscordUIMessages.SUCCESS_VOLUME.format(level=applied))

    @app_commands.command(name="sfxvolume", description="Set the sound effect volume (0-200).")
    async def sfxvolume(self, interaction: discord.Interaction, level: Volume) -> None:
        applied = await self.controller.set_sfx_volume(_guild_key(interaction), level)
        await interaction.response.send_message(
            DiscordUIMessages.SUCCESS_SFX_VOLUME.format(level=applied)
        )

    # ── queue editing ─────────────────────────────────────────────────

    @app_commands.command(name="remove", description="Remove a track from the queue.")
    @app_commands.describe(position="Queue position (1 = next)")
    async def remove(self, interaction: discord.Interaction, position: Position) -> None:
        track = await self.controller.remove_from_queue(_guild_key(interaction), position - 1)
        await interaction.response.send_message(
            DiscordUIMessages.SUCCESS_REMOVED.format(title=truncate(track.title))
        )

    @app_commands.command(name="move", description="Move a queued track to the front.")
    @app_commands.describe(position="Queue position (1 = next)")
    async def move(self, interaction: discord.Interaction, position: Position) -> None:
        track = await self.controller.move_to_front(_guild_key(interaction), position - 1)
        await interaction.response.send_message(
            DiscordUIMessages.SUCCESS_MOVED.format(title=truncate(track.title))
        )

    @app_commands.command(name="clear", description="Clear the queue.")
    async def clear(self, interaction: discord.Interaction) -> None:
        count = await self.controller.clear_queue(_guild_key(interaction))
        await interaction.response.send_message(
            DiscordUIMessages.SUCCESS_QUEUE_CLEARED.format(count=count)
        )

    @app_commands.command(name="clearhistory", description="Forget previously played tracks.")
    async def clearhistory(self, interaction: discord.Interaction) -> None:
        count = await self.controller.clear_history(_guild_key(interaction))
        await interaction.response.send_message(
            DiscordUIMessages.SUCCESS_HISTORY_CLEARED.format(count=count)
        )

    # ── queries ───────────────────────────────────────────────────────

    @app_commands.command(name="queue", description="Show what is playing and what is queued.")
    async def queue(self, interaction: discord.Interaction) -> None:
        status = await self.controller.get_status(_guild_key(interaction))
        await interaction.response.send_message(format_status(status), ephemeral=True)

    @app_commands.command(name="search", description="Search for tracks without queueing them.")
    @app_commands.describe(query="Search terms")
    async def search(self, interaction: discord.Interaction, query: str) -> None:
        await interaction.response.defer(ephemeral=True)
        tracks = await self.controller.search(query)
        if not tracks:
            await interaction.followup.send(DiscordUIMessages.SEARCH_NO_RESULTS, ephemeral=True)
            return
        lines = [format_track_line(i, t, with_author=True) for i, t in enumerate(tracks, start=1)]
        await interaction.followup.send("\n".join(lines), ephemeral=True)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
