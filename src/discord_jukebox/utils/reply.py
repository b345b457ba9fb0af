"""Utility functions for formatting Discord messages."""

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING

from discord_jukebox.domain.shared.messages import DiscordUIMessages

if TYPE_CHECKING:
    from discord_jukebox.application.services.models import StatusSnapshot
    from discord_jukebox.domain.music.entities import Track

STATUS_QUEUE_PREVIEW = 10


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def format_track_line(position: int, track: Track, *, with_author: bool = False) -> str:
    """One numbered line; ``position`` is what the user types back (1-based)."""
    template = (
        DiscordUIMessages.SEARCH_RESULT_LINE if with_author else DiscordUIMessages.STATUS_QUEUE_LINE
    )
    return template.format(
        position=position,
        title=truncate(track.title),
        duration=track.duration_formatted,
        author=truncate(track.author, 40),
    )


def format_status(status: StatusSnapshot, *, preview: int = STATUS_QUEUE_PREVIEW) -> str:
    if not status.connected:
        return DiscordUIMessages.STATUS_NOT_CONNECTED

    lines = [
        DiscordUIMessages.STATUS_HEADER.format(
            state=status.player_state.value,
            loop=status.loop_mode.value,
            volume=status.volume,
            sfx=status.sfx_volume,
        )
    ]
    if status.now_playing is not None:
        lines.append(
            DiscordUIMessages.STATUS_NOW_PLAYING.format(
                title=truncate(status.now_playing.title),
                duration=status.now_playing.duration_formatted,
            )
        )

    if not status.queue:
        lines.append(DiscordUIMessages.STATUS_QUEUE_EMPTY)
        return "\n".join(lines)

    for i, track in enumerate(status.queue[:preview], start=1):
        lines.append(format_track_line(i, track))
    remaining = len(status.queue) - preview
    if remaining > 0:
        lines.append(DiscordUIMessages.STATUS_MORE.format(count=remaining))
    return "\n".join(lines)
