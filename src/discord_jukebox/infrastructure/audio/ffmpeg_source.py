"""
FFmpeg Audio Sources

Builds discord.py audio sources that pipe a resolved stream through FFmpeg.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import discord

from discord_jukebox.application.interfaces.track_resolver import StreamSource
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.shared.messages import LogTemplates
from discord_jukebox.domain.shared.types import VOLUME_MAX, VOLUME_UNITY

logger = logging.getLogger(__name__)


def percent_to_gain(volume: int) -> float:
    """100% is unity gain; the sink accepts 0.0-2.0."""
    return max(0, min(VOLUME_MAX, volume)) / VOLUME_UNITY


@dataclass
class FFmpegConfig:
    """Configuration for FFmpeg audio processing."""

    before_options: str = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
    options: str = "-vn"
    fade_in_seconds: float = 0.0
    extra_headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: AudioSettings) -> FFmpegConfig:
        opts = settings.ffmpeg_options
        return cls(
            before_options=opts.get("before_options", cls.before_options),
            options=opts.get("options", cls.options),
        )

    def get_before_options(self, headers: dict[str, str] | None = None) -> str:
        """Get FFmpeg before_options, forwarding HTTP headers the extractor requires."""
        merged = {**self.extra_headers, **(headers or {})}
        if not merged:
            return self.before_options
        header_blob = "".join(f"{name}: {value}\r\n" for name, value in merged.items())
        return f'{self.before_options} -headers "{header_blob}"'

    def get_options(self) -> str:
        if self.fade_in_seconds > 0:
            return f'{self.options} -af "afade=t=in:ss=0:d={self.fade_in_seconds}"'
        return self.options


class FFmpegSourceFactory:
    """Creates one FFmpeg-backed, volume-controlled source per played track.

    The FFmpeg process belongs to the returned source: discord.py calls
    ``cleanup()`` once the source is stopped or exhausted, which kills it.
    """

    def __init__(self, config: FFmpegConfig | None = None) -> None:
        self._config = config or FFmpegConfig()

    def create(self, stream: StreamSource, volume: int) -> discord.PCMVolumeTransformer:
        source = discord.FFmpegPCMAudio(
            stream.location,
            before_options=self._config.get_before_options(stream.http_headers),
            options=self._config.get_options(),
        )
        return discord.PCMVolumeTransformer(source, volume=percent_to_gain(volume))

    @staticmethod
    def release(source: discord.AudioSource) -> None:
        """Kill the FFmpeg process of a source that never reached the sink."""
        try:
            source.cleanup()
        except Exception as e:
            logger.debug(LogTemplates.FFMPEG_SOURCE_CLEANUP_ERROR, e)
