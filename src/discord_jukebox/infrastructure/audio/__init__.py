"""Audio infrastructure - track resolvers and FFmpeg sources."""

from discord_jukebox.infrastructure.audio.composite_resolver import CompositeTrackResolver
from discord_jukebox.infrastructure.audio.ffmpeg_source import FFmpegConfig, FFmpegSourceFactory
from discord_jukebox.infrastructure.audio.sound_effects import SoundEffectCatalog
from discord_jukebox.infrastructure.audio.storage_resolver import ObjectStorageResolver
from discord_jukebox.infrastructure.audio.ytdlp_resolver import YtDlpResolver

__all__ = [
    "CompositeTrackResolver",
    "FFmpegConfig",
    "FFmpegSourceFactory",
    "ObjectStorageResolver",
    "SoundEffectCatalog",
    "YtDlpResolver",
]
