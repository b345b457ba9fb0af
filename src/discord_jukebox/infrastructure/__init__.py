"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cog, voice transport)
- Audio (yt-dlp, object storage, sound effects, FFmpeg)
"""
