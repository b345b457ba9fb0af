# ruff: noqa: N999
"""
Domain Layer

Pure playback state and rules, free of I/O:
- shared/: exception taxonomy, message catalogue, Annotated types
- music/: Track, PlaybackQueue and the music value objects
"""

from discord_jukebox.domain.shared.exceptions import DomainError

__all__ = ["DomainError"]
