"""
Shared Domain Kernel

Exceptions, user-facing messages and reusable validation types.
"""

from discord_jukebox.domain.shared.exceptions import (
    DomainError,
    InvalidModeError,
    JoinFailedError,
    NoHistoryError,
    NotConnectedError,
    NothingPlayingError,
    OutOfRangeError,
    QueueIndexNotFoundError,
    ResolutionError,
)

__all__ = [
    "DomainError",
    "NotConnectedError",
    "NothingPlayingError",
    "NoHistoryError",
    "InvalidModeError",
    "OutOfRangeError",
    "QueueIndexNotFoundError",
    "ResolutionError",
    "JoinFailedError",
]
