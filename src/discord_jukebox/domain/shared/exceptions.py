"""Exception taxonomy for per-call, recoverable playback failures.

Every error here is local to the call that raised it: the session it concerns
stays usable and the process never goes down because of one of them.
"""

from __future__ import annotations

from discord_jukebox.domain.shared.messages import ErrorMessages


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class NotConnectedError(DomainError):
    """Raised when an operation needs a voice connection and the guild has none."""

    def __init__(self, guild_id: str, message: str | None = None) -> None:
        super().__init__(message or ErrorMessages.NOT_CONNECTED, code="NOT_CONNECTED")
        self.guild_id = guild_id


class NothingPlayingError(DomainError):
    """Raised when pause/skip is requested without an active track."""

    def __init__(self, operation: str, message: str | None = None) -> None:
        super().__init__(message or ErrorMessages.NOTHING_PLAYING, code="NOTHING_PLAYING")
        self.operation = operation


class NoHistoryError(DomainError):
    """Raised by play-previous when nothing has finished yet."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or ErrorMessages.NO_HISTORY, code="NO_HISTORY")


class InvalidModeError(DomainError):
    """Raised for a loop or enqueue mode outside its allowed set."""

    def __init__(self, mode: object, template: str = ErrorMessages.INVALID_LOOP_MODE) -> None:
        super().__init__(template.format(mode=mode), code="INVALID_MODE")
        self.mode = mode


class OutOfRangeError(DomainError):
    """Raised when a numeric setting falls outside its allowed domain."""

    def __init__(self, field: str, value: object, minimum: int, maximum: int) -> None:
        super().__init__(
            ErrorMessages.VALUE_OUT_OF_RANGE.format(
                field=field, value=value, minimum=minimum, maximum=maximum
            ),
            code="OUT_OF_RANGE",
        )
        self.field = field
        self.value = value
        self.minimum = minimum
        self.maximum = maximum


class QueueIndexNotFoundError(DomainError):
    """Raised when a queue index is stale or out of range for the live queue."""

    def __init__(self, index: int, queue_length: int) -> None:
        super().__init__(
            ErrorMessages.QUEUE_INDEX_NOT_FOUND.format(position=index + 1, length=queue_length),
            code="NOT_FOUND",
        )
        self.index = index
        self.queue_length = queue_length


class ResolutionError(DomainError):
    """Raised when a query, URL or storage key cannot be turned into playable audio."""

    def __init__(self, query: str, reason: str | None = None) -> None:
        message = ErrorMessages.RESOLUTION_FAILED.format(query=query)
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, code="RESOLUTION_ERROR")
        self.query = query
        self.reason = reason


class JoinFailedError(DomainError):
    """Raised when the voice transport cannot establish a connection."""

    def __init__(self, guild_id: str, channel_id: str, reason: str | None = None) -> None:
        message = ErrorMessages.JOIN_FAILED
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, code="JOIN_FAILED")
        self.guild_id = guild_id
        self.channel_id = channel_id
        self.reason = reason
