"""Port interface for voice connections and the audio sink they carry."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.value_objects import TrackEndReason
    from .track_resolver import StreamSource

TrackEndCallback = Callable[["TrackEndReason"], Awaitable[None]]


@dataclass(frozen=True)
class JoinRequest:
    """Target of a voice join."""

    channel_id: str
    channel_name: str | None = None


class AudioPlayer(ABC):
    """The audio-output sink attached to one voice connection.

    Contract: every source handed to ``play`` produces exactly one ``on_end``
    call (finished, errored or stopped), awaited on the event loop. ``stop``
    only requests termination; the terminal event still arrives via ``on_end``.
    """

    @abstractmethod
    def play(
        self,
        source: "StreamSource",
        *,
        volume: int,
        title: str,
        on_end: TrackEndCallback,
    ) -> None:
        """Start feeding ``source`` at ``volume`` percent."""
        ...

    @abstractmethod
    def stop(self) -> None:
        """Terminate the current source, if any."""
        ...

    @abstractmethod
    def pause(self) -> bool:
        ...

    @abstractmethod
    def resume(self) -> bool:
        ...

    @abstractmethod
    def set_volume(self, volume: int) -> None:
        """Apply ``volume`` percent to the live source, if any."""
        ...


class VoiceConnection(ABC):
    """An established voice-channel transport for one guild."""

    channel_id: str

    @abstractmethod
    def attach_player(self) -> AudioPlayer:
        """Return the sink bound to this connection."""
        ...

    @abstractmethod
    def is_connected(self) -> bool:
        """False once the link has dropped, e.g. after a kick or a gateway reconnect."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Tear the connection down. Safe to call more than once."""
        ...


class VoiceTransport(ABC):
    """Factory for voice connections."""

    @abstractmethod
    async def connect(self, guild_id: str, request: JoinRequest) -> VoiceConnection:
        """Connect to ``request.channel_id``; raises ``JoinFailedError`` on failure."""
        ...
