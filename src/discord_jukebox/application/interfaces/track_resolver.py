"""Port interface for turning queries, URLs and keys into tracks and audio."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ...domain.music.value_objects import SourceKind


@dataclass(frozen=True)
class StreamSource:
    """Where the audio sink should read a track's bytes from.

    ``location`` is anything FFmpeg accepts as input: a direct media URL or a
    presigned object-storage URL. ``http_headers`` are forwarded to FFmpeg.
    """

    location: str
    http_headers: dict[str, str] = field(default_factory=dict)


class TrackResolver(ABC):
    """Interface for resolving tracks and opening their audio."""

    source_kinds: ClassVar[frozenset[SourceKind]] = frozenset()

    @abstractmethod
    async def resolve_one(self, query: str) -> "Track | None":
        """Resolve a query, URL or key to a single track, or None when nothing matches."""
        ...

    @abstractmethod
    async def search(self, query: str, limit: int = 5) -> list["Track"]:
        """Return up to ``limit`` tracks matching ``query``."""
        ...

    @abstractmethod
    async def resolve_playlist(self, url: str) -> list["Track"]:
        """Expand a playlist into its tracks; empty when ``url`` is not a playlist."""
        ...

    @abstractmethod
    async def open_audio_source(self, track: "Track") -> StreamSource:
        """Acquire a playable source for ``track``.

        Raises ``ResolutionError`` on failure. Awaiting this must be
        cancellable; cancellation abandons the acquisition.
        """
        ...

    def handles(self, track: "Track") -> bool:
        return track.source_kind in self.source_kinds


class SoundEffectLibrary(ABC):
    """Catalogue of short named effects."""

    @abstractmethod
    def effect(self, effect_id: str) -> "Track":
        """Return the effect's track; unknown ids resolve to a fallback effect."""
        ...

    @abstractmethod
    def list_effects(self) -> list["Track"]:
        ...
