"""One TrackResolver in front of the stream, storage and sound-effect resolvers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from discord_jukebox.application.interfaces.track_resolver import StreamSource, TrackResolver
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.domain.shared.messages import ErrorMessages

if TYPE_CHECKING:
    from discord_jukebox.domain.music.entities import Track


class CompositeTrackResolver(TrackResolver):
    """Text queries and playlists go to the primary resolver; audio is
    opened by whichever resolver owns the track's source kind."""

    def __init__(self, primary: TrackResolver, *others: TrackResolver) -> None:
        self._primary = primary
        self._resolvers = (primary, *others)
        self.source_kinds = frozenset().union(*(r.source_kinds for r in self._resolvers))

    async def resolve_one(self, query: str) -> Track | None:
        return await self._primary.resolve_one(query)

    async def search(self, query: str, limit: int = 5) -> list[Track]:
        return await self._primary.search(query, limit)

    async def resolve_playlist(self, url: str) -> list[Track]:
        return await self._primary.resolve_playlist(url)

    async def open_audio_source(self, track: Track) -> StreamSource:
        for resolver in self._resolvers:
            if resolver.handles(track):
                return await resolver.open_audio_source(track)
        raise ResolutionError(
            track.source_locator,
            ErrorMessages.UNSUPPORTED_SOURCE.format(kind=track.source_kind.value),
        )
