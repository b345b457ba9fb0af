"""TrackResolver over an object-storage bucket of uploaded audio files."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import PurePosixPath
from typing import ClassVar, Final

from pydantic import BaseModel, ConfigDict

from discord_jukebox.application.interfaces.object_storage import (
    ObjectStorageCatalog,
    StoredObject,
)
from discord_jukebox.application.interfaces.track_resolver import StreamSource, TrackResolver
from discord_jukebox.config.settings import StorageSettings
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.music.value_objects import SourceKind
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from discord_jukebox.domain.shared.types import NonNegativeFloat

logger = logging.getLogger(__name__)

UNKNOWN_ARTIST: Final[str] = "Unknown Artist"


class StoredTrackMetadata(BaseModel):
    """Display metadata for one stored file, after fallbacks are applied."""

    model_config = ConfigDict(frozen=True)

    title: str
    artist: str = UNKNOWN_ARTIST
    album: str | None = None
    duration_seconds: int | None = None


class _MetadataEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    metadata: StoredTrackMetadata
    cached_at: NonNegativeFloat


def filename_title(key: str) -> str:
    """'music/Artist - Song.mp3' -> 'Artist - Song'."""
    return PurePosixPath(key).stem or key


class ObjectStorageResolver(TrackResolver):
    """Turns bucket keys into tracks; audio is fetched through presigned URLs."""

    source_kinds: ClassVar[frozenset[SourceKind]] = frozenset({SourceKind.OBJECT_STORAGE})

    def __init__(self, catalog: ObjectStorageCatalog, settings: StorageSettings | None = None) -> None:
        self._catalog = catalog
        self._settings = settings or StorageSettings()
        self._metadata_cache: dict[str, _MetadataEntry] = {}

    def is_audio_file(self, key: str) -> bool:
        return key.lower().endswith(self._settings.audio_extensions)

    async def _metadata(self, key: str) -> StoredTrackMetadata:
        now = time.time()
        cached = self._metadata_cache.get(key)
        if cached is not None and now - cached.cached_at < self._settings.metadata_cache_seconds:
            return cached.metadata

        try:
            tags = await self._catalog.read_tags(key)
        except Exception as exc:
            # Unreadable tags are common for uploads; fall back but don't cache.
            logger.warning(LogTemplates.STORAGE_METADATA_FALLBACK, key, exc)
            return StoredTrackMetadata(title=filename_title(key))

        metadata = StoredTrackMetadata(
            title=(tags.title or "").strip() or filename_title(key),
            artist=(tags.artist or "").strip() or UNKNOWN_ARTIST,
            album=(tags.album or "").strip() or None,
            duration_seconds=round(tags.duration_seconds) if tags.duration_seconds else None,
        )
        self._metadata_cache[key] = _MetadataEntry(metadata=metadata, cached_at=now)
        return metadata

    async def _to_track(self, key: str) -> Track:
        metadata = await self._metadata(key)
        return Track(
            title=metadata.title[:500],
            source_locator=key,
            duration_seconds=metadata.duration_seconds,
            author=metadata.artist,
            album=metadata.album,
            source_kind=SourceKind.OBJECT_STORAGE,
        )

    async def list_audio_files(self) -> list[StoredObject]:
        objects = await self._catalog.list_objects(self._settings.prefix)
        files = [obj for obj in objects if self.is_audio_file(obj.key)]
        logger.debug(LogTemplates.STORAGE_LISTED, len(files), self._settings.prefix)
        return files

    async def list_tracks(self) -> list[Track]:
        """Every stored audio file as a track, sorted by title."""
        files = await self.list_audio_files()
        tracks = await asyncio.gather(*(self._to_track(obj.key) for obj in files))
        return sorted(tracks, key=lambda t: t.title.lower())

    # ── TrackResolver ─────────────────────────────────────────────────

    async def resolve_one(self, query: str) -> Track | None:
        key = query.strip()
        if not key:
            return None
        if not self.is_audio_file(key):
            raise ResolutionError(key, ErrorMessages.STORAGE_NOT_AUDIO)
        return await self._to_track(key)

    async def search(self, query: str, limit: int = 5) -> list[Track]:
        """Case-insensitive match on title, artist, album or filename."""
        needle = query.strip().lower()
        files = await self.list_audio_files()

        matches: list[Track] = []
        for obj in files:
            track = await self._to_track(obj.key)
            haystack = [track.title, track.author, track.album or "", obj.filename]
            if not needle or any(needle in field.lower() for field in haystack):
                matches.append(track)

        matches.sort(key=lambda t: t.title.lower())
        return matches[:limit]

    async def resolve_playlist(self, url: str) -> list[Track]:
        return []

    async def open_audio_source(self, track: Track) -> StreamSource:
        try:
            url = await self._catalog.presign(
                track.source_locator, self._settings.presign_expiry_seconds
            )
        except Exception as exc:
            raise ResolutionError(track.source_locator, repr(exc)) from exc
        return StreamSource(location=url)
