"""yt-dlp backed TrackResolver: direct URLs, text search and playlists."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections.abc import Iterable
from typing import Any, ClassVar, Final, cast

from yt_dlp import YoutubeDL

from discord_jukebox.application.interfaces.track_resolver import StreamSource, TrackResolver
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.music.value_objects import SourceKind
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

from .models import CACHE_MAX_SIZE, LOG_URL_TRUNCATE, CacheEntry, YtDlpOpts, YtDlpTrackInfo

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH: Final[int] = 500

_URL_RE: Final[re.Pattern[str]] = re.compile(r"https?://|www\.")
_PLAYLIST_RE: Final[re.Pattern[str]] = re.compile(r"[?&]list=|/playlist\?|/sets/")

# Shared by every resolver instance; keyed by the URL handed to yt-dlp.
_info_cache: dict[str, CacheEntry] = {}


def _cache_lookup(url: str, now: float) -> CacheEntry | None:
    entry = _info_cache.get(url)
    if entry is None:
        return None
    if entry.is_fresh(now):
        logger.debug(LogTemplates.CACHE_HIT_URL, url[:LOG_URL_TRUNCATE])
        return entry
    del _info_cache[url]
    return None


def _cache_store(url: str, info: YtDlpTrackInfo, now: float) -> None:
    _info_cache[url] = CacheEntry(info=info, cached_at=now)
    if len(_info_cache) <= CACHE_MAX_SIZE:
        return
    stale = [key for key, entry in _info_cache.items() if not entry.is_fresh(now)]
    for key in stale:
        del _info_cache[key]
    if stale:
        logger.debug(LogTemplates.CACHE_EXPIRED_CLEANED, len(stale))


class YtDlpResolver(TrackResolver):
    """Resolves network-video queries into stream tracks.

    yt-dlp blocks, so every extraction runs in a worker thread. Metadata
    lookups treat extractor errors as "nothing found"; ``open_audio_source``
    raises ``ResolutionError`` instead so the sequencer can move on.
    """

    source_kinds: ClassVar[frozenset[SourceKind]] = frozenset({SourceKind.STREAM})

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._opts = YtDlpOpts(format=self._settings.ytdlp_format)
        self._playlist_opts = self._opts.model_copy(
            update={"noplaylist": False, "extract_flat": "in_playlist"}
        )

    def is_url(self, query: str) -> bool:
        return _URL_RE.search(query) is not None

    def is_playlist(self, url: str) -> bool:
        return _PLAYLIST_RE.search(url) is not None

    def _info_to_track(self, info: YtDlpTrackInfo) -> Track | None:
        if info.locator is None:
            return None
        return Track(
            title=info.title[:MAX_TITLE_LENGTH],
            source_locator=info.locator,
            duration_seconds=info.playable_duration,
            author=info.author,
            album=info.album,
            thumbnail_url=info.thumbnail,
            source_kind=SourceKind.STREAM,
        )

    def _to_tracks(self, infos: Iterable[YtDlpTrackInfo]) -> list[Track]:
        return [track for track in map(self._info_to_track, infos) if track is not None]

    # ── worker-thread calls ───────────────────────────────────────────

    @staticmethod
    def _extract(target: str, opts: YtDlpOpts) -> Any:
        with YoutubeDL(params=cast(Any, opts.model_dump())) as ydl:
            return ydl.extract_info(target, download=False)

    def _fetch_info(self, url: str) -> YtDlpTrackInfo | None:
        now = time.time()
        cached = _cache_lookup(url, now)
        if cached is not None:
            return cached.info

        try:
            data = self._extract(url, self._opts)
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url)
            return None

        if not isinstance(data, dict):
            return None

        # Only hits are cached so a transient failure does not stick for the TTL.
        info = YtDlpTrackInfo.model_validate(dict(data))
        _cache_store(url, info, now)
        return info

    def _fetch_entries(self, target: str, opts: YtDlpOpts, failure: str) -> list[YtDlpTrackInfo]:
        try:
            data = self._extract(target, opts)
        except Exception:
            logger.exception(failure, target)
            return []

        entries = data.get("entries") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            return []
        return [YtDlpTrackInfo.model_validate(dict(e)) for e in entries if isinstance(e, dict)]

    def _search_entries(self, query: str, limit: int) -> list[YtDlpTrackInfo]:
        return self._fetch_entries(
            f"ytsearch{limit}:{query}", self._opts, LogTemplates.YTDLP_FAILED_SEARCH
        )

    # ── TrackResolver ─────────────────────────────────────────────────

    async def resolve_one(self, query: str) -> Track | None:
        query = query.strip()
        if not query:
            return None

        if self.is_url(query):
            info = await asyncio.to_thread(self._fetch_info, query)
        else:
            found = await asyncio.to_thread(self._search_entries, query, 1)
            info = found[0] if found else None
        return self._info_to_track(info) if info is not None else None

    async def search(self, query: str, limit: int = 5) -> list[Track]:
        return self._to_tracks(await asyncio.to_thread(self._search_entries, query, limit))

    async def resolve_playlist(self, url: str) -> list[Track]:
        """Flat playlist expansion; each entry's stream URL is fetched when it plays."""
        if not self.is_playlist(url):
            return []
        entries = await asyncio.to_thread(
            self._fetch_entries,
            url,
            self._playlist_opts,
            LogTemplates.YTDLP_FAILED_EXTRACT_PLAYLIST,
        )
        return self._to_tracks(entries)

    async def open_audio_source(self, track: Track) -> StreamSource:
        info = await asyncio.to_thread(self._fetch_info, track.source_locator)
        if info is None:
            raise ResolutionError(track.source_locator, ErrorMessages.NO_RESULTS)

        if not info.stream_url:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, track.title)
            raise ResolutionError(track.source_locator, ErrorMessages.NO_STREAM_URL)
        return StreamSource(location=info.stream_url, http_headers=info.http_headers)
