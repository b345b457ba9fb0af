"""
Unit Tests for YtDlpResolver

Tests for the yt-dlp based track resolver:
- URL and playlist detection
- Info model coercion and track conversion
- resolve_one for URLs and search queries
- search and playlist expansion
- open_audio_source stream URL selection and errors
- Caching behaviour

YoutubeDL is patched everywhere; no network access happens.
"""

import time
from unittest.mock import MagicMock, patch

import pytest

from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.value_objects import SourceKind
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.infrastructure.audio.models import (
    CACHE_TTL,
    MAX_DURATION_SECONDS,
    AudioFormatInfo,
    CacheEntry,
    YtDlpTrackInfo,
)
from discord_jukebox.infrastructure.audio.ytdlp_resolver import YtDlpResolver, _info_cache

YDL_PATH = "discord_jukebox.infrastructure.audio.ytdlp_resolver.YoutubeDL"
VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


@pytest.fixture
def resolver():
    return YtDlpResolver(AudioSettings())


@pytest.fixture(autouse=True)
def clear_cache():
    """Clear the module cache before and after each test."""
    _info_cache.clear()
    yield
    _info_cache.clear()


@pytest.fixture
def raw_info():
    return {
        "webpage_url": VIDEO_URL,
        "url": "https://rr1.googlevideo.com/audio.webm",
        "title": "Never Gonna Give You Up",
        "duration": 213,
        "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/hq.jpg",
        "uploader": "Rick Astley",
        "http_headers": {"User-Agent": "Mozilla/5.0"},
        "view_count": 1_000_000,
    }


def _mock_ydl(mock_cls: MagicMock, result=None, side_effect=None) -> MagicMock:
    extract = mock_cls.return_value.__enter__.return_value.extract_info
    if side_effect is not None:
        extract.side_effect = side_effect
    else:
        extract.return_value = result
    return extract


# =============================================================================
# Detection
# =============================================================================


class TestDetection:
    @pytest.mark.parametrize(
        "query", [VIDEO_URL, "http://youtu.be/abc", "www.youtube.com/watch?v=x"]
    )
    def test_is_url(self, resolver, query):
        assert resolver.is_url(query) is True

    def test_plain_query_is_not_url(self, resolver):
        assert resolver.is_url("lofi hip hop") is False

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/playlist?list=PL123",
            "https://www.youtube.com/watch?v=abc&list=PL123",
            "https://soundcloud.com/artist/sets/album",
        ],
    )
    def test_is_playlist(self, resolver, url):
        assert resolver.is_playlist(url) is True

    def test_video_is_not_playlist(self, resolver):
        assert resolver.is_playlist(VIDEO_URL) is False


# =============================================================================
# Conversion
# =============================================================================


class TestInfoConversion:
    def test_info_to_track(self, resolver, raw_info):
        track = resolver._info_to_track(YtDlpTrackInfo.model_validate(raw_info))

        assert track.title == "Never Gonna Give You Up"
        assert track.source_locator == VIDEO_URL
        assert track.duration_seconds == 213
        assert track.author == "Rick Astley"
        assert track.source_kind is SourceKind.STREAM

    def test_missing_fields_fall_back(self, resolver):
        info = YtDlpTrackInfo.model_validate({"url": "https://x/a", "title": "  ", "duration": "?"})

        track = resolver._info_to_track(info)

        assert track.title == "Unknown Title"
        assert track.author == "Unknown"
        assert track.duration_seconds is None
        assert track.source_locator == "https://x/a"

    def test_no_locator_returns_none(self, resolver):
        assert resolver._info_to_track(YtDlpTrackInfo(title="x")) is None

    def test_live_durations_dropped(self, resolver):
        info = YtDlpTrackInfo(url="https://x/a", duration=MAX_DURATION_SECONDS + 1)

        assert resolver._info_to_track(info).duration_seconds is None

    def test_long_title_truncated(self, resolver):
        info = YtDlpTrackInfo(url="https://x/a", title="x" * 900)

        assert len(resolver._info_to_track(info).title) == 500

    def test_author_precedence(self):
        info = YtDlpTrackInfo(artist="", uploader="Uploader", channel="Channel")

        assert info.author == "Uploader"

    def test_stream_from_formats(self):
        info = YtDlpTrackInfo(
            formats=[
                AudioFormatInfo(url="https://x/video", acodec="none"),
                AudioFormatInfo(url="https://x/low", acodec="opus"),
                AudioFormatInfo(url="https://x/high", acodec="opus"),
            ]
        )

        assert info.stream_url == "https://x/high"

    def test_direct_url_preferred(self):
        info = YtDlpTrackInfo(
            url="https://x/direct", formats=[AudioFormatInfo(url="https://x/f", acodec="opus")]
        )

        assert info.stream_url == "https://x/direct"

    def test_malformed_formats_dropped(self):
        info = YtDlpTrackInfo.model_validate(
            {"formats": ["junk", {"url": "https://x/a", "acodec": "opus"}]}
        )

        assert info.stream_url == "https://x/a"


# =============================================================================
# Resolution
# =============================================================================


class TestResolveOne:
    async def test_url_uses_extract_info(self, resolver, raw_info):
        with patch(YDL_PATH) as mock_ydl:
            extract = _mock_ydl(mock_ydl, raw_info)

            track = await resolver.resolve_one(VIDEO_URL)

        assert track.title == "Never Gonna Give You Up"
        extract.assert_called_once_with(VIDEO_URL, download=False)

    async def test_query_uses_single_search(self, resolver, raw_info):
        with patch(YDL_PATH) as mock_ydl:
            extract = _mock_ydl(mock_ydl, {"entries": [raw_info]})

            track = await resolver.resolve_one("rick astley")

        assert track.source_locator == VIDEO_URL
        extract.assert_called_once_with("ytsearch1:rick astley", download=False)

    async def test_empty_query(self, resolver):
        assert await resolver.resolve_one("   ") is None

    async def test_extractor_error_returns_none(self, resolver):
        with patch(YDL_PATH) as mock_ydl:
            _mock_ydl(mock_ydl, side_effect=Exception("Video unavailable"))

            assert await resolver.resolve_one(VIDEO_URL) is None

    async def test_no_search_results(self, resolver):
        with patch(YDL_PATH) as mock_ydl:
            _mock_ydl(mock_ydl, {"entries": []})

            assert await resolver.resolve_one("zzzz") is None


class TestSearch:
    async def test_search_limit(self, resolver, raw_info):
        entries = [dict(raw_info, webpage_url=f"{VIDEO_URL}{i}") for i in range(3)]
        with patch(YDL_PATH) as mock_ydl:
            extract = _mock_ydl(mock_ydl, {"entries": entries})

            tracks = await resolver.search("rick", limit=3)

        assert len(tracks) == 3
        extract.assert_called_once_with("ytsearch3:rick", download=False)

    async def test_search_skips_unusable_entries(self, resolver, raw_info):
        with patch(YDL_PATH) as mock_ydl:
            _mock_ydl(mock_ydl, {"entries": [raw_info, {"title": "no url"}, None]})

            tracks = await resolver.search("rick")

        assert len(tracks) == 1


class TestPlaylist:
    async def test_not_a_playlist(self, resolver):
        with patch(YDL_PATH) as mock_ydl:
            assert await resolver.resolve_playlist(VIDEO_URL) == []
        mock_ydl.assert_not_called()

    async def test_flat_entries(self, resolver):
        entries = [
            {"url": "https://www.youtube.com/watch?v=a", "title": "A", "duration": 60},
            {"url": "https://www.youtube.com/watch?v=b", "title": "B"},
        ]
        with patch(YDL_PATH) as mock_ydl:
            _mock_ydl(mock_ydl, {"entries": entries})

            tracks = await resolver.resolve_playlist("https://www.youtube.com/playlist?list=PL1")

            params = mock_ydl.call_args.kwargs["params"]

        assert [t.title for t in tracks] == ["A", "B"]
        assert params["noplaylist"] is False
        assert params["extract_flat"] == "in_playlist"


class TestOpenAudioSource:
    async def test_direct_url_and_headers(self, resolver, raw_info, sample_track):
        with patch(YDL_PATH) as mock_ydl:
            _mock_ydl(mock_ydl, raw_info)

            source = await resolver.open_audio_source(sample_track)

        assert source.location == "https://rr1.googlevideo.com/audio.webm"
        assert source.http_headers == {"User-Agent": "Mozilla/5.0"}

    async def test_unavailable_raises(self, resolver, sample_track):
        with patch(YDL_PATH) as mock_ydl:
            _mock_ydl(mock_ydl, side_effect=Exception("Private video"))

            with pytest.raises(ResolutionError, match="no results"):
                await resolver.open_audio_source(sample_track)

    async def test_no_stream_url_raises(self, resolver, sample_track):
        with patch(YDL_PATH) as mock_ydl:
            _mock_ydl(mock_ydl, {"title": "x", "formats": [{"acodec": "none", "url": "https://v"}]})

            with pytest.raises(ResolutionError, match="no stream URL"):
                await resolver.open_audio_source(sample_track)


class TestCache:
    async def test_second_lookup_hits_cache(self, resolver, raw_info):
        with patch(YDL_PATH) as mock_ydl:
            extract = _mock_ydl(mock_ydl, raw_info)

            await resolver.resolve_one(VIDEO_URL)
            await resolver.resolve_one(VIDEO_URL)

        assert extract.call_count == 1

    async def test_expired_entry_refetched(self, resolver, raw_info):
        with patch(YDL_PATH) as mock_ydl:
            extract = _mock_ydl(mock_ydl, raw_info)
            await resolver.resolve_one(VIDEO_URL)

            cached = _info_cache[VIDEO_URL]
            _info_cache[VIDEO_URL] = CacheEntry(
                info=cached.info, cached_at=time.time() - CACHE_TTL - 1
            )
            await resolver.resolve_one(VIDEO_URL)

        assert extract.call_count == 2

    async def test_failures_not_cached(self, resolver):
        with patch(YDL_PATH) as mock_ydl:
            _mock_ydl(mock_ydl, side_effect=Exception("boom"))
            await resolver.resolve_one(VIDEO_URL)

        assert VIDEO_URL not in _info_cache

    async def test_empty_result_not_cached(self, resolver, raw_info):
        with patch(YDL_PATH) as mock_ydl:
            extract = _mock_ydl(mock_ydl, side_effect=[None, raw_info])

            assert await resolver.resolve_one(VIDEO_URL) is None
            track = await resolver.resolve_one(VIDEO_URL)

        assert track.title == "Never Gonna Give You Up"
        assert extract.call_count == 2

    async def test_open_retries_after_transient_failure(self, resolver, raw_info, sample_track):
        with patch(YDL_PATH) as mock_ydl:
            _mock_ydl(mock_ydl, side_effect=[Exception("HTTP Error 503"), raw_info])

            with pytest.raises(ResolutionError):
                await resolver.open_audio_source(sample_track)
            source = await resolver.open_audio_source(sample_track)

        assert source.location == "https://rr1.googlevideo.com/audio.webm"
