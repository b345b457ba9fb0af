"""Pydantic models for yt-dlp extraction results and options.

yt-dlp hands back loosely typed dicts; these models trim them to what a
stream track needs and coerce garbage into defaults instead of failing.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discord_jukebox.domain.shared.types import (
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveInt,
)

CACHE_TTL: Final[int] = 3600
CACHE_MAX_SIZE: Final[int] = 500
LOG_URL_TRUNCATE: Final[int] = 60

# Longer than a day means a live stream or a bogus value.
MAX_DURATION_SECONDS: Final[int] = 86_400

UNKNOWN_TITLE: Final[str] = "Unknown Title"
UNKNOWN_AUTHOR: Final[str] = "Unknown"


def _blank_to_none(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return value


class AudioFormatInfo(BaseModel):
    """One entry of the ``formats`` list."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None

    @field_validator("url", "acodec", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str | None:
        return _blank_to_none(v)

    @property
    def carries_audio(self) -> bool:
        return self.url is not None and self.acodec != "none"


class YtDlpTrackInfo(BaseModel):
    """A single video as yt-dlp describes it, full or flat (playlist entry)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    webpage_url: HttpUrlStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr = UNKNOWN_TITLE
    duration: NonNegativeInt | None = None
    thumbnail: HttpUrlStr | None = None
    artist: NonEmptyStr | None = None
    uploader: NonEmptyStr | None = None
    channel: NonEmptyStr | None = None
    album: NonEmptyStr | None = None
    http_headers: dict[str, str] = Field(default_factory=dict)
    formats: list[AudioFormatInfo] = Field(default_factory=list)

    @field_validator(
        "webpage_url", "url", "thumbnail", "artist", "uploader", "channel", "album",
        mode="before",
    )
    @classmethod
    def _coerce_optional_text(cls, v: Any) -> str | None:
        return _blank_to_none(v)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        return _blank_to_none(v) or UNKNOWN_TITLE

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> int | None:
        try:
            seconds = int(v)
        except (TypeError, ValueError):
            return None
        return seconds if seconds >= 0 else None

    @field_validator("http_headers", mode="before")
    @classmethod
    def _coerce_headers(cls, v: Any) -> dict[str, str]:
        if not isinstance(v, dict):
            return {}
        return {str(k): str(val) for k, val in v.items()}

    @field_validator("formats", mode="before")
    @classmethod
    def _drop_malformed_formats(cls, v: Any) -> list[Any]:
        if not isinstance(v, list):
            return []
        return [f for f in v if isinstance(f, dict | AudioFormatInfo)]

    @property
    def author(self) -> str:
        return self.artist or self.uploader or self.channel or UNKNOWN_AUTHOR

    @property
    def locator(self) -> str | None:
        """What a track stores to find this video again: the page, else the raw URL."""
        return self.webpage_url or self.url

    @property
    def playable_duration(self) -> int | None:
        if self.duration is None or self.duration > MAX_DURATION_SECONDS:
            return None
        return self.duration

    @property
    def stream_url(self) -> str | None:
        """Direct media URL; formats are ordered worst to best, so the last audio one wins."""
        if self.url:
            return self.url
        audio = [f for f in self.formats if f.carries_audio]
        return audio[-1].url if audio else None


class CacheEntry(BaseModel):
    """Successful extraction result and when it was fetched."""

    model_config = ConfigDict(frozen=True)

    info: YtDlpTrackInfo
    cached_at: NonNegativeFloat

    def is_fresh(self, now: float, ttl: float = CACHE_TTL) -> bool:
        return now - self.cached_at < ttl


class YtDlpOpts(BaseModel):
    """Typed YoutubeDL params; ``model_dump()`` is passed straight through."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    default_search: NonEmptyStr = "ytsearch"
    forceipv4: bool = True
    retries: PositiveInt = 3
    socket_timeout: PositiveInt = 10
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False
