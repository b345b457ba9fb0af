"""Sound-effect catalogue: short clips played over the queue."""

from __future__ import annotations

import logging
from typing import ClassVar

from discord_jukebox.application.interfaces.track_resolver import (
    SoundEffectLibrary,
    StreamSource,
    TrackResolver,
)
from discord_jukebox.config.settings import SoundEffectSettings
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.music.value_objects import SourceKind
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

SOUND_EFFECT_AUTHOR = "Sound Effect"


def effect_display_name(effect_id: str) -> str:
    """'party_horn' -> 'Party Horn'."""
    return " ".join(word.capitalize() for word in effect_id.split("_"))


class SoundEffectCatalog(SoundEffectLibrary, TrackResolver):
    """Effects are served from ``{base_url}{effect_id}.mp3``."""

    source_kinds: ClassVar[frozenset[SourceKind]] = frozenset({SourceKind.SOUND_EFFECT})

    def __init__(self, settings: SoundEffectSettings | None = None) -> None:
        self._settings = settings or SoundEffectSettings()
        base = self._settings.base_url
        self._base_url = base if base.endswith("/") else f"{base}/"
        self._tracks = {effect_id: self._build(effect_id) for effect_id in self._settings.effects}

    def _build(self, effect_id: str) -> Track:
        return Track(
            title=f"Sound Effect: {effect_display_name(effect_id)}",
            source_locator=f"{self._base_url}{effect_id}.mp3",
            duration_seconds=self._settings.duration_seconds,
            author=SOUND_EFFECT_AUTHOR,
            source_kind=SourceKind.SOUND_EFFECT,
        )

    @property
    def effect_ids(self) -> list[str]:
        return list(self._tracks)

    def effect(self, effect_id: str) -> Track:
        key = effect_id.strip().lower()
        track = self._tracks.get(key)
        if track is not None:
            return track

        fallback = self._settings.fallback
        logger.warning(LogTemplates.SFX_UNKNOWN_EFFECT, effect_id, fallback)
        return self._tracks.get(fallback) or self._build(fallback)

    def list_effects(self) -> list[Track]:
        return list(self._tracks.values())

    # ── TrackResolver ─────────────────────────────────────────────────

    async def resolve_one(self, query: str) -> Track | None:
        return self.effect(query)

    async def search(self, query: str, limit: int = 5) -> list[Track]:
        needle = query.strip().lower()
        return [
            track
            for effect_id, track in self._tracks.items()
            if needle in effect_id or needle in track.title.lower()
        ][:limit]

    async def resolve_playlist(self, url: str) -> list[Track]:
        return []

    async def open_audio_source(self, track: Track) -> StreamSource:
        if not track.is_sound_effect:
            raise ResolutionError(
                track.source_locator, ErrorMessages.UNSUPPORTED_SOURCE.format(kind=track.source_kind.value)
            )
        return StreamSource(location=track.source_locator)
