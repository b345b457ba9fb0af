"""Tests for the sound-effect catalogue and the composite resolver."""

import pytest

from conftest import FakeResolver, make_track
from discord_jukebox.config.settings import SoundEffectSettings
from discord_jukebox.domain.music.value_objects import SourceKind
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.infrastructure.audio.composite_resolver import CompositeTrackResolver
from discord_jukebox.infrastructure.audio.sound_effects import (
    SoundEffectCatalog,
    effect_display_name,
)


@pytest.fixture
def catalog():
    return SoundEffectCatalog(SoundEffectSettings(base_url="https://cdn.example.com/sfx"))


class TestSoundEffectCatalog:
    """Tests for effect lookup and fallbacks."""

    def test_display_name(self):
        assert effect_display_name("drum_roll") == "Drum Roll"

    def test_default_effects(self, catalog):
        assert catalog.effect_ids == [
            "party_horn", "applause", "bell", "alert",
            "drum_roll", "fanfare", "notification", "celebration",
        ]

    def test_effect_track(self, catalog):
        track = catalog.effect("party_horn")

        assert track.title == "Sound Effect: Party Horn"
        assert track.source_locator == "https://cdn.example.com/sfx/party_horn.mp3"
        assert track.author == "Sound Effect"
        assert track.duration_seconds == 5
        assert track.is_sound_effect

    def test_lookup_is_case_insensitive(self, catalog):
        assert catalog.effect(" Applause ").title == "Sound Effect: Applause"

    def test_unknown_effect_falls_back_to_bell(self, catalog, caplog):
        with caplog.at_level("WARNING"):
            track = catalog.effect("vuvuzela")

        assert track.title == "Sound Effect: Bell"
        assert "vuvuzela" in caplog.text

    def test_fallback_outside_catalogue(self):
        catalog = SoundEffectCatalog(SoundEffectSettings(effects=["applause"], fallback="gong"))

        assert catalog.effect("nope").source_locator.endswith("/gong.mp3")

    def test_empty_effect_list_rejected(self):
        with pytest.raises(ValueError):
            SoundEffectSettings(effects=[])

    async def test_search(self, catalog):
        results = await catalog.search("party")

        assert [t.title for t in results] == ["Sound Effect: Party Horn"]

    async def test_open_audio_source(self, catalog):
        source = await catalog.open_audio_source(catalog.effect("bell"))

        assert source.location == "https://cdn.example.com/sfx/bell.mp3"

    async def test_open_rejects_other_kinds(self, catalog, sample_track):
        with pytest.raises(ResolutionError):
            await catalog.open_audio_source(sample_track)


class _StubResolver(FakeResolver):
    def __init__(self, kinds, label):
        super().__init__()
        self.source_kinds = frozenset(kinds)
        self.label = label

    async def open_audio_source(self, track):
        source = await super().open_audio_source(track)
        return type(source)(location=f"{self.label}:{source.location}")


class TestCompositeResolver:
    @pytest.fixture
    def composite(self, catalog):
        stream = _StubResolver({SourceKind.STREAM}, "stream")
        storage = _StubResolver({SourceKind.OBJECT_STORAGE}, "storage")
        return CompositeTrackResolver(stream, catalog, storage)

    def test_source_kinds_union(self, composite):
        assert composite.source_kinds == frozenset(SourceKind)

    async def test_queries_go_to_primary(self, composite):
        track = await composite.resolve_one("Song A")

        assert track.source_kind is SourceKind.STREAM

    @pytest.mark.parametrize(
        ("kind", "prefix"),
        [(SourceKind.STREAM, "stream:"), (SourceKind.OBJECT_STORAGE, "storage:")],
    )
    async def test_dispatch_by_kind(self, composite, kind, prefix):
        source = await composite.open_audio_source(make_track("Song", kind=kind))

        assert source.location.startswith(prefix)

    async def test_sound_effects_dispatched_to_catalog(self, composite, catalog):
        source = await composite.open_audio_source(catalog.effect("alert"))

        assert source.location == "https://cdn.example.com/sfx/alert.mp3"

    async def test_unhandled_kind(self, catalog):
        composite = CompositeTrackResolver(_StubResolver({SourceKind.STREAM}, "stream"))

        with pytest.raises(ResolutionError, match="object_storage"):
            await composite.open_audio_source(make_track("Song", kind=SourceKind.OBJECT_STORAGE))
