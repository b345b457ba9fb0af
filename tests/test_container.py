"""
Unit Tests for Dependency Injection Container

Tests for:
- Bot instance management (set_bot, bot property, error when not set)
- Lazy initialization and caching of every component
- Optional object-storage wiring
- Settings flowing into the registry, sequencer and controller
- Shutdown closing every session
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import FakeVoiceTransport, GUILD, JOIN
from discord_jukebox.application.services.music_controller import MusicController
from discord_jukebox.application.services.session_registry import SessionRegistry
from discord_jukebox.config.container import Container, create_container
from discord_jukebox.config.settings import AudioSettings, Settings
from discord_jukebox.domain.music.value_objects import SourceKind
from discord_jukebox.infrastructure.audio.storage_resolver import ObjectStorageResolver
from discord_jukebox.infrastructure.discord.adapters.voice_transport import DiscordVoiceTransport


@pytest.fixture
def settings():
    return Settings(
        audio=AudioSettings(default_volume=70, default_sfx_volume=40, history_limit=10)
    )


@pytest.fixture
def container(settings):
    container = create_container(settings)
    container.set_bot(MagicMock())
    return container


class TestBot:
    def test_unset_bot_raises(self, settings):
        with pytest.raises(RuntimeError, match="Bot not initialized"):
            _ = Container(settings).bot

    def test_set_bot(self, settings):
        container = Container(settings)
        bot = MagicMock()

        container.set_bot(bot)

        assert container.bot is bot


class TestLazyComponents:
    @pytest.mark.parametrize(
        "name",
        [
            "voice_transport",
            "stream_resolver",
            "sound_effects",
            "track_resolver",
            "session_registry",
            "sequencer",
            "music_controller",
        ],
    )
    def test_cached(self, container, name):
        assert getattr(container, name) is getattr(container, name)

    def test_nothing_built_up_front(self, container):
        assert container._session_registry is None
        assert container._music_controller is None

    def test_voice_transport_type(self, container):
        assert isinstance(container.voice_transport, DiscordVoiceTransport)

    def test_controller_wired_to_registry(self, container):
        controller = container.music_controller

        assert isinstance(controller, MusicController)
        assert isinstance(container.session_registry, SessionRegistry)


class TestStorage:
    def test_no_catalog_no_storage(self, container):
        assert container.storage_resolver is None
        assert SourceKind.OBJECT_STORAGE not in container.track_resolver.source_kinds

    def test_catalog_enables_storage(self, settings):
        container = create_container(settings, storage_catalog=MagicMock())
        container.set_bot(MagicMock())

        assert isinstance(container.storage_resolver, ObjectStorageResolver)
        assert container.track_resolver.source_kinds == frozenset(SourceKind)


class TestSettingsWiring:
    async def test_session_defaults_from_settings(self, container):
        container._voice_transport = FakeVoiceTransport()

        session = await container.session_registry.get_or_create(GUILD, JOIN)

        assert session.playback.volume == 70
        assert session.playback.sfx_volume == 40

    async def test_shutdown_closes_sessions(self, container):
        transport = FakeVoiceTransport()
        container._voice_transport = transport
        await container.session_registry.get_or_create(GUILD, JOIN)

        await container.shutdown()

        assert container.session_registry.get(GUILD) is None
        assert transport.connections[GUILD].disconnect_calls == 1

    async def test_shutdown_without_registry(self, settings):
        container = Container(settings)
        container._session_registry = None

        await container.shutdown()

    async def test_shutdown_uses_close_all(self, container):
        registry = MagicMock()
        registry.close_all = AsyncMock()
        container._session_registry = registry

        await container.shutdown()

        registry.close_all.assert_awaited_once()
