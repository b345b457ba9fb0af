"""Dependency Injection Container

Manages the application's dependency graph with lazy initialization. Every
component is created on first access and cached for reuse; the session
registry in particular is built once here and never lives in a global.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.object_storage import ObjectStorageCatalog
    from ..application.interfaces.track_resolver import TrackResolver
    from ..application.interfaces.voice_transport import VoiceTransport
    from ..application.services.music_controller import MusicController
    from ..application.services.sequencer import PlaybackSequencer
    from ..application.services.session_registry import SessionRegistry
    from ..infrastructure.audio.sound_effects import SoundEffectCatalog
    from ..infrastructure.audio.storage_resolver import ObjectStorageResolver
    from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    ``storage_catalog`` is optional: without one, object-storage commands
    report that the source is unsupported.
    """

    settings: Settings
    storage_catalog: ObjectStorageCatalog | None = None
    _bot: Bot | None = None

    # Infrastructure adapters
    _voice_transport: VoiceTransport | None = None
    _stream_resolver: YtDlpResolver | None = None
    _storage_resolver: ObjectStorageResolver | None = None
    _sound_effects: SoundEffectCatalog | None = None
    _track_resolver: TrackResolver | None = None

    # Application services
    _session_registry: SessionRegistry | None = None
    _sequencer: PlaybackSequencer | None = None
    _music_controller: MusicController | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Infrastructure Adapters ===

    @property
    def voice_transport(self) -> VoiceTransport:
        if self._voice_transport is None:
            from ..infrastructure.discord.adapters.voice_transport import DiscordVoiceTransport

            self._voice_transport = DiscordVoiceTransport(self.bot, self.settings.audio)
        return self._voice_transport

    @property
    def stream_resolver(self) -> YtDlpResolver:
        if self._stream_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._stream_resolver = YtDlpResolver(self.settings.audio)
        return self._stream_resolver

    @property
    def storage_resolver(self) -> ObjectStorageResolver | None:
        """Only available when a storage catalogue was supplied."""
        if self._storage_resolver is None and self.storage_catalog is not None:
            from ..infrastructure.audio.storage_resolver import ObjectStorageResolver

            self._storage_resolver = ObjectStorageResolver(
                self.storage_catalog, self.settings.storage
            )
        return self._storage_resolver

    @property
    def sound_effects(self) -> SoundEffectCatalog:
        if self._sound_effects is None:
            from ..infrastructure.audio.sound_effects import SoundEffectCatalog

            self._sound_effects = SoundEffectCatalog(self.settings.sound_effects)
        return self._sound_effects

    @property
    def track_resolver(self) -> TrackResolver:
        """Composite resolver: yt-dlp first, then storage and sound effects by source kind."""
        if self._track_resolver is None:
            from ..infrastructure.audio.composite_resolver import CompositeTrackResolver

            others: list[TrackResolver] = [self.sound_effects]
            if self.storage_resolver is not None:
                others.append(self.storage_resolver)
            self._track_resolver = CompositeTrackResolver(self.stream_resolver, *others)
        return self._track_resolver

    # === Application Services ===

    @property
    def session_registry(self) -> SessionRegistry:
        if self._session_registry is None:
            from ..application.services.session_registry import SessionRegistry

            audio = self.settings.audio
            self._session_registry = SessionRegistry(
                self.voice_transport,
                default_volume=audio.default_volume,
                default_sfx_volume=audio.default_sfx_volume,
                history_limit=audio.history_limit,
            )
        return self._session_registry

    @property
    def sequencer(self) -> PlaybackSequencer:
        if self._sequencer is None:
            from ..application.services.sequencer import PlaybackSequencer

            self._sequencer = PlaybackSequencer(
                self.track_resolver,
                idle_disconnect_seconds=self.settings.audio.idle_disconnect_seconds,
                on_idle=self.session_registry.remove,
            )
        return self._sequencer

    @property
    def music_controller(self) -> MusicController:
        if self._music_controller is None:
            from ..application.services.music_controller import MusicController

            self._music_controller = MusicController(
                registry=self.session_registry,
                sequencer=self.sequencer,
                resolver=self.track_resolver,
                sound_effects=self.sound_effects,
                storage=self.storage_resolver,
                search_limit=self.settings.audio.search_limit,
            )
        return self._music_controller

    # === Lifecycle ===

    async def shutdown(self) -> None:
        """Disconnect every voice session."""
        if self._session_registry is not None:
            await self._session_registry.close_all()


def create_container(
    settings: Settings, storage_catalog: ObjectStorageCatalog | None = None
) -> Container:
    """Create a new dependency injection container."""
    return Container(settings, storage_catalog=storage_catalog)
