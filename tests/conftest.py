import asyncio

import pytest
import pytest_asyncio

from discord_jukebox.application.interfaces.track_resolver import StreamSource, TrackResolver
from discord_jukebox.application.interfaces.voice_transport import (
    AudioPlayer,
    JoinRequest,
    VoiceConnection,
    VoiceTransport,
)
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.music.value_objects import SourceKind, TrackEndReason
from discord_jukebox.domain.shared.exceptions import JoinFailedError, ResolutionError

GUILD = "4242"
OTHER_GUILD = "5151"
JOIN = JoinRequest(channel_id="1001", channel_name="General")


async def settle(rounds: int = 50) -> None:
    """Let pending loader and callback tasks run to completion."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def make_track(
    title: str = "Test Track",
    *,
    duration: int | None = 180,
    kind: SourceKind = SourceKind.STREAM,
    author: str = "Test Artist",
) -> Track:
    slug = title.lower().replace(" ", "-")
    return Track(
        title=title,
        source_locator=f"https://example.com/watch/{slug}",
        duration_seconds=duration,
        author=author,
        source_kind=kind,
    )


# ============================================================================
# Voice fakes
# ============================================================================


class FakePlayer(AudioPlayer):
    """Records sink calls; ``stop`` delivers STOPPED on the loop like discord.py does."""

    def __init__(self) -> None:
        self.played: list[tuple[StreamSource, int, str]] = []
        self.volumes: list[int] = []
        self.stop_calls = 0
        self.paused = False
        self.on_end = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def titles(self) -> list[str]:
        return [title for _, _, title in self.played]

    def play(self, source, *, volume, title, on_end) -> None:
        self.played.append((source, volume, title))
        self.paused = False
        self.on_end = on_end

    def stop(self) -> None:
        self.stop_calls += 1
        on_end, self.on_end = self.on_end, None
        if on_end is not None:
            task = asyncio.get_running_loop().create_task(on_end(TrackEndReason.STOPPED))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    def pause(self) -> bool:
        if self.on_end is None or self.paused:
            return False
        self.paused = True
        return True

    def resume(self) -> bool:
        if not self.paused:
            return False
        self.paused = False
        return True

    def set_volume(self, volume: int) -> None:
        self.volumes.append(volume)

    async def finish(self, reason: TrackEndReason = TrackEndReason.FINISHED) -> None:
        """Simulate the current source ending on its own."""
        on_end, self.on_end = self.on_end, None
        assert on_end is not None, "nothing is playing"
        await on_end(reason)
        await settle()


class FakeConnection(VoiceConnection):
    def __init__(self, channel_id: str) -> None:
        self.channel_id = channel_id
        self.player = FakePlayer()
        self.connected = True
        self.disconnect_calls = 0

    def attach_player(self) -> AudioPlayer:
        return self.player

    def is_connected(self) -> bool:
        return self.connected

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False


class FakeVoiceTransport(VoiceTransport):
    def __init__(self) -> None:
        self.connect_calls: list[tuple[str, JoinRequest]] = []
        self.connections: dict[str, FakeConnection] = {}
        self.fail_with: str | None = None

    async def connect(self, guild_id: str, request: JoinRequest) -> VoiceConnection:
        self.connect_calls.append((guild_id, request))
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise JoinFailedError(guild_id, request.channel_id, self.fail_with)
        connection = FakeConnection(request.channel_id)
        self.connections[guild_id] = connection
        return connection

    def player(self, guild_id: str = GUILD) -> FakePlayer:
        return self.connections[guild_id].player


# ============================================================================
# Resolver fake
# ============================================================================


class FakeResolver(TrackResolver):
    """Resolves any query to a track titled after it.

    ``failing`` locators raise on open; ``gates`` hold an open until set.
    """

    source_kinds = frozenset(SourceKind)

    def __init__(self) -> None:
        self.missing: set[str] = set()
        self.failing: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.playlists: dict[str, list[Track]] = {}
        self.opened: list[str] = []

    def gate(self, track: Track) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[track.source_locator] = event
        return event

    async def resolve_one(self, query: str) -> Track | None:
        if query in self.missing:
            return None
        return make_track(query)

    async def search(self, query: str, limit: int = 5) -> list[Track]:
        return [make_track(f"{query} {i}") for i in range(1, limit + 1)]

    async def resolve_playlist(self, url: str) -> list[Track]:
        return list(self.playlists.get(url, []))

    async def open_audio_source(self, track: Track) -> StreamSource:
        self.opened.append(track.title)
        gate = self.gates.get(track.source_locator)
        if gate is not None:
            await gate.wait()
        if track.source_locator in self.failing:
            raise ResolutionError(track.source_locator, "unavailable")
        return StreamSource(location=f"{track.source_locator}/audio")


# ============================================================================
# Service fixtures
# ============================================================================


@pytest.fixture
def transport():
    return FakeVoiceTransport()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def sound_effects():
    from discord_jukebox.config.settings import SoundEffectSettings
    from discord_jukebox.infrastructure.audio.sound_effects import SoundEffectCatalog

    return SoundEffectCatalog(SoundEffectSettings())


@pytest_asyncio.fixture
async def registry(transport):
    from discord_jukebox.application.services.session_registry import SessionRegistry

    registry = SessionRegistry(transport)
    yield registry
    await registry.close_all()


@pytest.fixture
def idle_seconds():
    """Idle-disconnect delay; override in a module or class to shorten it."""
    return 60.0


@pytest.fixture
def sequencer(resolver, registry, idle_seconds):
    from discord_jukebox.application.services.sequencer import PlaybackSequencer

    return PlaybackSequencer(
        resolver, idle_disconnect_seconds=idle_seconds, on_idle=registry.remove
    )


@pytest.fixture
def controller(registry, sequencer, resolver, sound_effects):
    from discord_jukebox.application.services.music_controller import MusicController

    return MusicController(
        registry=registry,
        sequencer=sequencer,
        resolver=resolver,
        sound_effects=sound_effects,
    )


@pytest_asyncio.fixture
async def session(registry):
    """A connected session for ``GUILD``."""
    return await registry.get_or_create(GUILD, JOIN)


@pytest.fixture
def sample_track():
    return make_track("Test Track")
