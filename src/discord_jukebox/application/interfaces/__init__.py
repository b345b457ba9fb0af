"""
Application Interfaces (Ports)

Abstract contracts implemented by the infrastructure adapters.
"""

from discord_jukebox.application.interfaces.object_storage import ObjectStorageCatalog
from discord_jukebox.application.interfaces.track_resolver import (
    SoundEffectLibrary,
    StreamSource,
    TrackResolver,
)
from discord_jukebox.application.interfaces.voice_transport import (
    AudioPlayer,
    JoinRequest,
    VoiceConnection,
    VoiceTransport,
)

__all__ = [
    "AudioPlayer",
    "JoinRequest",
    "ObjectStorageCatalog",
    "SoundEffectLibrary",
    "StreamSource",
    "TrackResolver",
    "VoiceConnection",
    "VoiceTransport",
]
