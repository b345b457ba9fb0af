"""Port interface for the object-storage bucket that holds uploaded audio."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StoredObject:
    key: str
    size: int = 0
    last_modified: datetime | None = None

    @property
    def filename(self) -> str:
        return self.key.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class AudioTags:
    """Tags read from an audio file's embedded metadata; any may be missing."""

    title: str | None = None
    artist: str | None = None
    album: str | None = None
    duration_seconds: float | None = None


class ObjectStorageCatalog(ABC):
    """Listing, tag reading and URL signing for one bucket."""

    @abstractmethod
    async def list_objects(self, prefix: str) -> list[StoredObject]:
        """Every object under ``prefix``, following pagination."""
        ...

    @abstractmethod
    async def read_tags(self, key: str) -> AudioTags:
        """Parse embedded tags; raises on any I/O or parse failure."""
        ...

    @abstractmethod
    async def presign(self, key: str, expires_in: int) -> str:
        """A time-limited URL from which ``key`` can be fetched."""
        ...
