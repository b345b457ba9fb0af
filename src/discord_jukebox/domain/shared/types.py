"""Reusable Pydantic Annotated types for domain-wide validation.

Models annotate their fields with these so the constraint lives in one place::

    from discord_jukebox.domain.shared.types import VolumePercent

    class Mixer(BaseModel):
        volume: VolumePercent = 100
"""

from __future__ import annotations

from typing import Annotated, Final

from pydantic import Field

VOLUME_MIN: Final[int] = 0
VOLUME_MAX: Final[int] = 200
VOLUME_UNITY: Final[int] = 100

# ── Numeric constraints ─────────────────────────────────────────────

DiscordSnowflake = Annotated[int, Field(gt=0, lt=2**64)]
"""Positive integer that fits a Discord snowflake (1 … 2^64-1)."""

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

NonNegativeFloat = Annotated[float, Field(ge=0.0)]
"""Float >= 0.0."""

VolumePercent = Annotated[int, Field(ge=VOLUME_MIN, le=VOLUME_MAX)]
"""Percent of nominal gain: 100 is unity, values above 100 amplify."""

DurationSeconds = Annotated[int, Field(ge=0, le=86_400)]
"""Track duration in seconds: 0 … 86 400 (24 hours)."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

TrackTitleStr = Annotated[str, Field(min_length=1, max_length=500)]
"""Track title: 1-500 characters."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""

GuildKey = Annotated[str, Field(min_length=1)]
"""Opaque guild identifier used to key sessions."""
