"""Jukebox configuration.

One frozen pydantic model per concern (Discord, audio, object storage, sound
effects) nested under ``Settings``, which pydantic-settings fills from the
environment and an optional ``.env`` file.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import lru_cache
from typing import Final, Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import VOLUME_MAX, VOLUME_MIN, VOLUME_UNITY
from ..domain.shared.validators import validate_discord_snowflake

DEFAULT_AUDIO_EXTENSIONS: tuple[str, ...] = (
    ".mp3", ".wav", ".ogg", ".m4a", ".flac", ".opus",
    ".aac", ".mp4", ".webm", ".mkv", ".3gp", ".amr",
)

DEFAULT_SOUND_EFFECTS: tuple[str, ...] = (
    "party_horn", "applause", "bell", "alert",
    "drum_roll", "fanfare", "notification", "celebration",
)

LOG_LEVELS: Final[frozenset[str]] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def _as_tuple(value: Iterable[object] | object) -> tuple:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(value)
    return (value,)


class DiscordSettings(BaseModel):
    """Bot credentials and slash-command registration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("guild_ids", "guilds")
    )
    sync_on_startup: bool = True

    @field_validator("guild_ids", mode="before")
    @classmethod
    def _check_guild_ids(cls, v: object) -> tuple[int, ...]:
        return tuple(validate_discord_snowflake(int(g)) for g in _as_tuple(v))


class AudioSettings(BaseModel):
    """Playback defaults, session lifetime and the yt-dlp / FFmpeg knobs."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    default_volume: int = Field(default=VOLUME_UNITY, ge=VOLUME_MIN, le=VOLUME_MAX)
    default_sfx_volume: int = Field(default=VOLUME_UNITY, ge=VOLUME_MIN, le=VOLUME_MAX)
    idle_disconnect_seconds: float = Field(
        default=30.0,
        ge=0.0,
        validation_alias=AliasChoices("idle_disconnect_seconds", "idle_timeout"),
    )
    history_limit: int = Field(default=0, ge=0)  # 0 keeps every entry
    connect_timeout_seconds: float = Field(default=10.0, gt=0.0)
    search_limit: int = Field(default=5, ge=1, le=25)
    ytdlp_format: str = "bestaudio/best"
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5",
            "options": "-vn",
        }
    )


class StorageSettings(BaseModel):
    """Object-storage bucket holding uploaded audio files."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    bucket: str = Field(
        default="", validation_alias=AliasChoices("bucket", "bucket_name", "s3_bucket_name")
    )
    prefix: str = "music/"
    region: str = "us-east-1"
    presign_expiry_seconds: int = Field(default=3600, ge=1, le=604800)
    metadata_cache_seconds: int = Field(default=3600, ge=0)
    audio_extensions: tuple[str, ...] = DEFAULT_AUDIO_EXTENSIONS

    @field_validator("audio_extensions", mode="before")
    @classmethod
    def _normalise_extensions(cls, v: object) -> tuple[str, ...]:
        exts = (str(e).strip().lower() for e in _as_tuple(v))
        return tuple(e if e.startswith(".") else f".{e}" for e in exts)

    @property
    def enabled(self) -> bool:
        return bool(self.bucket)


class SoundEffectSettings(BaseModel):
    """Sound-effect catalogue configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    base_url: str = Field(
        default="https://example.com/sounds/",
        pattern=r"^https?://",
    )
    effects: tuple[str, ...] = DEFAULT_SOUND_EFFECTS
    fallback: str = "bell"
    duration_seconds: int = Field(default=5, ge=0)

    @field_validator("effects", mode="before")
    @classmethod
    def _require_effects(cls, v: object) -> tuple[str, ...]:
        effects = tuple(str(e) for e in _as_tuple(v))
        if not effects:
            raise ValueError("At least one sound effect is required")
        return effects


class Settings(BaseSettings):
    """Root settings, read from the environment (and ``.env``).

    Variables:
    - ENVIRONMENT, DEBUG, LOG_LEVEL
    - DISCORD__TOKEN, DISCORD__GUILD_IDS, etc. (nested with ``__``)
    - AUDIO__IDLE_DISCONNECT_SECONDS, AUDIO__DEFAULT_VOLUME, ...
    - STORAGE__BUCKET, STORAGE__PREFIX, ...
    - SOUND_EFFECTS__BASE_URL, ...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    sound_effects: SoundEffectSettings = Field(default_factory=SoundEffectSettings)

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=sorted(LOG_LEVELS))
            )
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, built once; environment beats ``.env`` beats defaults."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next ``get_settings()`` re-reads the environment."""
    get_settings.cache_clear()
