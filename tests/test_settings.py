"""
Unit Tests for Application Settings Configuration

Tests for:
- Default values
- Loading nested settings from environment variables
- Field aliases
- Range validation and custom validators
- Settings caching and clearing
"""

import pytest
from pydantic import SecretStr, ValidationError

from discord_jukebox.config.settings import (
    AudioSettings,
    DiscordSettings,
    Settings,
    SoundEffectSettings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run without a developer's .env and with a clean settings cache."""
    monkeypatch.chdir(tmp_path)
    for name in ("DISCORD__TOKEN", "DISCORD_TOKEN", "LOG_LEVEL", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Nested models
# =============================================================================


class TestDiscordSettings:
    def test_defaults(self):
        discord = DiscordSettings()

        assert discord.token.get_secret_value() == ""
        assert discord.command_prefix == "!"
        assert discord.guild_ids == ()
        assert discord.sync_on_startup is True

    def test_token_aliases(self):
        assert DiscordSettings(bot_token="abc").token == SecretStr("abc")
        assert DiscordSettings(discord_token="xyz").token.get_secret_value() == "xyz"

    def test_guild_ids_list_to_tuple(self):
        assert DiscordSettings(guild_ids=[123, 456]).guild_ids == (123, 456)

    @pytest.mark.parametrize("bad", [0, -5, 2**64])
    def test_invalid_snowflake(self, bad):
        with pytest.raises(ValidationError):
            DiscordSettings(guild_ids=[bad])

    def test_prefix_length(self):
        with pytest.raises(ValidationError):
            DiscordSettings(command_prefix="toolong")


class TestAudioSettings:
    def test_defaults(self):
        audio = AudioSettings()

        assert audio.default_volume == 100
        assert audio.default_sfx_volume == 100
        assert audio.idle_disconnect_seconds == 30.0
        assert audio.history_limit == 0
        assert audio.search_limit == 5
        assert audio.ffmpeg_options["options"] == "-vn"

    @pytest.mark.parametrize("field", ["default_volume", "default_sfx_volume"])
    @pytest.mark.parametrize("value", [-1, 201])
    def test_volume_range(self, field, value):
        with pytest.raises(ValidationError):
            AudioSettings(**{field: value})

    def test_idle_timeout_alias(self):
        assert AudioSettings(idle_timeout=5).idle_disconnect_seconds == 5.0

    def test_frozen(self):
        audio = AudioSettings()
        with pytest.raises(ValidationError):
            audio.default_volume = 50  # type: ignore[misc]


class TestStorageAndEffects:
    def test_storage_disabled_without_bucket(self):
        assert StorageSettings().enabled is False
        assert StorageSettings(bucket_name="songs").enabled is True

    def test_storage_defaults(self):
        storage = StorageSettings()

        assert storage.prefix == "music/"
        assert storage.presign_expiry_seconds == 3600
        assert ".flac" in storage.audio_extensions

    def test_sound_effect_base_url_must_be_http(self):
        with pytest.raises(ValidationError):
            SoundEffectSettings(base_url="ftp://example.com/")


# =============================================================================
# Environment loading
# =============================================================================


class TestSettingsFromEnv:
    def test_defaults(self):
        settings = Settings()

        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert settings.storage.enabled is False

    def test_nested_env(self, monkeypatch):
        monkeypatch.setenv("DISCORD__TOKEN", "secret-token")
        monkeypatch.setenv("AUDIO__IDLE_DISCONNECT_SECONDS", "12.5")
        monkeypatch.setenv("AUDIO__DEFAULT_VOLUME", "80")
        monkeypatch.setenv("STORAGE__BUCKET", "jukebox-audio")
        monkeypatch.setenv("SOUND_EFFECTS__FALLBACK", "applause")

        settings = Settings()

        assert settings.discord.token.get_secret_value() == "secret-token"
        assert settings.audio.idle_disconnect_seconds == 12.5
        assert settings.audio.default_volume == 80
        assert settings.storage.bucket == "jukebox-audio"
        assert settings.sound_effects.fallback == "applause"

    def test_log_level_normalised(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert Settings().log_level == "DEBUG"

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "CHATTY")

        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings()

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "staging")

        with pytest.raises(ValidationError):
            Settings()

    def test_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("AUDIO__HISTORY_LIMIT=25\n")

        assert Settings().audio.history_limit == 25


class TestSettingsCache:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_clear(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        clear_settings_cache()

        second = get_settings()

        assert second is not first
        assert second.log_level == "WARNING"
