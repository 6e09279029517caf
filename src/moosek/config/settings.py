"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.music.value_objects import SearchSource
from ..domain.shared.constants import CommandConstants, GuildDefaultsConstants, QueueConstants, VolumeConstants
from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import (
    BusyTimeoutMs,
    CommandPrefixStr,
    ConnectionTimeoutS,
    CooldownSeconds,
    MaxQueueSize,
    PageSize,
    VolumeInt,
)


class DatabaseSettings(BaseModel):
    """Database configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/moosek.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: BusyTimeoutMs = Field(
        default=5000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: ConnectionTimeoutS = Field(
        default=10,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith("sqlite://"):
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: CommandPrefixStr = Field(
        default="!",
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    owner_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("owner_ids", "owners")
    )
    guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("guild_ids", "guilds")
    )
    test_guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("test_guild_ids", "test_guilds")
    )
    sync_on_startup: bool = False
    support_url: str | None = None
    invite_permissions: int = Field(default=CommandConstants.INVITE_PERMISSIONS, ge=0)

    @field_validator("owner_ids", "guild_ids", "test_guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int] | int | str) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples.

        Also accepts a single id or a comma-separated string, which is how
        these usually arrive from a plain environment variable.
        """
        if isinstance(v, str):
            v = tuple(int(part) for part in v.split(",") if part.strip())
        elif isinstance(v, int):
            v = (v,)
        elif isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            if not isinstance(snowflake, int) or isinstance(snowflake, bool) or not 0 < snowflake < 2**64:
                raise ValueError(f"Invalid Discord snowflake: {snowflake!r}")
        return v


class AudioSettings(BaseModel):
    """Audio playback configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    default_volume: VolumeInt = VolumeConstants.DEFAULT_VOLUME
    max_volume: VolumeInt = VolumeConstants.MAX_VOLUME
    default_search_source: str = Field(
        default=SearchSource.YOUTUBE_MUSIC.value,
        validation_alias=AliasChoices("default_search_source", "search_source"),
    )
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5",
            "options": "-vn",
        }
    )
    ytdlp_format: str = "bestaudio/best"
    empty_channel_grace_seconds: float = Field(default=CommandConstants.EMPTY_CHANNEL_GRACE_SECONDS, ge=0.0)

    @field_validator("default_search_source")
    @classmethod
    def validate_search_source(cls, v: str) -> str:
        return SearchSource(v.lower()).value

    @property
    def search_source(self) -> SearchSource:
        return SearchSource(self.default_search_source)


class CommandSettings(BaseModel):
    """Command gating and presentation."""

    model_config = SettingsConfigDict(frozen=True, strict=True)

    default_cooldown_seconds: CooldownSeconds = CommandConstants.DEFAULT_COOLDOWN_SECONDS
    collector_timeout_seconds: float = Field(default=CommandConstants.COLLECTOR_TIMEOUT_SECONDS, gt=0.0)
    queue_page_size: PageSize = QueueConstants.PAGE_SIZE
    smart_shuffle_window: int = Field(default=QueueConstants.SMART_SHUFFLE_WINDOW, ge=1)
    skip_max_amount: int = Field(default=QueueConstants.SKIP_MAX_AMOUNT, ge=1, le=100)


class GuildDefaults(BaseModel):
    """Settings a guild starts with before an admin changes anything."""

    model_config = SettingsConfigDict(frozen=True, strict=True)

    auto_play: bool = GuildDefaultsConstants.AUTO_PLAY
    max_queue_size: MaxQueueSize = GuildDefaultsConstants.MAX_QUEUE_SIZE


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__OWNER_IDS, etc. (nested with ``__``)
    - DATABASE__URL, AUDIO__DEFAULT_VOLUME, COMMANDS__QUEUE_PAGE_SIZE, ...
    - GUILD_DEFAULTS__AUTO_PLAY, GUILD_DEFAULTS__MAX_QUEUE_SIZE
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        strict=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    commands: CommandSettings = Field(default_factory=CommandSettings)
    guild_defaults: GuildDefaults = Field(default_factory=GuildDefaults)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
