"""Guild-scoped persisted records: per-guild settings and session snapshots."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from moosek.domain.music.entities import GuildSession, QueueEntry
from moosek.domain.music.value_objects import LoopMode
from moosek.domain.shared.constants import GuildDefaultsConstants
from moosek.domain.shared.datetime_utils import utcnow
from moosek.domain.shared.types import DiscordSnowflake, MaxQueueSize, UtcDatetimeField, VolumeInt


class GuildSettings(BaseModel):
    """Admin-configured behaviour for one guild.

    A guild with no stored record behaves as ``GuildSettings.defaults(guild_id)``.
    """

    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    music_channel_id: DiscordSnowflake | None = None
    dj_role_id: DiscordSnowflake | None = None
    auto_play: bool = GuildDefaultsConstants.AUTO_PLAY
    max_queue_size: MaxQueueSize = GuildDefaultsConstants.MAX_QUEUE_SIZE
    created_at: UtcDatetimeField = Field(default_factory=utcnow)
    updated_at: UtcDatetimeField = Field(default_factory=utcnow)

    @classmethod
    def defaults(cls, guild_id: int, *, auto_play: bool | None = None, max_queue_size: int | None = None) -> GuildSettings:
        return cls(
            guild_id=guild_id,
            auto_play=GuildDefaultsConstants.AUTO_PLAY if auto_play is None else auto_play,
            max_queue_size=max_queue_size or GuildDefaultsConstants.MAX_QUEUE_SIZE,
        )

    @property
    def has_dj_role(self) -> bool:
        return self.dj_role_id is not None


class GuildSettingsUpdate(BaseModel):
    """Partial update; only fields listed in ``model_fields_set`` are applied.

    Passing ``dj_role_id=None`` explicitly clears the role, which is why
    unset and None are kept apart.
    """

    model_config = ConfigDict(frozen=True)

    music_channel_id: DiscordSnowflake | None = None
    dj_role_id: DiscordSnowflake | None = None
    auto_play: bool | None = None
    max_queue_size: MaxQueueSize | None = None

    def apply_to(self, settings: GuildSettings) -> GuildSettings:
        changes = {name: getattr(self, name) for name in self.model_fields_set}
        if "auto_play" in changes and changes["auto_play"] is None:
            del changes["auto_play"]
        if "max_queue_size" in changes and changes["max_queue_size"] is None:
            del changes["max_queue_size"]
        changes["updated_at"] = utcnow()
        return settings.model_copy(update=changes)


class SessionSnapshot(BaseModel):
    """Serializable copy of a live session, written on graceful shutdown."""

    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    voice_channel_id: DiscordSnowflake
    text_channel_id: DiscordSnowflake
    volume: VolumeInt
    loop_mode: LoopMode = LoopMode.NONE
    current: QueueEntry | None = None
    position_ms: int = 0
    entries: list[QueueEntry] = Field(default_factory=list)
    saved_at: UtcDatetimeField = Field(default_factory=utcnow)

    @classmethod
    def capture(cls, session: GuildSession, position_ms: int = 0) -> SessionSnapshot:
        return cls(
            guild_id=session.guild_id,
            voice_channel_id=session.voice_channel_id,
            text_channel_id=session.text_channel_id,
            volume=session.volume,
            loop_mode=session.loop_mode,
            current=session.current,
            position_ms=position_ms,
            entries=session.queue.entries,
        )

    @property
    def track_count(self) -> int:
        return len(self.entries) + (1 if self.current is not None else 0)
