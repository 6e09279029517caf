"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across the package is defined here once,
so models can simply annotate their fields::

    from moosek.domain.shared.types import DiscordSnowflake, VolumeInt

    class MyModel(BaseModel):
        guild_id: DiscordSnowflake
        volume: VolumeInt
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BeforeValidator, Field

from moosek.domain.shared.constants import GuildDefaultsConstants

# ── Numeric constraints ─────────────────────────────────────────────

DiscordSnowflake = Annotated[int, Field(gt=0, lt=2**64)]
"""Positive integer that fits a Discord snowflake (1 … 2^64-1)."""

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

NonNegativeFloat = Annotated[float, Field(ge=0.0)]
"""Float >= 0.0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

VolumeInt = Annotated[int, Field(ge=0, le=1000)]
"""Player volume in percent: 0 … 1 000 (100 is unity gain)."""

DurationMs = Annotated[int, Field(ge=0)]
"""Track duration or position in milliseconds."""

CooldownSeconds = Annotated[int, Field(ge=0, le=3600)]
"""Per-command cooldown in whole seconds; 0 disables it."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

TrackTitleStr = Annotated[str, Field(min_length=1, max_length=500)]
"""Track title: 1-500 characters."""

CommandNameStr = Annotated[str, Field(pattern=r"^[a-z0-9_\- ]{1,64}$")]
"""Lower-case command name, optionally with a sub-command (``"dj set"``)."""


# ── Settings-specific constraints ──────────────────────────────────

BusyTimeoutMs = Annotated[int, Field(ge=1000, le=30000)]
"""Database busy timeout in milliseconds: 1 000 … 30 000."""

ConnectionTimeoutS = Annotated[int, Field(ge=1, le=60)]
"""Database connection timeout in seconds: 1 … 60."""

CommandPrefixStr = Annotated[str, Field(min_length=1, max_length=5)]
"""Bot command prefix: 1-5 characters."""

MaxQueueSize = Annotated[int, Field(gt=0, le=GuildDefaultsConstants.MAX_QUEUE_SIZE_LIMIT)]
"""Maximum queue size: 1 … 1 000."""

PageSize = Annotated[int, Field(ge=1, le=25)]
"""Entries per queue page: 1 … 25 (Discord embed field limit)."""


# ── Datetime constraints ────────────────────────────────────────────

def _ensure_utc(v: datetime) -> datetime:
    if v.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    return v.astimezone(UTC)


UtcDatetimeField = Annotated[datetime, BeforeValidator(_ensure_utc)]
"""Timezone-aware datetime, normalised to UTC on input."""
