"""
Guild Bounded Context

Per-guild settings and the snapshots written when the bot shuts down.
"""

from moosek.domain.guild.entities import GuildSettings, GuildSettingsUpdate, SessionSnapshot
from moosek.domain.guild.repository import GuildSettingsRepository, SessionSnapshotRepository

__all__ = [
    "GuildSettings",
    "GuildSettingsUpdate",
    "SessionSnapshot",
    "GuildSettingsRepository",
    "SessionSnapshotRepository",
]
