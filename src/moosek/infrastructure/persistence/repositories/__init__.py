"""SQLite repository implementations."""

from moosek.infrastructure.persistence.repositories.guild_settings_repository import (
    SQLiteGuildSettingsRepository,
)
from moosek.infrastructure.persistence.repositories.session_snapshot_repository import (
    SQLiteSessionSnapshotRepository,
)

__all__ = [
    "SQLiteGuildSettingsRepository",
    "SQLiteSessionSnapshotRepository",
]
