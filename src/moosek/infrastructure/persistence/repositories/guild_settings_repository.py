"""SQLite implementation of the guild settings repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from moosek.domain.guild.entities import GuildSettings, GuildSettingsUpdate
from moosek.domain.guild.repository import GuildSettingsRepository
from moosek.domain.shared.datetime_utils import UtcDateTime
from moosek.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)


class SQLiteGuildSettingsRepository(GuildSettingsRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def get(self, guild_id: int) -> GuildSettings | None:
        row = await self._db.fetch_one(
            "SELECT * FROM guild_settings WHERE guild_id = ?",
            (guild_id,),
        )
        if row is None:
            return None
        return self._row_to_settings(row)

    async def upsert(self, guild_id: int, update: GuildSettingsUpdate) -> GuildSettings:
        current = await self.get(guild_id)
        if current is None:
            current = GuildSettings(guild_id=guild_id)
        merged = update.apply_to(current)

        await self._db.execute(
            """
            INSERT INTO guild_settings (
                guild_id, music_channel_id, dj_role_id, auto_play, max_queue_size,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(guild_id) DO UPDATE SET
                music_channel_id = excluded.music_channel_id,
                dj_role_id = excluded.dj_role_id,
                auto_play = excluded.auto_play,
                max_queue_size = excluded.max_queue_size,
                updated_at = excluded.updated_at
            """,
            (
                merged.guild_id,
                merged.music_channel_id,
                merged.dj_role_id,
                int(merged.auto_play),
                merged.max_queue_size,
                UtcDateTime(merged.created_at).iso,
                UtcDateTime(merged.updated_at).iso,
            ),
        )
        logger.debug(LogTemplates.GUILD_SETTINGS_SAVED, guild_id)
        return merged

    async def reset(self, guild_id: int) -> bool:
        deleted = await self._db.execute(
            "DELETE FROM guild_settings WHERE guild_id = ?",
            (guild_id,),
        )
        if deleted:
            logger.debug(LogTemplates.GUILD_SETTINGS_RESET, guild_id)
        return deleted > 0

    def _row_to_settings(self, row: dict) -> GuildSettings:
        return GuildSettings(
            guild_id=row["guild_id"],
            music_channel_id=row.get("music_channel_id"),
            dj_role_id=row.get("dj_role_id"),
            auto_play=bool(row["auto_play"]),
            max_queue_size=row["max_queue_size"],
            created_at=UtcDateTime.from_iso(row["created_at"]).dt,
            updated_at=UtcDateTime.from_iso(row["updated_at"]).dt,
        )
