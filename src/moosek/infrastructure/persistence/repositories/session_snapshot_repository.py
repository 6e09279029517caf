"""SQLite implementation of the session snapshot repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from moosek.domain.guild.entities import SessionSnapshot
from moosek.domain.guild.repository import SessionSnapshotRepository
from moosek.domain.music.entities import QueueEntry
from moosek.domain.music.value_objects import LoopMode
from moosek.domain.shared.datetime_utils import UtcDateTime

if TYPE_CHECKING:
    from ..database import Database


_INSERT_ENTRY = """
    INSERT INTO snapshot_entries (
        guild_id, position, is_current, title, author, uri, duration_ms,
        is_live, is_seekable, thumbnail_url, requester_id
    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


class SQLiteSessionSnapshotRepository(SessionSnapshotRepository):
    """Entries are stored in their own table; the current one sits at position -1."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def save_all(self, snapshots: list[SessionSnapshot]) -> int:
        async with self._db.transaction() as conn:
            await conn.execute("DELETE FROM snapshot_entries")
            await conn.execute("DELETE FROM session_snapshots")

            for snapshot in snapshots:
                await conn.execute(
                    """
                    INSERT INTO session_snapshots (
                        guild_id, voice_channel_id, text_channel_id, volume,
                        loop_mode, position_ms, saved_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        snapshot.guild_id,
                        snapshot.voice_channel_id,
                        snapshot.text_channel_id,
                        snapshot.volume,
                        snapshot.loop_mode.value,
                        snapshot.position_ms,
                        UtcDateTime(snapshot.saved_at).iso,
                    ),
                )
                if snapshot.current is not None:
                    await conn.execute(_INSERT_ENTRY, self._entry_to_params(snapshot.current, snapshot.guild_id, -1))
                for position, entry in enumerate(snapshot.entries):
                    await conn.execute(_INSERT_ENTRY, self._entry_to_params(entry, snapshot.guild_id, position))

        return len(snapshots)

    async def load_all(self) -> list[SessionSnapshot]:
        session_rows = await self._db.fetch_all("SELECT * FROM session_snapshots ORDER BY guild_id ASC")
        entry_rows = await self._db.fetch_all(
            """
            SELECT * FROM snapshot_entries
            ORDER BY guild_id ASC, position ASC
            """
        )

        by_guild: dict[int, list[dict]] = {}
        for row in entry_rows:
            by_guild.setdefault(row["guild_id"], []).append(row)

        snapshots: list[SessionSnapshot] = []
        for row in session_rows:
            current: QueueEntry | None = None
            entries: list[QueueEntry] = []
            for entry_row in by_guild.get(row["guild_id"], []):
                entry = self._row_to_entry(entry_row)
                if entry_row["is_current"]:
                    current = entry
                else:
                    entries.append(entry)

            snapshots.append(
                SessionSnapshot(
                    guild_id=row["guild_id"],
                    voice_channel_id=row["voice_channel_id"],
                    text_channel_id=row["text_channel_id"],
                    volume=row["volume"],
                    loop_mode=LoopMode(row["loop_mode"]),
                    current=current,
                    position_ms=row["position_ms"],
                    entries=entries,
                    saved_at=UtcDateTime.from_iso(row["saved_at"]).dt,
                )
            )
        return snapshots

    async def clear(self) -> int:
        async with self._db.transaction() as conn:
            await conn.execute("DELETE FROM snapshot_entries")
            cursor = await conn.execute("DELETE FROM session_snapshots")
            return cursor.rowcount

    def _row_to_entry(self, row: dict) -> QueueEntry:
        return QueueEntry(
            title=row["title"],
            author=row["author"],
            uri=row["uri"],
            duration_ms=row["duration_ms"],
            is_live=bool(row["is_live"]),
            is_seekable=bool(row["is_seekable"]),
            thumbnail_url=row.get("thumbnail_url"),
            requester_id=row.get("requester_id"),
        )

    def _entry_to_params(self, entry: QueueEntry, guild_id: int, position: int) -> tuple:
        return (
            guild_id,
            position,
            int(position < 0),
            entry.title,
            entry.author,
            entry.uri,
            entry.duration_ms,
            int(entry.is_live),
            int(entry.is_seekable),
            entry.thumbnail_url,
            entry.requester_id,
        )
