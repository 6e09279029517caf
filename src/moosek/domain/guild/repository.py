"""
Guild Domain Repository Interfaces

Abstract base classes defining the contracts for data persistence.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod

from moosek.domain.guild.entities import GuildSettings, GuildSettingsUpdate, SessionSnapshot


class GuildSettingsRepository(ABC):
    """Key/value style store for per-guild settings."""

    @abstractmethod
    async def get(self, guild_id: int) -> GuildSettings | None:
        """Retrieve the stored settings for a guild.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The settings if a record exists, None otherwise.
        """
        ...

    @abstractmethod
    async def upsert(self, guild_id: int, update: GuildSettingsUpdate) -> GuildSettings:
        """Merge the provided fields into the guild's record, creating it if needed.

        Args:
            guild_id: The Discord guild ID.
            update: Fields to change; unset fields keep their stored value.

        Returns:
            The settings after the merge.
        """
        ...

    @abstractmethod
    async def reset(self, guild_id: int) -> bool:
        """Delete the guild's record so defaults apply again.

        Returns:
            True if a record was deleted.
        """
        ...


class SessionSnapshotRepository(ABC):
    """Persists session snapshots across a restart."""

    @abstractmethod
    async def save_all(self, snapshots: list[SessionSnapshot]) -> int:
        """Replace every stored snapshot with ``snapshots``; returns the count written."""
        ...

    @abstractmethod
    async def load_all(self) -> list[SessionSnapshot]:
        ...

    @abstractmethod
    async def clear(self) -> int:
        """Delete all stored snapshots and return how many were removed."""
        ...
