"""Reads guild settings with configured defaults and applies admin changes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...domain.guild.entities import GuildSettings, GuildSettingsUpdate

if TYPE_CHECKING:
    from ...domain.guild.repository import GuildSettingsRepository


class GuildSettingsService:
    def __init__(
        self,
        *,
        repository: GuildSettingsRepository,
        default_auto_play: bool = True,
        default_max_queue_size: int = 100,
    ) -> None:
        self._repository = repository
        self._default_auto_play = default_auto_play
        self._default_max_queue_size = default_max_queue_size

    def defaults(self, guild_id: int) -> GuildSettings:
        return GuildSettings.defaults(
            guild_id,
            auto_play=self._default_auto_play,
            max_queue_size=self._default_max_queue_size,
        )

    async def get(self, guild_id: int) -> GuildSettings:
        stored = await self._repository.get(guild_id)
        return stored if stored is not None else self.defaults(guild_id)

    async def update(self, guild_id: int, update: GuildSettingsUpdate) -> GuildSettings:
        if await self._repository.get(guild_id) is None:
            # Seed from configured defaults so the merge starts from them.
            base = self.defaults(guild_id)
            seed = GuildSettingsUpdate(auto_play=base.auto_play, max_queue_size=base.max_queue_size)
            await self._repository.upsert(guild_id, seed)
        return await self._repository.upsert(guild_id, update)

    async def reset(self, guild_id: int) -> GuildSettings:
        await self._repository.reset(guild_id)
        return self.defaults(guild_id)
