"""Per-guild asyncio locks."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class GuildLocks:
    """One ``asyncio.Lock`` per guild, forgotten once nobody holds or awaits it.

    Every caller for a guild shares the same lock for as long as any of them
    is inside ``hold``, so the map only ever contains guilds with work in
    flight.
    """

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = defaultdict(int)

    def __len__(self) -> int:
        return len(self._locks)

    def __contains__(self, guild_id: int) -> bool:
        return guild_id in self._locks

    @asynccontextmanager
    async def hold(self, guild_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(guild_id, asyncio.Lock())
        self._users[guild_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._users[guild_id] -= 1
            if not self._users[guild_id]:
                del self._users[guild_id]
                del self._locks[guild_id]
