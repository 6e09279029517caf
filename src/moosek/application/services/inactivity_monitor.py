"""Disconnects from voice after the bot's channel has been empty for a grace period."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ...domain.shared.constants import DestroyReasons
from ...domain.shared.events import (
    BotDisconnected,
    SessionDestroyed,
    VoiceChannelEmptied,
    VoiceChannelOccupied,
    get_event_bus,
)
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class InactivityMonitor:
    def __init__(self, *, registry: SessionRegistry, grace_seconds: float) -> None:
        self._registry = registry
        self._grace_seconds = grace_seconds
        self._bus = get_event_bus()
        self._timers: dict[int, asyncio.Task[None]] = {}
        self._started = False

    @property
    def pending_guilds(self) -> set[int]:
        return {guild_id for guild_id, task in self._timers.items() if not task.done()}

    def start(self) -> None:
        if self._started:
            return
        self._bus.subscribe(VoiceChannelEmptied, self._on_channel_emptied)
        self._bus.subscribe(VoiceChannelOccupied, self._on_channel_occupied)
        self._bus.subscribe(BotDisconnected, self._on_bot_disconnected)
        self._bus.subscribe(SessionDestroyed, self._on_session_destroyed)
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._bus.unsubscribe(VoiceChannelEmptied, self._on_channel_emptied)
        self._bus.unsubscribe(VoiceChannelOccupied, self._on_channel_occupied)
        self._bus.unsubscribe(BotDisconnected, self._on_bot_disconnected)
        self._bus.unsubscribe(SessionDestroyed, self._on_session_destroyed)
        for guild_id in list(self._timers):
            self._cancel(guild_id)
        self._started = False

    def _cancel(self, guild_id: int) -> bool:
        task = self._timers.pop(guild_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def _on_channel_emptied(self, event: VoiceChannelEmptied) -> None:
        session = self._registry.get(event.guild_id)
        if session is None or session.voice_channel_id != event.channel_id:
            return
        self._cancel(event.guild_id)
        logger.info(LogTemplates.INACTIVITY_TIMER_STARTED, event.guild_id, self._grace_seconds)
        self._timers[event.guild_id] = asyncio.create_task(
            self._expire(event.guild_id, event.channel_id),
            name=f"inactivity-{event.guild_id}",
        )

    async def _on_channel_occupied(self, event: VoiceChannelOccupied) -> None:
        if self._cancel(event.guild_id):
            logger.info(LogTemplates.INACTIVITY_TIMER_CANCELLED, event.guild_id)

    async def _on_bot_disconnected(self, event: BotDisconnected) -> None:
        self._cancel(event.guild_id)
        logger.info(LogTemplates.BOT_DISCONNECTED, event.guild_id)
        await self._registry.destroy(event.guild_id, DestroyReasons.BOT_DISCONNECTED)

    async def _on_session_destroyed(self, event: SessionDestroyed) -> None:
        if event.reason != DestroyReasons.INACTIVITY:
            self._cancel(event.guild_id)

    async def _expire(self, guild_id: int, channel_id: int) -> None:
        await asyncio.sleep(self._grace_seconds)
        self._timers.pop(guild_id, None)
        session = self._registry.get(guild_id)
        if session is None or session.voice_channel_id != channel_id:
            return
        logger.info(LogTemplates.INACTIVITY_DISCONNECT, guild_id)
        await self._registry.destroy(guild_id, DestroyReasons.INACTIVITY)
