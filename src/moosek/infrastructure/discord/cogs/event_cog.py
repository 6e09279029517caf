"""Discord event listeners that feed voice and guild changes into the domain event bus."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from moosek.domain.shared.constants import DestroyReasons
from moosek.domain.shared.events import (
    BotDisconnected,
    VoiceChannelEmptied,
    VoiceChannelOccupied,
    get_event_bus,
)
from moosek.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class EventCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        self._event_bus = get_event_bus()

    # ─────────────────────────────────────────────────────────────────
    # Guild Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_guild_join(self, guild: discord.Guild) -> None:
        logger.info("Joined guild: %s (%s)", guild.name, guild.id)

    @commands.Cog.listener()
    async def on_guild_remove(self, guild: discord.Guild) -> None:
        logger.info(LogTemplates.BOT_GUILD_REMOVED, guild.id)
        await self.container.session_registry.destroy(guild.id, DestroyReasons.GUILD_REMOVED)

    # ─────────────────────────────────────────────────────────────────
    # Voice Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        guild_id = member.guild.id

        if self.bot.user is not None and member.id == self.bot.user.id:
            if before.channel is not None and after.channel is None:
                await self._event_bus.publish(
                    BotDisconnected(guild_id=guild_id, channel_id=before.channel.id)
                )
            return

        bot_channel = self._get_bot_voice_channel(member.guild)
        if bot_channel is None:
            return

        left_bot_channel = (
            before.channel is not None
            and before.channel.id == bot_channel.id
            and (after.channel is None or after.channel.id != bot_channel.id)
        )
        if left_bot_channel and not self._has_non_bot_members(bot_channel):
            await self._event_bus.publish(VoiceChannelEmptied(guild_id=guild_id, channel_id=bot_channel.id))
            return

        joined_bot_channel = (
            not member.bot
            and after.channel is not None
            and after.channel.id == bot_channel.id
            and (before.channel is None or before.channel.id != bot_channel.id)
        )
        if joined_bot_channel:
            await self._event_bus.publish(VoiceChannelOccupied(guild_id=guild_id, channel_id=bot_channel.id))

    def _get_bot_voice_channel(
        self, guild: discord.Guild
    ) -> discord.VoiceChannel | discord.StageChannel | None:
        voice_client = guild.voice_client
        if voice_client is None:
            return None

        channel = voice_client.channel
        if isinstance(channel, (discord.VoiceChannel, discord.StageChannel)):
            return channel
        return None

    def _has_non_bot_members(self, channel: discord.VoiceChannel | discord.StageChannel) -> bool:
        return any(not m.bot for m in channel.members)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(EventCog(bot, container))
