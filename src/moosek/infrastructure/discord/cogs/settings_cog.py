"""Slash-command cog for per-guild settings: the DJ role and admin configuration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from moosek.domain.shared.constants import GuildDefaultsConstants
from moosek.domain.shared.messages import ErrorMessages
from moosek.infrastructure.discord.adapters.interaction_adapter import respond

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class SettingsCog(commands.Cog):
    dj = app_commands.Group(name="dj", description="Manage the DJ role.", guild_only=True)
    admin = app_commands.Group(name="admin", description="Server music configuration.", guild_only=True)

    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    # ── /dj ──

    @dj.command(name="set", description="Set the DJ role.")
    @app_commands.describe(role="Role allowed to control playback")
    async def dj_set(self, interaction: discord.Interaction, role: discord.Role) -> None:
        await respond(self.container.dispatcher, interaction, "dj set", {"role": role.id})

    @dj.command(name="remove", description="Remove the DJ role.")
    async def dj_remove(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "dj remove")

    @dj.command(name="list", description="Show who can control playback.")
    async def dj_list(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "dj list")

    # ── /admin ──

    @admin.command(name="settings", description="Show this server's music settings.")
    async def admin_settings(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "admin settings")

    @admin.command(name="config", description="Change this server's music settings.")
    @app_commands.describe(
        auto_play="Start playing as soon as something is queued",
        max_queue_size="Maximum number of queued tracks",
        music_channel="Channel for now-playing notifications",
    )
    async def admin_config(
        self,
        interaction: discord.Interaction,
        auto_play: bool | None = None,
        max_queue_size: app_commands.Range[int, 1, GuildDefaultsConstants.MAX_QUEUE_SIZE_LIMIT] | None = None,
        music_channel: discord.TextChannel | None = None,
    ) -> None:
        await respond(
            self.container.dispatcher,
            interaction,
            "admin config",
            {
                "auto_play": auto_play,
                "max_queue_size": max_queue_size,
                "music_channel": music_channel.id if music_channel is not None else None,
            },
        )

    @admin.command(name="reset", description="Restore default settings and stop playback.")
    async def admin_reset(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "admin reset")


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(SettingsCog(bot, container))
