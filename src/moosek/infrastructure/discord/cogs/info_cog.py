"""Slash-command cog for general commands: ping, stats, help, uptime, version, invite, support and shutdown."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from moosek.domain.shared.messages import ErrorMessages
from moosek.infrastructure.discord.adapters.interaction_adapter import respond

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class InfoCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @app_commands.command(name="ping", description="Check the bot's latency.")
    async def ping(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "ping")

    @app_commands.command(name="stats", description="Show bot statistics.")
    async def stats(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "stats")

    @app_commands.command(name="help", description="List available commands.")
    async def help(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "help")

    @app_commands.command(name="uptime", description="Show how long the bot has been up.")
    async def uptime(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "uptime")

    @app_commands.command(name="version", description="Show version information.")
    async def version(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "version")

    @app_commands.command(name="invite", description="Get the bot invite link.")
    async def invite(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "invite")

    @app_commands.command(name="support", description="Get help and the support server link.")
    async def support(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "support")

    @app_commands.command(name="shutdown", description="Shut the bot down (owners only).")
    async def shutdown(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "shutdown")


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(InfoCog(bot, container))
