"""Slash-command cog for queue management: view, shuffle, remove, move, clear."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from moosek.application.queries.get_queue import QueuePage
from moosek.domain.music.value_objects import QueueFilter, QueueSort, ShuffleMode
from moosek.domain.shared.messages import ErrorMessages
from moosek.infrastructure.discord.adapters.interaction_adapter import respond, run_command, send_outcome
from moosek.infrastructure.discord.views.queue_view import QueuePaginationView

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)

FILTER_CHOICES = [
    app_commands.Choice(name="All tracks", value=QueueFilter.ALL.value),
    app_commands.Choice(name="My tracks", value=QueueFilter.USER.value),
    app_commands.Choice(name="Short (< 3 min)", value=QueueFilter.SHORT.value),
    app_commands.Choice(name="Long (> 5 min)", value=QueueFilter.LONG.value),
    app_commands.Choice(name="Live streams", value=QueueFilter.LIVE.value),
]

SORT_CHOICES = [
    app_commands.Choice(name="Order added", value=QueueSort.ADDED.value),
    app_commands.Choice(name="Shortest first", value=QueueSort.DURATION_ASC.value),
    app_commands.Choice(name="Longest first", value=QueueSort.DURATION_DESC.value),
    app_commands.Choice(name="Artist A-Z", value=QueueSort.ARTIST_ASC.value),
    app_commands.Choice(name="Title A-Z", value=QueueSort.TITLE_ASC.value),
]

SHUFFLE_CHOICES = [
    app_commands.Choice(name="Normal", value=ShuffleMode.NORMAL.value),
    app_commands.Choice(name="Smart (next-up tracks move back)", value=ShuffleMode.SMART.value),
]


class QueueCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @app_commands.command(name="queue", description="Show the current queue.")
    @app_commands.describe(page="Page number", filter="Only show some tracks", sort="Display order")
    @app_commands.choices(filter=FILTER_CHOICES, sort=SORT_CHOICES)
    @app_commands.guild_only()
    async def queue(
        self,
        interaction: discord.Interaction,
        page: app_commands.Range[int, 1] = 1,
        filter: str | None = None,
        sort: str | None = None,
    ) -> None:
        outcome = await run_command(
            self.container.dispatcher,
            interaction,
            "queue",
            {"page": page, "filter": filter, "sort": sort},
        )

        view = None
        paged = outcome is not None and outcome.is_success and isinstance(outcome.data, QueuePage)
        if paged and outcome.data.total_pages > 1:
            view = QueuePaginationView(
                handler=self.container.queue_view_handler,
                page=outcome.data,
                timeout=self.container.settings.commands.collector_timeout_seconds,
            )

        message = await send_outcome(interaction, outcome, view=view)
        if view is not None:
            view.attach(message)

    @app_commands.command(name="shuffle", description="Shuffle the queue.")
    @app_commands.describe(type="Shuffle algorithm")
    @app_commands.choices(type=SHUFFLE_CHOICES)
    @app_commands.guild_only()
    async def shuffle(self, interaction: discord.Interaction, type: str = ShuffleMode.NORMAL.value) -> None:
        await respond(self.container.dispatcher, interaction, "shuffle", {"type": type})

    @app_commands.command(name="remove", description="Remove a track from the queue.")
    @app_commands.describe(position="Queue position (1 = next up)")
    @app_commands.guild_only()
    async def remove(self, interaction: discord.Interaction, position: app_commands.Range[int, 1]) -> None:
        await respond(self.container.dispatcher, interaction, "remove", {"position": position})

    @app_commands.command(name="move", description="Move a track to another queue position.")
    @app_commands.describe(from_position="Current position", to_position="New position")
    @app_commands.rename(from_position="from", to_position="to")
    @app_commands.guild_only()
    async def move(
        self,
        interaction: discord.Interaction,
        from_position: app_commands.Range[int, 1],
        to_position: app_commands.Range[int, 1],
    ) -> None:
        await respond(
            self.container.dispatcher,
            interaction,
            "move",
            {"from": from_position, "to": to_position},
        )

    @app_commands.command(name="clear", description="Remove every queued track.")
    @app_commands.guild_only()
    async def clear(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "clear")


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(QueueCog(bot, container))
