"""Slash-command cog for playback: play, search, transport controls, volume, loop, now playing."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from moosek.application.commands.search import SearchResults
from moosek.domain.music.value_objects import LoopMode, SearchKind, SearchSource
from moosek.domain.shared.constants import QueueConstants, SearchConstants, VolumeConstants
from moosek.domain.shared.messages import ErrorMessages
from moosek.infrastructure.discord.adapters.interaction_adapter import respond, run_command, send_outcome
from moosek.infrastructure.discord.views.search_view import SearchResultsView

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)

SOURCE_CHOICES = [
    app_commands.Choice(name="YouTube Music", value=SearchSource.YOUTUBE_MUSIC.value),
    app_commands.Choice(name="YouTube", value=SearchSource.YOUTUBE.value),
    app_commands.Choice(name="SoundCloud", value=SearchSource.SOUNDCLOUD.value),
]

LOOP_CHOICES = [app_commands.Choice(name=mode.value.title(), value=mode.value) for mode in LoopMode]

KIND_CHOICES = [
    app_commands.Choice(name="Tracks and playlists", value=SearchKind.ALL.value),
    app_commands.Choice(name="Tracks only", value=SearchKind.TRACKS.value),
    app_commands.Choice(name="Playlists only", value=SearchKind.PLAYLISTS.value),
]


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @app_commands.command(name="play", description="Play a song or add it to the queue.")
    @app_commands.describe(query="Song name, URL or playlist", source="Where to search")
    @app_commands.choices(source=SOURCE_CHOICES)
    @app_commands.guild_only()
    async def play(self, interaction: discord.Interaction, query: str, source: str | None = None) -> None:
        # Resolving can outlive the three-second response window.
        await respond(
            self.container.dispatcher,
            interaction,
            "play",
            {"query": query, "source": source},
            defer=True,
        )

    @app_commands.command(name="search", description="Search for music and pick what to queue.")
    @app_commands.describe(
        query="Song, artist or playlist URL",
        platform="Where to search",
        type="Kind of result to accept",
        limit="Number of results",
    )
    @app_commands.choices(platform=SOURCE_CHOICES, type=KIND_CHOICES)
    @app_commands.guild_only()
    async def search(
        self,
        interaction: discord.Interaction,
        query: app_commands.Range[str, 1, 200],
        platform: str | None = None,
        type: str = SearchKind.ALL.value,
        limit: app_commands.Range[int, 1, SearchConstants.MAX_LIMIT] = SearchConstants.DEFAULT_LIMIT,
    ) -> None:
        outcome = await run_command(
            self.container.dispatcher,
            interaction,
            "search",
            {"query": query, "platform": platform, "type": type, "limit": limit},
            defer=True,
        )

        view = None
        if outcome is not None and outcome.is_success and isinstance(outcome.data, SearchResults):
            view = SearchResultsView(
                handler=self.container.search_handler,
                results=outcome.data,
                timeout=self.container.settings.commands.collector_timeout_seconds,
            )

        message = await send_outcome(interaction, outcome, view=view)
        if view is not None:
            view.attach(message)

    @app_commands.command(name="skip", description="Skip the current track.")
    @app_commands.describe(amount="Number of tracks to skip")
    @app_commands.guild_only()
    async def skip(
        self,
        interaction: discord.Interaction,
        amount: app_commands.Range[int, 1, QueueConstants.SKIP_MAX_AMOUNT] = 1,
    ) -> None:
        await respond(self.container.dispatcher, interaction, "skip", {"amount": amount})

    @app_commands.command(name="pause", description="Pause playback.")
    @app_commands.guild_only()
    async def pause(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "pause")

    @app_commands.command(name="resume", description="Resume playback.")
    @app_commands.guild_only()
    async def resume(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "resume")

    @app_commands.command(name="stop", description="Stop playback, clear the queue and leave voice.")
    @app_commands.guild_only()
    async def stop(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "stop")

    @app_commands.command(name="seek", description="Jump to a position in the current track.")
    @app_commands.describe(position="Position in seconds")
    @app_commands.guild_only()
    async def seek(self, interaction: discord.Interaction, position: app_commands.Range[int, 0]) -> None:
        await respond(self.container.dispatcher, interaction, "seek", {"position": position})

    @app_commands.command(name="volume", description="Set the volume.")
    @app_commands.describe(level="Volume percent")
    @app_commands.guild_only()
    async def volume(
        self,
        interaction: discord.Interaction,
        level: app_commands.Range[int, VolumeConstants.MIN_VOLUME, VolumeConstants.MAX_VOLUME],
    ) -> None:
        await respond(self.container.dispatcher, interaction, "volume", {"level": level})

    @app_commands.command(name="loop", description="Set the loop mode.")
    @app_commands.describe(mode="Loop mode")
    @app_commands.choices(mode=LOOP_CHOICES)
    @app_commands.guild_only()
    async def loop(self, interaction: discord.Interaction, mode: str) -> None:
        await respond(self.container.dispatcher, interaction, "loop", {"mode": mode})

    @app_commands.command(name="nowplaying", description="Show the current track.")
    @app_commands.guild_only()
    async def nowplaying(self, interaction: discord.Interaction) -> None:
        await respond(self.container.dispatcher, interaction, "nowplaying")


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
