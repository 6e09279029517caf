"""Main Discord bot class integrating the DI container, cog lifecycle, and graceful shutdown."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING, Any

import discord
from discord import app_commands
from discord.ext import commands

from moosek.domain.shared.messages import ErrorMessages, LogTemplates
from moosek.infrastructure.discord.guards.interaction_guards import send_ephemeral

if TYPE_CHECKING:
    from ...config.container import Container
    from ...config.settings import Settings

logger = logging.getLogger(__name__)

# Lets the shutdown reply reach Discord before the gateway closes.
SHUTDOWN_REPLY_DELAY: float = 1.0

COGS: tuple[str, ...] = (
    "moosek.infrastructure.discord.cogs.music_cog",
    "moosek.infrastructure.discord.cogs.queue_cog",
    "moosek.infrastructure.discord.cogs.settings_cog",
    "moosek.infrastructure.discord.cogs.info_cog",
    "moosek.infrastructure.discord.cogs.event_cog",
)


class MusicBot(commands.Bot):
    def __init__(
        self,
        container: Container,
        settings: Settings,
        **kwargs: Any,
    ) -> None:
        intents = discord.Intents.default()
        intents.voice_states = True
        intents.guilds = True

        super().__init__(
            command_prefix=settings.discord.command_prefix,
            intents=intents,
            help_command=None,
            **kwargs,
        )

        self.container = container
        self.settings = settings
        self._restart_announced = False
        self._shutting_down = False
        container.set_bot(self)

    async def setup_hook(self) -> None:
        logger.info(LogTemplates.BOT_SETUP)

        try:
            await self.container.initialize()
        except Exception as e:
            logger.exception(LogTemplates.BOT_CONTAINER_INIT_FAILED, e)
            raise

        self.container.system_handler.bind_transport(
            latency=lambda: self.latency,
            guild_count=lambda: len(self.guilds),
            shutdown=self._request_shutdown,
            invite_url=self.invite_url,
        )

        await self._load_cogs()
        self.tree.on_error = self._on_app_command_error

        if self.settings.discord.sync_on_startup:
            await self._sync_commands()

        logger.info(LogTemplates.BOT_SETUP_COMPLETE)

    async def _load_cogs(self) -> None:
        loaded = 0
        failed = 0

        for cog in COGS:
            try:
                await self.load_extension(cog)
                logger.info(LogTemplates.BOT_COG_LOADED, cog)
                loaded += 1
            except commands.ExtensionError:
                logger.exception(LogTemplates.BOT_COG_LOAD_FAILED, cog)
                failed += 1

        logger.info(LogTemplates.BOT_COGS_LOADED_SUMMARY, loaded, failed)

    async def _on_app_command_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ) -> None:
        """Last net for errors raised outside the dispatcher; replies ephemerally."""
        logger.error(
            LogTemplates.BOT_APP_COMMAND_ERROR,
            getattr(interaction.command, "name", "<unknown>"),
            exc_info=getattr(error, "original", error),
        )

        message = ErrorMessages.GENERIC_FAILURE
        if isinstance(error, app_commands.NoPrivateMessage):
            message = ErrorMessages.SERVER_ONLY

        try:
            await send_ephemeral(interaction, message)
        except discord.HTTPException:
            logger.warning(LogTemplates.BOT_ERROR_MESSAGE_SEND_FAILED)

    async def _sync_commands(self) -> None:
        for guild_id in self.settings.discord.test_guild_ids:
            guild = discord.Object(id=guild_id)
            try:
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                logger.info(LogTemplates.BOT_SYNCED_GUILD, len(synced), guild_id)
            except discord.HTTPException as e:
                logger.warning(LogTemplates.BOT_SYNC_GUILD_FAILED, guild_id, e)

        try:
            synced = await self.tree.sync()
            logger.info(LogTemplates.BOT_SYNCED_GLOBAL, len(synced))
        except discord.HTTPException as e:
            logger.warning(LogTemplates.BOT_SYNC_GLOBAL_FAILED, e)

    async def on_ready(self) -> None:
        logger.info(
            LogTemplates.BOT_READY,
            self.user,  # type: ignore
            self.user.id,  # type: ignore
        )

        activity = discord.Activity(type=discord.ActivityType.listening, name="/play")
        await self.change_presence(activity=activity)

        # on_ready fires again after reconnects; announce only once per process.
        if not self._restart_announced:
            self._restart_announced = True
            await self._announce_restart()

    async def _announce_restart(self) -> None:
        snapshots = await self.container.snapshot_service.load_pending()
        for snapshot in snapshots:
            await self.container.notification_bridge.announce_restart(snapshot)

    def invite_url(self) -> str | None:
        """OAuth2 link that adds the bot with the permissions it needs; None before login."""
        if self.application_id is None:
            return None
        return discord.utils.oauth_url(
            self.application_id,
            permissions=discord.Permissions(self.settings.discord.invite_permissions),
            scopes=("bot", "applications.commands"),
        )

    async def _request_shutdown(self) -> None:
        loop = asyncio.get_running_loop()
        loop.call_later(SHUTDOWN_REPLY_DELAY, lambda: asyncio.create_task(self.close()))

    async def close(self) -> None:
        if self._shutting_down:
            return
        self._shutting_down = True
        logger.info(LogTemplates.BOT_SHUTTING_DOWN)

        if self.container.database.is_initialized:
            try:
                await self.container.snapshot_service.save_all()
            except Exception as e:
                logger.error(LogTemplates.SNAPSHOT_SAVE_FAILED, e)

        try:
            await self.container.shutdown()
        except Exception as e:
            logger.warning(LogTemplates.BOT_CONTAINER_SHUTDOWN_ERROR, e)

        await super().close()
        logger.info(LogTemplates.BOT_SHUTDOWN_COMPLETE)

    def run_with_graceful_shutdown(self, token: str, *, shutdown_timeout: float = 30.0) -> None:
        async def runner() -> None:
            async with self:
                loop = asyncio.get_running_loop()

                async def _graceful_close() -> None:
                    try:
                        await asyncio.wait_for(self.close(), timeout=shutdown_timeout)
                    except TimeoutError:
                        logger.warning(LogTemplates.BOT_SHUTDOWN_TIMEOUT, shutdown_timeout)

                def _on_signal(sig: signal.Signals) -> None:
                    logger.info(LogTemplates.BOT_SIGNAL_RECEIVED, sig.name)
                    asyncio.create_task(_graceful_close())

                def _on_loop_exception(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
                    logger.error(
                        LogTemplates.BOT_LOOP_EXCEPTION,
                        context.get("message"),
                        exc_info=context.get("exception"),
                    )
                    if not self._shutting_down:
                        asyncio.create_task(_graceful_close())

                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.add_signal_handler(sig, _on_signal, sig)
                loop.set_exception_handler(_on_loop_exception)

                logger.info(LogTemplates.BOT_STARTING_RUN)
                await self.start(token)

        asyncio.run(runner())


def create_bot(container: Container, settings: Settings) -> MusicBot:
    return MusicBot(container=container, settings=settings)
