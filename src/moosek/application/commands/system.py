"""General commands: ping, stats, help, uptime, version, invite, support and shutdown."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from ...application.interfaces.notifier import NotificationPayload
from ...domain.shared.datetime_utils import format_elapsed, utcnow
from ...domain.shared.exceptions import CollaboratorUnavailableError
from ...domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from ...utils.reply import join_lines
from .base import CommandOutcome

if TYPE_CHECKING:
    from ..queries.system_stats import SystemStatsHandler
    from .base import CommandContext, CommandDefinition

logger = logging.getLogger(__name__)


class SystemCommandHandler:
    """Commands that do not touch any guild session.

    The transport-specific bits (gateway latency, guild count, invite link,
    the actual shutdown) are injected as callables; the Discord bot provides
    them.
    """

    def __init__(
        self,
        *,
        stats_query: SystemStatsHandler,
        definitions: Callable[[], list[CommandDefinition]],
        versions: Mapping[str, str] | None = None,
        support_url: str | None = None,
        started_at: datetime | None = None,
        latency: Callable[[], float] = lambda: 0.0,
        guild_count: Callable[[], int] = lambda: 0,
        invite_url: Callable[[], str | None] = lambda: None,
        shutdown: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._stats_query = stats_query
        self._definitions = definitions
        self._versions = dict(versions or {})
        self._support_url = support_url
        self._started_at = started_at or utcnow()
        self._latency = latency
        self._guild_count = guild_count
        self._invite_url = invite_url
        self._shutdown = shutdown

    def bind_transport(
        self,
        *,
        latency: Callable[[], float],
        guild_count: Callable[[], int],
        shutdown: Callable[[], Awaitable[None]],
        invite_url: Callable[[], str | None] | None = None,
    ) -> None:
        self._latency = latency
        self._guild_count = guild_count
        self._shutdown = shutdown
        if invite_url is not None:
            self._invite_url = invite_url

    async def ping(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        latency_ms = round(self._latency() * 1000)
        return CommandOutcome.success(DiscordUIMessages.PING.format(latency_ms=latency_ms), data=latency_ms)

    async def stats(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        stats = self._stats_query.handle()
        payload = NotificationPayload(
            title=DiscordUIMessages.EMBED_STATS,
            description=DiscordUIMessages.STATS_VALUE.format(
                guilds=self._guild_count(),
                sessions=stats.sessions,
                playing=stats.playing,
                paused=stats.paused,
                queued=stats.queued_entries,
            ),
        )
        return CommandOutcome.success(payload=payload, data=stats)

    async def help(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        by_category: dict[str, list[str]] = {}
        for definition in self._definitions():
            by_category.setdefault(definition.category, []).append(
                DiscordUIMessages.HELP_LINE.format(name=definition.name, description=definition.description)
            )

        payload = NotificationPayload(title=DiscordUIMessages.EMBED_HELP)
        for category, lines in by_category.items():
            payload = payload.with_field(category.title(), join_lines(lines), inline=False)
        return CommandOutcome.success(payload=payload, ephemeral=True)

    async def uptime(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        elapsed = utcnow() - self._started_at
        payload = (
            NotificationPayload(title=DiscordUIMessages.EMBED_UPTIME)
            .with_field(DiscordUIMessages.FIELD_UPTIME, format_elapsed(elapsed))
            .with_field(DiscordUIMessages.FIELD_STARTED, f"<t:{int(self._started_at.timestamp())}:R>")
            .with_field(DiscordUIMessages.FIELD_ACTIVE_SESSIONS, str(self._stats_query.handle().sessions))
        )
        return CommandOutcome.success(payload=payload, data=elapsed)

    async def version(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        versions = dict(self._versions)
        own = versions.pop("moosek", "unknown")
        payload = NotificationPayload(
            title=DiscordUIMessages.EMBED_VERSION,
            description=DiscordUIMessages.VERSION_DESCRIPTION.format(version=own),
        )
        for name, version in versions.items():
            payload = payload.with_field(name, f"`{version}`")
        return CommandOutcome.success(payload=payload, data=own)

    async def invite(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        url = self._invite_url()
        if url is None:
            raise CollaboratorUnavailableError(ErrorMessages.INVITE_UNAVAILABLE, collaborator="discord")
        payload = NotificationPayload(
            title=DiscordUIMessages.EMBED_INVITE,
            description=DiscordUIMessages.INVITE_DESCRIPTION.format(url=url),
        ).with_field(DiscordUIMessages.FIELD_REQUIRED_PERMISSIONS, DiscordUIMessages.REQUIRED_PERMISSIONS, inline=False)
        return CommandOutcome.success(payload=payload, data=url)

    async def support(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        if self._support_url:
            description = DiscordUIMessages.SUPPORT_DESCRIPTION.format(url=self._support_url)
        else:
            description = DiscordUIMessages.SUPPORT_NOT_CONFIGURED
        payload = NotificationPayload(title=DiscordUIMessages.EMBED_SUPPORT, description=description).with_field(
            DiscordUIMessages.FIELD_COMMON_ISSUES, DiscordUIMessages.COMMON_ISSUES, inline=False
        )
        return CommandOutcome.success(payload=payload, ephemeral=True)

    async def shutdown(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        if self._shutdown is not None:
            logger.info(LogTemplates.SHUTDOWN_REQUESTED, ctx.actor.user_id)
            await self._shutdown()
        return CommandOutcome.success(DiscordUIMessages.SHUTDOWN_ACK, ephemeral=True)
