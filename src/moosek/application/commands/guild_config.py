"""DJ role and per-guild admin commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...application.interfaces.notifier import NotificationPayload
from ...domain.guild.entities import GuildSettings, GuildSettingsUpdate
from ...domain.shared.constants import DestroyReasons
from ...domain.shared.exceptions import UserInputError
from ...domain.shared.messages import DiscordUIMessages, ErrorMessages
from .base import CommandOutcome

if TYPE_CHECKING:
    from ..services.guild_settings import GuildSettingsService
    from ..services.permission_gate import PermissionGate
    from ..services.session_registry import SessionRegistry
    from .base import CommandContext


def _flag(value: bool) -> str:
    return DiscordUIMessages.VALUE_ENABLED if value else DiscordUIMessages.VALUE_DISABLED


def settings_payload(settings: GuildSettings, title: str, music_status: str | None = None) -> NotificationPayload:
    role = f"<@&{settings.dj_role_id}>" if settings.dj_role_id else DiscordUIMessages.VALUE_NONE
    channel = f"<#{settings.music_channel_id}>" if settings.music_channel_id else DiscordUIMessages.VALUE_NONE
    payload = (
        NotificationPayload(title=title)
        .with_field(DiscordUIMessages.FIELD_DJ_ROLE, role)
        .with_field(DiscordUIMessages.FIELD_MUSIC_CHANNEL, channel)
        .with_field(DiscordUIMessages.FIELD_AUTO_PLAY, _flag(settings.auto_play))
        .with_field(DiscordUIMessages.FIELD_MAX_QUEUE, str(settings.max_queue_size))
    )
    if music_status is not None:
        payload = payload.with_field(DiscordUIMessages.FIELD_MUSIC_STATUS, music_status, inline=False)
    return payload


class GuildConfigHandler:
    """``/dj`` and ``/admin`` groups.

    Everything except ``dj list`` is reserved for administrators.
    """

    def __init__(
        self,
        *,
        guild_settings: GuildSettingsService,
        permission_gate: PermissionGate,
        registry: SessionRegistry,
    ) -> None:
        self._guild_settings = guild_settings
        self._permissions = permission_gate
        self._registry = registry

    async def dj_set(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        self._permissions.require_administrator(ctx.actor)
        role_id: int = args["role"]
        await self._guild_settings.update(ctx.require_guild(), GuildSettingsUpdate(dj_role_id=role_id))
        return CommandOutcome.success(DiscordUIMessages.DJ_ROLE_SET.format(role_id=role_id))

    async def dj_remove(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        self._permissions.require_administrator(ctx.actor)
        guild_id = ctx.require_guild()
        current = await self._guild_settings.get(guild_id)
        if not current.has_dj_role:
            raise UserInputError(ErrorMessages.NO_DJ_ROLE)

        await self._guild_settings.update(guild_id, GuildSettingsUpdate(dj_role_id=None))
        return CommandOutcome.success(DiscordUIMessages.DJ_ROLE_REMOVED)

    async def dj_list(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        settings = await self._guild_settings.get(ctx.require_guild())
        if settings.dj_role_id is not None:
            rule = DiscordUIMessages.DJ_RULE_ROLE.format(role_id=settings.dj_role_id)
            role = f"<@&{settings.dj_role_id}>"
        else:
            rule = DiscordUIMessages.DJ_RULE_MANAGE_GUILD
            role = DiscordUIMessages.VALUE_NONE
        payload = NotificationPayload(title=DiscordUIMessages.EMBED_DJ_SETTINGS, description=rule).with_field(
            DiscordUIMessages.FIELD_DJ_ROLE, role
        )
        return CommandOutcome.success(payload=payload, data=settings)

    async def show_settings(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        self._permissions.require_administrator(ctx.actor)
        guild_id = ctx.require_guild()
        settings = await self._guild_settings.get(guild_id)
        return CommandOutcome.success(
            payload=settings_payload(settings, DiscordUIMessages.EMBED_SERVER_SETTINGS, self._music_status(guild_id)),
            data=settings,
        )

    async def configure(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        """Merge whichever of auto_play, max_queue_size and music_channel were supplied."""
        self._permissions.require_administrator(ctx.actor)
        guild_id = ctx.require_guild()

        changes: dict[str, Any] = {}
        if args.get("auto_play") is not None:
            changes["auto_play"] = args["auto_play"]
        if args.get("max_queue_size") is not None:
            changes["max_queue_size"] = args["max_queue_size"]
        if args.get("music_channel") is not None:
            changes["music_channel_id"] = args["music_channel"]

        if not changes:
            settings = await self._guild_settings.get(guild_id)
        else:
            settings = await self._guild_settings.update(guild_id, GuildSettingsUpdate(**changes))
        return CommandOutcome.success(
            payload=settings_payload(settings, DiscordUIMessages.EMBED_SETTINGS_UPDATED), data=settings
        )

    async def reset(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        self._permissions.require_administrator(ctx.actor)
        guild_id = ctx.require_guild()
        settings = await self._guild_settings.reset(guild_id)
        await self._registry.destroy(guild_id, DestroyReasons.SETTINGS_RESET)
        payload = NotificationPayload(
            title=DiscordUIMessages.EMBED_SETTINGS_RESET,
            description=DiscordUIMessages.SETTINGS_RESET_DESCRIPTION,
        )
        return CommandOutcome.success(payload=payload, data=settings)

    def _music_status(self, guild_id: int) -> str:
        session = self._registry.get(guild_id)
        if session is None:
            return DiscordUIMessages.STATUS_IDLE
        return DiscordUIMessages.MUSIC_STATUS_VALUE.format(
            state=session.state.value.title(),
            queued=len(session.queue),
            volume=session.volume,
        )
