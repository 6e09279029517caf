"""Lookups shared by handlers that act on an existing session."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...domain.shared.exceptions import CollaboratorUnavailableError
from ...domain.shared.messages import ErrorMessages

if TYPE_CHECKING:
    from ...application.interfaces.audio_engine import Player
    from ...domain.music.entities import GuildSession
    from ..services.guild_settings import GuildSettingsService
    from ..services.permission_gate import PermissionGate
    from ..services.session_registry import SessionRegistry
    from .base import CommandContext


class SessionCommandSupport:
    """Base for handlers that borrow a guild's session for one invocation.

    Handlers never keep a session past the call that fetched it.
    """

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        permission_gate: PermissionGate,
        guild_settings: GuildSettingsService,
    ) -> None:
        self._registry = registry
        self._permissions = permission_gate
        self._guild_settings = guild_settings

    def _session(self, ctx: CommandContext) -> GuildSession:
        return self._registry.require(ctx.require_guild())

    def _playing_session(self, ctx: CommandContext) -> GuildSession:
        session = self._session(ctx)
        if session.current is None:
            raise CollaboratorUnavailableError(ErrorMessages.NO_CURRENT_TRACK, collaborator="session")
        return session

    def _player(self, session: GuildSession) -> Player:
        return self._registry.player(session.guild_id)

    async def _require_dj(self, ctx: CommandContext) -> None:
        settings = await self._guild_settings.get(ctx.require_guild())
        self._permissions.require(ctx.actor, settings)
