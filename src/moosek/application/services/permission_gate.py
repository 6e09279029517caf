"""Decides whether a member may control playback in a guild."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from ...domain.shared.exceptions import PermissionDeniedError
from ...domain.shared.messages import ErrorMessages
from ...domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.guild.entities import GuildSettings


class Actor(BaseModel):
    """The invoking member, reduced to what authorization needs."""

    model_config = ConfigDict(frozen=True)

    user_id: DiscordSnowflake
    display_name: str = ""
    is_administrator: bool = False
    can_manage_guild: bool = False
    role_ids: frozenset[int] = Field(default_factory=frozenset)
    voice_channel_id: DiscordSnowflake | None = None

    def has_role(self, role_id: int) -> bool:
        return role_id in self.role_ids


class PermissionGate:
    """Three-tier DJ check; the first matching rule decides.

    1. Administrators are always allowed.
    2. If the guild has a DJ role, holding it is required and sufficient;
       Manage Server alone does not qualify.
    3. Otherwise Manage Server is required.
    """

    def authorize(self, actor: Actor, settings: GuildSettings) -> bool:
        if actor.is_administrator:
            return True
        if settings.dj_role_id is not None:
            return actor.has_role(settings.dj_role_id)
        return actor.can_manage_guild

    def require(self, actor: Actor, settings: GuildSettings) -> None:
        if not self.authorize(actor, settings):
            raise PermissionDeniedError(ErrorMessages.DJ_REQUIRED, required="dj")

    def require_administrator(self, actor: Actor) -> None:
        if not actor.is_administrator:
            raise PermissionDeniedError(ErrorMessages.ADMIN_REQUIRED, required="administrator")
