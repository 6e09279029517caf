"""Shared command plumbing: option specs, invocation context, outcomes, definitions."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from moosek.application.interfaces.notifier import NotificationPayload
from moosek.application.services.permission_gate import Actor
from moosek.domain.shared.exceptions import UserInputError
from moosek.domain.shared.messages import ErrorMessages
from moosek.domain.shared.types import CommandNameStr, CooldownSeconds, DiscordSnowflake


class OptionKind(Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    USER = "user"
    ROLE = "role"
    CHANNEL = "channel"


class OptionSpec(BaseModel):
    """One typed argument of a command."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: OptionKind
    description: str = ""
    required: bool = False
    choices: tuple[str, ...] | None = None
    min_value: int | None = None
    max_value: int | None = None
    default: Any = None

    def coerce(self, raw: Any) -> Any:
        """Validate and normalise a raw transport value."""
        if raw is None:
            if self.required:
                raise UserInputError(f"❌ Missing required option `{self.name}`.", field=self.name)
            return self.default

        if self.kind in (OptionKind.INTEGER, OptionKind.USER, OptionKind.ROLE, OptionKind.CHANNEL):
            if isinstance(raw, bool) or not isinstance(raw, int):
                try:
                    raw = int(raw)
                except (TypeError, ValueError) as exc:
                    raise UserInputError(f"❌ `{self.name}` must be a whole number.", field=self.name) from exc
        elif self.kind is OptionKind.BOOLEAN:
            raw = bool(raw)
        else:
            raw = str(raw).strip()

        if self.min_value is not None and raw < self.min_value:
            raise UserInputError(f"❌ `{self.name}` must be at least {self.min_value}.", field=self.name)
        if self.max_value is not None and raw > self.max_value:
            raise UserInputError(f"❌ `{self.name}` must be at most {self.max_value}.", field=self.name)
        if self.choices is not None and raw not in self.choices:
            allowed = ", ".join(self.choices)
            raise UserInputError(f"❌ `{self.name}` must be one of: {allowed}.", field=self.name)
        return raw


class CommandContext(BaseModel):
    """Everything a handler may know about the invocation besides its arguments."""

    model_config = ConfigDict(frozen=True)

    command_name: str
    actor: Actor
    guild_id: DiscordSnowflake | None = None
    channel_id: DiscordSnowflake | None = None

    def require_guild(self) -> int:
        if self.guild_id is None:
            raise UserInputError(ErrorMessages.SERVER_ONLY)
        return self.guild_id

    def require_voice_channel(self) -> int:
        if self.actor.voice_channel_id is None:
            raise UserInputError(ErrorMessages.NOT_IN_VOICE)
        return self.actor.voice_channel_id


class OutcomeStatus(Enum):
    SUCCESS = "success"
    USER_ERROR = "user_error"
    PERMISSION_DENIED = "permission_denied"
    COOLDOWN = "cooldown"
    OWNER_ONLY = "owner_only"
    UNAVAILABLE = "unavailable"
    FAILURE = "failure"


class CommandOutcome(BaseModel):
    """The single reply produced for one invocation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: OutcomeStatus
    message: str | None = None
    payload: NotificationPayload | None = None
    ephemeral: bool = False
    data: Any = None

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @classmethod
    def success(
        cls,
        message: str | None = None,
        *,
        payload: NotificationPayload | None = None,
        data: Any = None,
        ephemeral: bool = False,
    ) -> CommandOutcome:
        return cls(status=OutcomeStatus.SUCCESS, message=message, payload=payload, data=data, ephemeral=ephemeral)

    @classmethod
    def error(cls, status: OutcomeStatus, message: str) -> CommandOutcome:
        return cls(status=status, message=message, ephemeral=True)


CommandHandler = Callable[[CommandContext, dict[str, Any]], Awaitable[CommandOutcome]]


class CommandDefinition(BaseModel):
    """Name, options and policy for one command, plus the coroutine that runs it.

    ``cooldown_seconds=None`` means "use the configured default"; ``0``
    disables the cooldown.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: CommandNameStr
    description: str
    handler: CommandHandler
    options: tuple[OptionSpec, ...] = Field(default_factory=tuple)
    cooldown_seconds: CooldownSeconds | None = None
    owner_only: bool = False
    category: str = "general"

    def bind(self, raw_args: dict[str, Any] | None) -> dict[str, Any]:
        raw_args = raw_args or {}
        return {option.name: option.coerce(raw_args.get(option.name)) for option in self.options}
