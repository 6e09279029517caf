"""Routes a decoded command to its handler behind the cooldown and owner gates."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from ...domain.shared.exceptions import (
    CollaboratorFailureError,
    CollaboratorUnavailableError,
    CooldownActiveError,
    PermissionDeniedError,
    UserInputError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...utils.logging import CommandLogAdapter
from .base import CommandOutcome, OutcomeStatus

if TYPE_CHECKING:
    from ..services.cooldown_gate import CooldownGate
    from .base import CommandContext, CommandDefinition

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Single entry point for every command invocation.

    Steps run in order and the first terminal one wins: lookup, cooldown,
    owner check, handler. Whatever the handler raises is turned into exactly
    one ``CommandOutcome``; ``dispatch`` itself never raises.
    """

    def __init__(
        self,
        *,
        cooldown_gate: CooldownGate,
        owner_ids: Iterable[int] = (),
        default_cooldown_seconds: int = 3,
    ) -> None:
        self._cooldowns = cooldown_gate
        self._owner_ids = frozenset(owner_ids)
        self._default_cooldown = default_cooldown_seconds
        self._definitions: dict[str, CommandDefinition] = {}

    def register(self, definition: CommandDefinition) -> None:
        if definition.name in self._definitions:
            raise ValueError(f"Command already registered: {definition.name}")
        self._definitions[definition.name] = definition

    def register_all(self, definitions: Iterable[CommandDefinition]) -> None:
        for definition in definitions:
            self.register(definition)

    def get(self, name: str) -> CommandDefinition | None:
        return self._definitions.get(name)

    @property
    def definitions(self) -> list[CommandDefinition]:
        return sorted(self._definitions.values(), key=lambda d: d.name)

    def effective_cooldown(self, definition: CommandDefinition) -> int:
        if definition.cooldown_seconds is None:
            return self._default_cooldown
        return definition.cooldown_seconds

    async def dispatch(
        self,
        name: str,
        context: CommandContext,
        raw_args: dict[str, Any] | None = None,
    ) -> CommandOutcome | None:
        definition = self._definitions.get(name)
        if definition is None:
            logger.warning(LogTemplates.COMMAND_UNKNOWN, name)
            return None

        log = CommandLogAdapter(
            logger, command=name, user_id=context.actor.user_id, guild_id=context.guild_id
        )

        decision = self._cooldowns.check_and_stamp(
            name, context.actor.user_id, self.effective_cooldown(definition)
        )
        if not decision.allowed:
            log.debug(LogTemplates.COMMAND_COOLDOWN, name, decision.retry_after_seconds)
            return CommandOutcome.error(
                OutcomeStatus.COOLDOWN,
                ErrorMessages.COOLDOWN_ACTIVE.format(seconds=decision.retry_after_seconds, command=name),
            )

        if definition.owner_only and context.actor.user_id not in self._owner_ids:
            log.info(LogTemplates.COMMAND_OWNER_DENIED, name)
            return CommandOutcome.error(OutcomeStatus.OWNER_ONLY, ErrorMessages.OWNER_ONLY)

        try:
            args = definition.bind(raw_args)
            log.debug(LogTemplates.COMMAND_INVOKED, name)
            return await definition.handler(context, args)
        except UserInputError as exc:
            log.debug(LogTemplates.COMMAND_USER_ERROR, name, exc.message)
            return CommandOutcome.error(OutcomeStatus.USER_ERROR, exc.message)
        except PermissionDeniedError as exc:
            log.info(LogTemplates.COMMAND_PERMISSION_DENIED, name)
            return CommandOutcome.error(OutcomeStatus.PERMISSION_DENIED, exc.message)
        except CooldownActiveError as exc:
            log.debug(LogTemplates.COMMAND_COOLDOWN, name, exc.retry_after_seconds)
            return CommandOutcome.error(
                OutcomeStatus.COOLDOWN,
                ErrorMessages.COOLDOWN_ACTIVE.format(seconds=exc.retry_after_seconds, command=name),
            )
        except CollaboratorUnavailableError as exc:
            log.info(LogTemplates.COMMAND_UNAVAILABLE, name, exc.message)
            return CommandOutcome.error(OutcomeStatus.UNAVAILABLE, exc.message)
        except CollaboratorFailureError as exc:
            log.error(LogTemplates.COMMAND_COLLABORATOR_FAILED, exc.collaborator, name, exc.message)
            return CommandOutcome.error(OutcomeStatus.FAILURE, ErrorMessages.GENERIC_FAILURE)
        except Exception:
            log.exception(LogTemplates.COMMAND_FAILED, name)
            return CommandOutcome.error(OutcomeStatus.FAILURE, ErrorMessages.GENERIC_FAILURE)
