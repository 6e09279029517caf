"""Queue editing commands: clear, remove, move and shuffle."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...application.interfaces.notifier import NotificationPayload
from ...domain.music.value_objects import ShuffleMode
from ...domain.shared.constants import QueueConstants
from ...domain.shared.exceptions import UserInputError
from ...domain.shared.messages import DiscordUIMessages, ErrorMessages
from .base import CommandOutcome
from .support import SessionCommandSupport

if TYPE_CHECKING:
    from ..services.guild_settings import GuildSettingsService
    from ..services.permission_gate import PermissionGate
    from ..services.session_registry import SessionRegistry
    from .base import CommandContext


class QueueEditHandler(SessionCommandSupport):
    """Positions arrive 1-based from users and are validated against the live queue.

    Nothing awaits between validation and mutation, so no other command can
    change the queue in between.
    """

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        permission_gate: PermissionGate,
        guild_settings: GuildSettingsService,
        smart_shuffle_window: int = QueueConstants.SMART_SHUFFLE_WINDOW,
    ) -> None:
        super().__init__(registry=registry, permission_gate=permission_gate, guild_settings=guild_settings)
        self._smart_window = smart_shuffle_window

    async def clear(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        await self._require_dj(ctx)
        session = self._session(ctx)
        if not session.queue:
            raise UserInputError(ErrorMessages.QUEUE_ALREADY_EMPTY)

        cleared = session.queue.clear()
        return CommandOutcome.success(
            payload=NotificationPayload(
                title=DiscordUIMessages.EMBED_QUEUE_CLEARED,
                description=DiscordUIMessages.CLEARED_DESCRIPTION.format(count=cleared),
            ),
            data=cleared,
        )

    async def remove(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        await self._require_dj(ctx)
        session = self._session(ctx)
        position: int = args["position"]
        size = len(session.queue)
        if not 1 <= position <= size:
            raise UserInputError(ErrorMessages.INVALID_POSITION.format(size=size), field="position")

        removed = session.queue.remove(position - 1)
        return CommandOutcome.success(
            payload=NotificationPayload(
                title=DiscordUIMessages.EMBED_TRACK_REMOVED,
                description=DiscordUIMessages.REMOVED_DESCRIPTION.format(title=removed.title, position=position),
            ),
            data=removed,
        )

    async def move(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        await self._require_dj(ctx)
        session = self._session(ctx)
        src: int = args["from"]
        dst: int = args["to"]
        size = len(session.queue)
        if not 1 <= src <= size:
            raise UserInputError(ErrorMessages.INVALID_FROM_POSITION.format(size=size), field="from")
        if not 1 <= dst <= size:
            raise UserInputError(ErrorMessages.INVALID_TO_POSITION.format(size=size), field="to")
        if src == dst:
            raise UserInputError(ErrorMessages.SAME_POSITION)

        moved = session.queue.move(src - 1, dst - 1)
        return CommandOutcome.success(
            payload=NotificationPayload(
                title=DiscordUIMessages.EMBED_TRACK_MOVED,
                description=DiscordUIMessages.MOVED_DESCRIPTION.format(title=moved.title, src=src, dst=dst),
            ),
            data=moved,
        )

    async def shuffle(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        await self._require_dj(ctx)
        session = self._session(ctx)
        mode = ShuffleMode(args.get("type") or ShuffleMode.NORMAL.value)
        if not session.queue:
            raise UserInputError(ErrorMessages.QUEUE_EMPTY_SHUFFLE)

        if mode is ShuffleMode.SMART:
            session.queue.smart_shuffle(self._smart_window)
        else:
            session.queue.shuffle()

        return CommandOutcome.success(
            payload=NotificationPayload(
                title=DiscordUIMessages.EMBED_QUEUE_SHUFFLED,
                description=DiscordUIMessages.SHUFFLED_DESCRIPTION.format(
                    count=len(session.queue), mode=mode.value.title()
                ),
            )
        )
