"""Transport controls: skip, pause, resume, stop, seek, volume and loop."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...application.interfaces.notifier import NotificationPayload
from ...domain.music.value_objects import LoopMode, PlaybackState
from ...domain.shared.constants import DestroyReasons, VolumeConstants
from ...domain.shared.datetime_utils import format_duration_ms
from ...domain.shared.exceptions import CollaboratorUnavailableError, UserInputError
from ...domain.shared.messages import DiscordUIMessages, ErrorMessages
from .base import CommandOutcome
from .support import SessionCommandSupport

if TYPE_CHECKING:
    from ..services.guild_settings import GuildSettingsService
    from ..services.permission_gate import PermissionGate
    from ..services.playback_coordinator import PlaybackCoordinator
    from ..services.session_registry import SessionRegistry
    from .base import CommandContext


class PlaybackControlHandler(SessionCommandSupport):
    """All of these need DJ authority (see ``PermissionGate``)."""

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        permission_gate: PermissionGate,
        guild_settings: GuildSettingsService,
        coordinator: PlaybackCoordinator,
        max_volume: int = VolumeConstants.MAX_VOLUME,
    ) -> None:
        super().__init__(registry=registry, permission_gate=permission_gate, guild_settings=guild_settings)
        self._coordinator = coordinator
        self._max_volume = max_volume

    async def skip(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        await self._require_dj(ctx)
        session = self._playing_session(ctx)
        amount: int = args.get("amount") or 1

        if amount > 1 and len(session.queue) < amount - 1:
            raise UserInputError(ErrorMessages.NOT_ENOUGH_TO_SKIP.format(amount=amount), field="amount")

        skipped = [session.current, *session.queue.drop_front(amount - 1)]
        up_next = session.queue.peek()

        # The player reports the stop as TrackEnded(stopped); the coordinator promotes the next entry.
        await self._player(session).stop()

        if amount == 1:
            description = DiscordUIMessages.SKIPPED_ONE.format(title=skipped[0].title)
        else:
            description = DiscordUIMessages.SKIPPED_MANY.format(count=len(skipped))
        payload = NotificationPayload(title=DiscordUIMessages.EMBED_TRACK_SKIPPED, description=description)
        if amount > 1:
            listing = "\n".join(f"{i}. {entry.title}" for i, entry in enumerate(skipped, start=1))
            payload = payload.with_field(DiscordUIMessages.FIELD_SKIPPED_TRACKS, listing[:1024], inline=False)
        if up_next is not None:
            payload = payload.with_field(DiscordUIMessages.FIELD_NEXT_UP, f"**{up_next.title}** by {up_next.author}", inline=False)
        return CommandOutcome.success(payload=payload, data=skipped)

    async def pause(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        await self._require_dj(ctx)
        session = self._playing_session(ctx)
        if session.state is PlaybackState.PAUSED:
            raise UserInputError(ErrorMessages.ALREADY_PAUSED)

        await self._player(session).pause()
        session.pause()
        return CommandOutcome.success(
            payload=NotificationPayload(
                title=DiscordUIMessages.EMBED_PAUSED, description=f"**{session.current.title}**"
            )
        )

    async def resume(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        await self._require_dj(ctx)
        session = self._session(ctx)

        if session.state is PlaybackState.PAUSED:
            await self._player(session).resume()
            session.resume()
            entry = session.current
        elif session.state is PlaybackState.STOPPED and session.queue:
            # Queued while auto-play was off.
            entry = await self._coordinator.start_if_idle(session)
        else:
            raise UserInputError(ErrorMessages.NOT_PAUSED)

        title = entry.title if entry is not None else ""
        return CommandOutcome.success(
            payload=NotificationPayload(title=DiscordUIMessages.EMBED_RESUMED, description=f"**{title}**")
        )

    async def stop(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        await self._require_dj(ctx)
        session = self._session(ctx)
        await self._registry.destroy(session.guild_id, DestroyReasons.STOPPED)
        return CommandOutcome.success(
            payload=NotificationPayload(
                title=DiscordUIMessages.EMBED_STOPPED, description=DiscordUIMessages.STOPPED_DESCRIPTION
            )
        )

    async def seek(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        await self._require_dj(ctx)
        session = self._playing_session(ctx)
        entry = session.current
        position_ms = int(args["position"]) * 1000

        if entry.is_live or not entry.is_seekable:
            raise UserInputError(ErrorMessages.SEEK_LIVE)
        if position_ms > entry.duration_ms:
            raise UserInputError(
                ErrorMessages.SEEK_BEYOND_DURATION.format(seconds=entry.duration_ms // 1000), field="position"
            )

        await self._player(session).seek(position_ms)
        return CommandOutcome.success(
            payload=NotificationPayload(
                title=DiscordUIMessages.EMBED_SEEKED,
                description=DiscordUIMessages.SEEKED_DESCRIPTION.format(
                    position=format_duration_ms(position_ms), title=entry.title
                ),
            )
        )

    async def volume(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        await self._require_dj(ctx)
        session = self._session(ctx)
        level = int(args["level"])
        if not VolumeConstants.MIN_VOLUME <= level <= self._max_volume:
            raise UserInputError(ErrorMessages.VOLUME_OUT_OF_RANGE.format(max_volume=self._max_volume))

        await self._player(session).set_volume(level)
        session.set_volume(level)
        return CommandOutcome.success(
            payload=NotificationPayload(
                title=DiscordUIMessages.EMBED_VOLUME,
                description=DiscordUIMessages.VOLUME_DESCRIPTION.format(volume=level),
            )
        )

    async def loop(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        await self._require_dj(ctx)
        session = self._session(ctx)
        try:
            mode = LoopMode(args["mode"])
        except ValueError as exc:
            raise UserInputError(ErrorMessages.UNKNOWN_LOOP_MODE.format(mode=args["mode"]), field="mode") from exc

        if session.current is None and not session.queue:
            raise CollaboratorUnavailableError(ErrorMessages.NOTHING_PLAYING, collaborator="session")

        await self._player(session).set_loop(mode)
        session.set_loop(mode)
        return CommandOutcome.success(
            payload=NotificationPayload(
                title=DiscordUIMessages.EMBED_LOOP,
                description=DiscordUIMessages.LOOP_DESCRIPTION.format(emoji=mode.emoji, mode=mode.label),
            )
        )
