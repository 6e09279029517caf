"""
Play Command

Joins the caller's voice channel, resolves the query and queues the result.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from ...application.interfaces.notifier import NotificationPayload
from ...domain.music.value_objects import LoadType, SearchSource
from ...domain.shared.events import TrackAdded, get_event_bus
from ...domain.shared.exceptions import (
    CollaboratorFailureError,
    CollaboratorUnavailableError,
    UserInputError,
)
from ...domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from .base import CommandOutcome

if TYPE_CHECKING:
    from ...application.interfaces.audio_engine import AudioEngine
    from ...domain.music.entities import GuildSession, QueueEntry
    from ..services.guild_settings import GuildSettingsService
    from ..services.playback_coordinator import PlaybackCoordinator
    from ..services.session_registry import SessionRegistry
    from .base import CommandContext

logger = logging.getLogger(__name__)


class PlayHandler:
    """Handles ``/play``.

    The voice join happens before resolving, so a query that finds nothing
    still leaves a (possibly new) session behind. Capacity is checked after
    the resolve returns, against the queue as it is at that moment.
    """

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        audio_engine: AudioEngine,
        coordinator: PlaybackCoordinator,
        guild_settings: GuildSettingsService,
        default_source: SearchSource = SearchSource.YOUTUBE_MUSIC,
    ) -> None:
        self._registry = registry
        self._engine = audio_engine
        self._coordinator = coordinator
        self._guild_settings = guild_settings
        self._default_source = default_source
        self._bus = get_event_bus()

    def parse_source(self, raw: str | None) -> SearchSource:
        try:
            return SearchSource.parse(raw, self._default_source)
        except ValueError as exc:
            raise UserInputError(ErrorMessages.UNSUPPORTED_SOURCE.format(source=raw), field="source") from exc

    async def handle(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        ctx.require_guild()
        ctx.require_voice_channel()
        query: str = args["query"]
        source = self.parse_source(args.get("source"))

        await self._join(ctx)

        result = await self._engine.resolve(query, source)
        if result.load_type is LoadType.ERROR:
            raise CollaboratorFailureError(
                "audio_engine", result.error or ErrorMessages.LOAD_FAILED.format(query=query)
            )
        if result.load_type is LoadType.EMPTY or not result.tracks:
            raise UserInputError(ErrorMessages.NO_RESULTS, field="query")

        if result.load_type is LoadType.PLAYLIST:
            return await self._enqueue(ctx, result.tracks, playlist_name=result.playlist_name or "playlist")
        return await self._enqueue(ctx, result.tracks[:1])

    async def enqueue(
        self,
        ctx: CommandContext,
        entries: Sequence[QueueEntry],
        *,
        playlist_name: str | None = None,
    ) -> CommandOutcome:
        """Join the caller's voice channel and queue entries that were resolved earlier.

        With ``playlist_name`` the entries are reported as one playlist;
        otherwise exactly one entry is expected.
        """
        ctx.require_guild()
        ctx.require_voice_channel()
        if not entries:
            raise UserInputError(ErrorMessages.NO_RESULTS, field="query")
        await self._join(ctx)
        return await self._enqueue(ctx, entries, playlist_name=playlist_name)

    async def _join(self, ctx: CommandContext) -> GuildSession:
        voice_channel_id = ctx.require_voice_channel()
        text_channel_id = ctx.channel_id or voice_channel_id
        return await self._registry.get_or_create(ctx.require_guild(), voice_channel_id, text_channel_id)

    async def _enqueue(
        self,
        ctx: CommandContext,
        candidates: Sequence[QueueEntry],
        *,
        playlist_name: str | None = None,
    ) -> CommandOutcome:
        guild_id = ctx.require_guild()
        settings = await self._guild_settings.get(guild_id)

        # The session may have been destroyed while we were awaiting.
        session = self._registry.get(guild_id)
        if session is None:
            raise CollaboratorUnavailableError(ErrorMessages.NOTHING_PLAYING, collaborator="session")

        is_playlist = playlist_name is not None
        if not is_playlist:
            candidates = candidates[:1]
        entries = [entry.with_requester(ctx.actor.user_id) for entry in candidates]

        capacity = settings.max_queue_size - len(session.queue)
        if capacity <= 0:
            raise UserInputError(ErrorMessages.QUEUE_FULL.format(limit=settings.max_queue_size))
        accepted = entries[:capacity]
        if len(accepted) < len(entries):
            logger.info(LogTemplates.QUEUE_TRUNCATED, len(accepted), guild_id, settings.max_queue_size)

        first_position = len(session.queue)
        wait_ms = self._remaining_current_ms(session) + session.queue.wait_before(first_position)
        queue_length = session.queue.extend(accepted)
        logger.info(LogTemplates.TRACKS_ENQUEUED, len(accepted), guild_id, queue_length)

        started = None
        if settings.auto_play:
            started = await self._coordinator.start_if_idle(session)

        if is_playlist:
            return CommandOutcome.success(payload=self._playlist_payload(playlist_name, accepted, len(entries)))

        if started is None:
            await self._bus.publish(
                TrackAdded(
                    guild_id=guild_id,
                    entry=accepted[0],
                    position=first_position + 1,
                    queue_length=len(session.queue),
                    estimated_wait_ms=wait_ms,
                )
            )
        return CommandOutcome.success(DiscordUIMessages.TRACK_ADDED, data=accepted[0])

    def _remaining_current_ms(self, session: GuildSession) -> int:
        current = session.current
        if current is None or current.is_live:
            return 0
        try:
            position = self._registry.player(session.guild_id).position_ms
        except CollaboratorUnavailableError:
            position = 0
        return max(0, current.duration_ms - position)

    @staticmethod
    def _playlist_payload(name: str, accepted: list[QueueEntry], total: int) -> NotificationPayload:
        payload = NotificationPayload(
            title=DiscordUIMessages.EMBED_PLAYLIST_ADDED,
            description=DiscordUIMessages.PLAYLIST_ADDED_DESCRIPTION.format(
                count=len(accepted), name=name
            ),
            thumbnail_url=accepted[0].thumbnail_url if accepted else None,
        )
        if len(accepted) < total:
            payload = payload.model_copy(
                update={"footer": DiscordUIMessages.PLAYLIST_TRUNCATED_NOTE.format(count=len(accepted), total=total)}
            )
        return payload
