"""
Search Command

Resolves a query into a short list of candidates the caller can pick from.
Nothing is queued until the caller acts on the results.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from ...application.interfaces.notifier import NotificationPayload
from ...domain.music.entities import QueueEntry
from ...domain.music.value_objects import LoadType, SearchKind, SearchSource
from ...domain.shared.datetime_utils import format_duration_ms
from ...domain.shared.exceptions import CollaboratorFailureError, UserInputError
from ...domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake
from ...utils.reply import join_lines, truncate
from .base import CommandOutcome

if TYPE_CHECKING:
    from ...application.interfaces.audio_engine import AudioEngine
    from .base import CommandContext
    from .play import PlayHandler

logger = logging.getLogger(__name__)


class SearchResults(BaseModel):
    """One /search reply's candidates, kept by the view until it times out."""

    model_config = ConfigDict(frozen=True)

    query: str
    source: SearchSource
    kind: SearchKind
    requester_id: DiscordSnowflake
    tracks: list[QueueEntry]
    playlist_name: str | None = None

    @property
    def is_playlist(self) -> bool:
        return self.playlist_name is not None

    @property
    def total_duration_ms(self) -> int:
        return sum(entry.duration_ms for entry in self.tracks if not entry.is_live)

    @property
    def batch_name(self) -> str:
        """What a whole-batch enqueue is announced as."""
        return self.playlist_name or DiscordUIMessages.SEARCH_RESULTS_NAME.format(query=self.query)


class SearchHandler:
    """Handles ``/search`` and the actions offered on its results.

    Enqueueing goes through the play handler, so the capacity limit,
    auto-play and track-added notifications behave exactly as for ``/play``.
    """

    def __init__(self, *, audio_engine: AudioEngine, play: PlayHandler) -> None:
        self._engine = audio_engine
        self._play = play

    async def search(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        ctx.require_guild()
        ctx.require_voice_channel()
        query: str = args["query"]
        source = self._play.parse_source(args.get("platform"))
        kind = SearchKind(args.get("type") or SearchKind.ALL.value)
        limit: int = args["limit"]

        result = await self._engine.search(query, source, limit)
        if result.load_type is LoadType.ERROR:
            raise CollaboratorFailureError(
                "audio_engine", result.error or ErrorMessages.LOAD_FAILED.format(query=query)
            )
        if result.load_type is LoadType.EMPTY or not result.tracks:
            raise UserInputError(ErrorMessages.NO_RESULTS, field="query")
        if not kind.accepts(result.load_type):
            raise UserInputError(ErrorMessages.SEARCH_KIND_MISMATCH.format(kind=kind.value), field="type")

        is_playlist = result.load_type is LoadType.PLAYLIST
        results = SearchResults(
            query=query,
            source=source,
            kind=kind,
            requester_id=ctx.actor.user_id,
            tracks=result.tracks if is_playlist else result.tracks[:limit],
            playlist_name=(result.playlist_name or "playlist") if is_playlist else None,
        )
        logger.info(LogTemplates.SEARCH_COMPLETED, query, source.value, kind.value, len(results.tracks))
        return CommandOutcome.success(payload=search_results_payload(results), data=results)

    async def enqueue_one(self, ctx: CommandContext, results: SearchResults, index: int) -> CommandOutcome:
        if not 0 <= index < len(results.tracks):
            raise UserInputError(ErrorMessages.SEARCH_SELECTION_INVALID)
        return await self._play.enqueue(ctx, [results.tracks[index]])

    async def enqueue_all(self, ctx: CommandContext, results: SearchResults, *, shuffle: bool = False) -> CommandOutcome:
        entries = list(results.tracks)
        if shuffle:
            random.shuffle(entries)
        return await self._play.enqueue(ctx, entries, playlist_name=results.batch_name)


def search_results_payload(results: SearchResults) -> NotificationPayload:
    if results.is_playlist:
        return (
            NotificationPayload(
                title=DiscordUIMessages.EMBED_PLAYLIST_FOUND,
                description=f"**{results.playlist_name}**",
                thumbnail_url=results.tracks[0].thumbnail_url,
            )
            .with_field(DiscordUIMessages.FIELD_TRACKS, str(len(results.tracks)))
            .with_field(DiscordUIMessages.FIELD_DURATION, format_duration_ms(results.total_duration_ms))
        )

    lines = [
        DiscordUIMessages.SEARCH_RESULT_LINE.format(
            index=index,
            title=truncate(entry.title, 60),
            uri=entry.uri,
            author=entry.author,
            duration=entry.duration_formatted,
        )
        for index, entry in enumerate(results.tracks, start=1)
    ]
    return (
        NotificationPayload(
            title=DiscordUIMessages.EMBED_SEARCH_RESULTS,
            description=DiscordUIMessages.SEARCH_RESULTS_DESCRIPTION.format(
                count=len(results.tracks), query=results.query
            ),
            footer=DiscordUIMessages.SEARCH_FOOTER,
        )
        .with_field(
            DiscordUIMessages.FIELD_SEARCH_FILTERS,
            DiscordUIMessages.SEARCH_FILTERS_VALUE.format(source=results.source.value, kind=results.kind.value),
            inline=False,
        )
        .with_field(DiscordUIMessages.FIELD_RESULTS, join_lines(lines), inline=False)
    )
