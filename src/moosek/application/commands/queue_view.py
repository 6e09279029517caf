"""
Read-only Commands

``/queue`` and ``/nowplaying`` wrap the query handlers and turn their
results into payloads. No permission check is needed for either.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...application.interfaces.notifier import NotificationPayload
from ...application.queries.get_queue import GetQueueHandler, GetQueueQuery, QueuePage
from ...application.queries.now_playing import NowPlayingHandler, NowPlayingInfo, NowPlayingQuery
from ...domain.music.value_objects import PlaybackState, QueueFilter, QueueSort
from ...domain.shared.constants import QueueConstants
from ...domain.shared.datetime_utils import format_duration_ms
from ...domain.shared.exceptions import UserInputError
from ...domain.shared.messages import DiscordUIMessages, EmojiConstants
from ...utils.reply import join_lines, progress_bar, truncate
from .base import CommandOutcome

if TYPE_CHECKING:
    from .base import CommandContext


def _entry_duration(entry) -> str:
    return DiscordUIMessages.LIVE if entry.is_live else entry.duration_formatted


def queue_page_payload(page: QueuePage) -> NotificationPayload:
    """Build the queue embed for one page; reused by the pagination view."""
    payload = NotificationPayload(title=DiscordUIMessages.EMBED_QUEUE)

    if page.current is not None:
        current = page.current
        payload = payload.with_field(
            DiscordUIMessages.QUEUE_NOW_PLAYING,
            f"**{truncate(current.title)}** by {current.author} [`{_entry_duration(current)}`]",
            inline=False,
        )

    if page.items:
        lines = [
            DiscordUIMessages.QUEUE_LINE.format(
                position=position,
                title=truncate(entry.title, 60),
                author=entry.author,
                duration=_entry_duration(entry),
                requester=entry.requester_id,
            )
            for position, entry in page.items
        ]
        payload = payload.with_field(DiscordUIMessages.QUEUE_UP_NEXT, join_lines(lines), inline=False)
    else:
        payload = payload.model_copy(update={"description": DiscordUIMessages.QUEUE_NOTHING_MATCHES})

    payload = payload.with_field(
        DiscordUIMessages.QUEUE_STATISTICS,
        DiscordUIMessages.QUEUE_STATS_VALUE.format(
            total=format_duration_ms(page.total_ms),
            count=page.queue_length,
            average=format_duration_ms(page.average_ms),
            loop=page.loop_mode.label,
            volume=page.volume,
        ),
        inline=False,
    )
    return payload.model_copy(
        update={
            "footer": DiscordUIMessages.QUEUE_FOOTER.format(
                page=page.page,
                total_pages=page.total_pages,
                count=page.matching,
                filter=page.query.queue_filter.value,
                sort=page.query.sort.value,
            )
        }
    )


def now_playing_info_payload(info: NowPlayingInfo) -> NotificationPayload:
    entry = info.entry
    state_emoji = EmojiConstants.PAUSE if info.state is PlaybackState.PAUSED else EmojiConstants.PLAY

    if entry.is_live:
        progress = f"{state_emoji} {DiscordUIMessages.LIVE}"
    else:
        progress = (
            f"{state_emoji} {progress_bar(info.progress)} "
            f"`{format_duration_ms(info.position_ms)} / {entry.duration_formatted}`"
        )

    payload = NotificationPayload(
        title=DiscordUIMessages.EMBED_NOW_PLAYING,
        description=DiscordUIMessages.NOW_PLAYING_LINE.format(title=entry.title, uri=entry.uri, author=entry.author),
        thumbnail_url=entry.thumbnail_url,
    )
    payload = payload.with_field(DiscordUIMessages.FIELD_PROGRESS, progress, inline=False)
    if entry.requester_id is not None:
        payload = payload.with_field(DiscordUIMessages.FIELD_REQUESTED_BY, f"<@{entry.requester_id}>")
    payload = payload.with_field(DiscordUIMessages.FIELD_VOLUME, f"{info.volume}%")
    payload = payload.with_field(DiscordUIMessages.FIELD_LOOP_MODE, f"{info.loop_mode.emoji} {info.loop_mode.label}")
    if info.up_next is not None:
        payload = payload.with_field(
            DiscordUIMessages.FIELD_NEXT_UP, f"**{truncate(info.up_next.title)}** by {info.up_next.author}", inline=False
        )
    return payload


class QueueViewHandler:
    def __init__(
        self,
        *,
        queue_query: GetQueueHandler,
        now_playing_query: NowPlayingHandler,
        page_size: int = QueueConstants.PAGE_SIZE,
    ) -> None:
        self._queue_query = queue_query
        self._now_playing_query = now_playing_query
        self._page_size = page_size

    async def queue(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        try:
            queue_filter = QueueFilter(args.get("filter") or QueueFilter.ALL.value)
            sort = QueueSort(args.get("sort") or QueueSort.ADDED.value)
        except ValueError as exc:
            raise UserInputError(str(exc)) from exc

        query = GetQueueQuery(
            guild_id=ctx.require_guild(),
            user_id=ctx.actor.user_id,
            page=args.get("page") or 1,
            queue_filter=queue_filter,
            sort=sort,
            page_size=self._page_size,
        )
        page = self._queue_query.handle(query)
        return CommandOutcome.success(payload=queue_page_payload(page), data=page)

    def page(self, query: GetQueueQuery) -> QueuePage:
        """Re-run a page lookup for an existing pagination view."""
        return self._queue_query.handle(query)

    async def now_playing(self, ctx: CommandContext, args: dict[str, Any]) -> CommandOutcome:
        info = self._now_playing_query.handle(NowPlayingQuery(guild_id=ctx.require_guild()))
        return CommandOutcome.success(payload=now_playing_info_payload(info), data=info)
