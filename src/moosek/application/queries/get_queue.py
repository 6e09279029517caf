"""Query for one page of a guild's queue, filtered and sorted for display."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from moosek.domain.music.entities import QueueEntry
from moosek.domain.music.value_objects import LoopMode, QueueFilter, QueueSort
from moosek.domain.shared.constants import QueueConstants
from moosek.domain.shared.exceptions import CollaboratorUnavailableError, UserInputError
from moosek.domain.shared.messages import ErrorMessages
from moosek.domain.shared.types import DiscordSnowflake, NonNegativeInt, PageSize, PositiveInt

if TYPE_CHECKING:
    from ..services.session_registry import SessionRegistry


class GetQueueQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    user_id: DiscordSnowflake
    page: PositiveInt = 1
    queue_filter: QueueFilter = QueueFilter.ALL
    sort: QueueSort = QueueSort.ADDED
    page_size: PageSize = QueueConstants.PAGE_SIZE

    def for_page(self, page: int) -> GetQueueQuery:
        return self.model_copy(update={"page": page})


class QueuePage(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: GetQueueQuery
    items: list[tuple[int, QueueEntry]] = Field(default_factory=list)
    matching: NonNegativeInt = 0
    total_pages: PositiveInt = 1
    current: QueueEntry | None = None
    position_ms: NonNegativeInt = 0
    queue_length: NonNegativeInt = 0
    total_ms: NonNegativeInt = 0
    average_ms: NonNegativeInt = 0
    loop_mode: LoopMode = LoopMode.NONE
    volume: NonNegativeInt = 0

    @property
    def page(self) -> int:
        return self.query.page

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


class GetQueueHandler:

    def __init__(self, *, registry: SessionRegistry) -> None:
        self._registry = registry

    def handle(self, query: GetQueueQuery) -> QueuePage:
        session = self._registry.get(query.guild_id)
        if session is None or not session.has_tracks:
            raise CollaboratorUnavailableError(ErrorMessages.NOTHING_PLAYING, collaborator="session")

        pairs = session.queue.view(query.queue_filter, query.sort, user_id=query.user_id)
        total_pages = max(1, math.ceil(len(pairs) / query.page_size))
        if query.page > total_pages:
            raise UserInputError(
                ErrorMessages.PAGE_OUT_OF_RANGE.format(page=query.page, total_pages=total_pages),
                field="page",
            )

        start = (query.page - 1) * query.page_size
        stats = session.queue.stats()

        position_ms = 0
        remaining_current = 0
        if session.current is not None:
            try:
                position_ms = self._registry.player(query.guild_id).position_ms
            except CollaboratorUnavailableError:
                position_ms = 0
            if not session.current.is_live:
                remaining_current = max(0, session.current.duration_ms - position_ms)

        return QueuePage(
            query=query,
            items=pairs[start : start + query.page_size],
            matching=len(pairs),
            total_pages=total_pages,
            current=session.current,
            position_ms=position_ms,
            queue_length=stats.count,
            total_ms=stats.total_ms + remaining_current,
            average_ms=stats.average_ms,
            loop_mode=session.loop_mode,
            volume=session.volume,
        )
