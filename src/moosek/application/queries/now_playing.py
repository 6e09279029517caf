"""Query for the entry currently playing in a guild."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from moosek.domain.music.entities import QueueEntry
from moosek.domain.music.value_objects import LoopMode, PlaybackState
from moosek.domain.shared.exceptions import CollaboratorUnavailableError
from moosek.domain.shared.messages import ErrorMessages
from moosek.domain.shared.types import DiscordSnowflake, NonNegativeInt

if TYPE_CHECKING:
    from ..services.session_registry import SessionRegistry


class NowPlayingQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake


class NowPlayingInfo(BaseModel):
    entry: QueueEntry
    position_ms: NonNegativeInt = 0
    state: PlaybackState
    loop_mode: LoopMode
    volume: NonNegativeInt
    up_next: QueueEntry | None = None
    queue_length: NonNegativeInt = 0

    @property
    def progress(self) -> float:
        if self.entry.is_live or self.entry.duration_ms <= 0:
            return 0.0
        return min(1.0, self.position_ms / self.entry.duration_ms)


class NowPlayingHandler:

    def __init__(self, *, registry: SessionRegistry) -> None:
        self._registry = registry

    def handle(self, query: NowPlayingQuery) -> NowPlayingInfo:
        session = self._registry.get(query.guild_id)
        if session is None:
            raise CollaboratorUnavailableError(ErrorMessages.NOTHING_PLAYING, collaborator="session")
        if session.current is None:
            raise CollaboratorUnavailableError(ErrorMessages.NO_CURRENT_TRACK, collaborator="session")

        player = self._registry.player(query.guild_id)
        return NowPlayingInfo(
            entry=session.current,
            position_ms=max(0, player.position_ms),
            state=session.state,
            loop_mode=session.loop_mode,
            volume=session.volume,
            up_next=session.queue.peek(),
            queue_length=len(session.queue),
        )
