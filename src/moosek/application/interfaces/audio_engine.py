"""Port interfaces for the audio engine that resolves and streams tracks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from moosek.domain.music.entities import QueueEntry
from moosek.domain.music.value_objects import LoadType

if TYPE_CHECKING:
    from ...domain.music.value_objects import LoopMode, SearchSource


class LoadResult(BaseModel):
    """What a resolve call produced."""

    model_config = ConfigDict(frozen=True)

    load_type: LoadType
    tracks: list[QueueEntry] = Field(default_factory=list)
    playlist_name: str | None = None
    error: str | None = None

    @property
    def first(self) -> QueueEntry | None:
        return self.tracks[0] if self.tracks else None

    @classmethod
    def empty(cls) -> LoadResult:
        return cls(load_type=LoadType.EMPTY)

    @classmethod
    def failed(cls, error: str) -> LoadResult:
        return cls(load_type=LoadType.ERROR, error=error)


class Player(ABC):
    """A guild's connection to the engine.

    Lifecycle events (``TrackStarted``, ``TrackEnded``, ``TrackErrored``) are
    published on the domain event bus; callers never poll for them.
    """

    guild_id: int

    @abstractmethod
    async def play(self, entry: QueueEntry, *, start_ms: int = 0) -> None:
        """Start ``entry``; anything already playing ends with reason ``replaced``."""
        ...

    @abstractmethod
    async def pause(self) -> None:
        ...

    @abstractmethod
    async def resume(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop the current entry; it ends with reason ``stopped``."""
        ...

    @abstractmethod
    async def seek(self, position_ms: int) -> None:
        ...

    @abstractmethod
    async def set_volume(self, volume: int) -> None:
        """Apply a 0-1000 percent volume."""
        ...

    @abstractmethod
    async def set_loop(self, mode: LoopMode) -> None:
        ...

    @abstractmethod
    async def move_to(self, voice_channel_id: int) -> None:
        ...

    @property
    @abstractmethod
    def position_ms(self) -> int:
        ...

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        ...

    @abstractmethod
    async def destroy(self) -> None:
        """Release the voice connection. Must tolerate being called twice."""
        ...


class AudioEngine(ABC):
    """Resolves queries into entries and opens per-guild players."""

    @abstractmethod
    async def resolve(self, query: str, source: SearchSource) -> LoadResult:
        """Resolve a URL or search query.

        Resolution failures are reported as ``LoadType.ERROR`` rather than raised.
        """
        ...

    @abstractmethod
    async def search(self, query: str, source: SearchSource, limit: int) -> LoadResult:
        """Like ``resolve``, but a text query keeps up to ``limit`` results."""
        ...

    @abstractmethod
    async def create_connection(
        self,
        guild_id: int,
        voice_channel_id: int,
        text_channel_id: int,
        volume: int,
    ) -> Player:
        """Join voice and return a player.

        Raises:
            CollaboratorFailureError: The voice connection could not be made.
        """
        ...

    @property
    def is_available(self) -> bool:
        return True
