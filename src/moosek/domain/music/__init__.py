"""
Music Bounded Context

Domain logic for queue entries, queue ordering, and per-guild playback sessions.
"""

from moosek.domain.music.entities import GuildSession, QueueEntry
from moosek.domain.music.queue import QueueStats, TrackQueue
from moosek.domain.music.value_objects import (
    LoadType,
    LoopMode,
    PlaybackState,
    QueueFilter,
    QueueSort,
    SearchKind,
    SearchSource,
    ShuffleMode,
    TrackEndReason,
)

__all__ = [
    # Entities
    "QueueEntry",
    "GuildSession",
    # Queue
    "TrackQueue",
    "QueueStats",
    # Value Objects
    "PlaybackState",
    "LoopMode",
    "LoadType",
    "SearchSource",
    "SearchKind",
    "TrackEndReason",
    "QueueFilter",
    "QueueSort",
    "ShuffleMode",
]
