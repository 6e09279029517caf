"""
Application Queries (CQRS Read Side)

Query objects and handlers for read operations.
Queries do not modify state, only retrieve data.
"""

from moosek.application.queries.get_queue import GetQueueHandler, GetQueueQuery, QueuePage
from moosek.application.queries.now_playing import NowPlayingHandler, NowPlayingInfo, NowPlayingQuery
from moosek.application.queries.system_stats import SystemStats, SystemStatsHandler

__all__ = [
    "GetQueueQuery",
    "GetQueueHandler",
    "QueuePage",
    "NowPlayingQuery",
    "NowPlayingHandler",
    "NowPlayingInfo",
    "SystemStats",
    "SystemStatsHandler",
]
