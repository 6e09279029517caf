"""Discord UI views and components."""

from __future__ import annotations

from moosek.infrastructure.discord.views.base_view import InvokerOnlyView
from moosek.infrastructure.discord.views.queue_view import QueuePaginationView
from moosek.infrastructure.discord.views.search_view import SearchResultsView

__all__ = [
    "InvokerOnlyView",
    "QueuePaginationView",
    "SearchResultsView",
]
