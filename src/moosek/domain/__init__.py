"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, exceptions, messages and the event bus
- music/: Queue entries, the track queue, and guild playback sessions
- guild/: Persisted guild settings and session snapshots
"""

from moosek.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
