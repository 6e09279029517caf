"""Aggregate figures across every live session."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from moosek.domain.shared.types import NonNegativeInt

if TYPE_CHECKING:
    from ..services.session_registry import SessionRegistry


class SystemStats(BaseModel):
    sessions: NonNegativeInt = 0
    playing: NonNegativeInt = 0
    paused: NonNegativeInt = 0
    queued_entries: NonNegativeInt = 0


class SystemStatsHandler:

    def __init__(self, *, registry: SessionRegistry) -> None:
        self._registry = registry

    def handle(self) -> SystemStats:
        sessions = self._registry.all()
        return SystemStats(
            sessions=len(sessions),
            playing=sum(1 for s in sessions if s.is_playing),
            paused=sum(1 for s in sessions if s.is_paused),
            queued_entries=sum(len(s.queue) for s in sessions),
        )
