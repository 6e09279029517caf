"""Saves live sessions on shutdown and hands them back on the next start."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.guild.entities import SessionSnapshot
from ...domain.shared.exceptions import CollaboratorUnavailableError
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.guild.repository import SessionSnapshotRepository
    from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class SessionSnapshotService:
    def __init__(self, *, registry: SessionRegistry, repository: SessionSnapshotRepository) -> None:
        self._registry = registry
        self._repository = repository

    def capture(self) -> list[SessionSnapshot]:
        snapshots: list[SessionSnapshot] = []
        for session in self._registry.all():
            if not session.has_tracks:
                continue
            try:
                position = self._registry.player(session.guild_id).position_ms
            except CollaboratorUnavailableError:
                position = 0
            snapshots.append(SessionSnapshot.capture(session, position))
        return snapshots

    async def save_all(self) -> int:
        snapshots = self.capture()
        saved = await self._repository.save_all(snapshots)
        logger.info(LogTemplates.SNAPSHOTS_SAVED, saved)
        return saved

    async def load_pending(self) -> list[SessionSnapshot]:
        """Return snapshots left by the previous run and forget them."""
        snapshots = await self._repository.load_all()
        if snapshots:
            await self._repository.clear()
            logger.info(LogTemplates.SNAPSHOTS_LOADED, len(snapshots))
        return snapshots
