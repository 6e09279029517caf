"""Drives a session forward in response to engine lifecycle events."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.music.value_objects import TrackEndReason
from ...domain.shared.constants import DestroyReasons
from ...domain.shared.events import QueueEnded, TrackEnded, TrackErrored, get_event_bus
from ...domain.shared.exceptions import CollaboratorFailureError
from ...domain.shared.messages import LogTemplates
from ...utils.locks import GuildLocks

if TYPE_CHECKING:
    from ...domain.music.entities import GuildSession, QueueEntry
    from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class PlaybackCoordinator:
    """Promotes the next queue entry when a track ends or fails.

    ``finished`` honours track loop; ``stopped`` (a skip) and errors do not,
    so a failing or skipped entry is never replayed forever. When nothing is
    left a ``QueueEnded`` event is published and the session is destroyed.
    """

    def __init__(self, *, registry: SessionRegistry) -> None:
        self._registry = registry
        self._bus = get_event_bus()
        self._guild_locks = GuildLocks()
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self._bus.subscribe(TrackEnded, self._on_track_ended)
        self._bus.subscribe(TrackErrored, self._on_track_errored)
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._bus.unsubscribe(TrackEnded, self._on_track_ended)
        self._bus.unsubscribe(TrackErrored, self._on_track_errored)
        self._started = False

    async def play_entry(self, session: GuildSession, entry: QueueEntry, *, start_ms: int = 0) -> None:
        """Hand ``entry`` to the guild's player; the session must already point at it."""
        player = self._registry.player(session.guild_id)
        try:
            await player.play(entry, start_ms=start_ms)
        except CollaboratorFailureError:
            session.halt()
            raise
        except Exception as exc:
            session.halt()
            raise CollaboratorFailureError("audio_engine", str(exc)) from exc

    async def start_if_idle(self, session: GuildSession) -> QueueEntry | None:
        """Begin the queue head when nothing is playing; returns what started.

        Entries the engine refuses are reported and passed over. When every
        queued entry is refused the last refusal is raised.
        """
        if session.state.is_active:
            return None
        entry = session.start_next()
        if entry is None:
            return None
        await self._play_through(session, entry)
        return session.current

    async def _play_through(self, session: GuildSession, entry: QueueEntry) -> None:
        """Play ``entry``, moving past every entry the engine refuses.

        Raises the last refusal once the queue runs dry with nothing playing.
        """
        while True:
            try:
                await self.play_entry(session, entry)
                return
            except CollaboratorFailureError as exc:
                logger.warning(LogTemplates.PLAYBACK_ADVANCE_FAILED, session.guild_id, exc)
                upcoming = session.advance(honour_track_loop=False)
                await self._bus.publish(
                    TrackErrored(guild_id=session.guild_id, entry=entry, error=exc.message, refused=True)
                )
                if upcoming is None:
                    if session.state.is_active:
                        # Another command started playback while the refusal was reported.
                        return
                    raise
                entry = upcoming

    async def _on_track_ended(self, event: TrackEnded) -> None:
        logger.debug(
            LogTemplates.TRACK_ENDED,
            event.entry.title if event.entry else None,
            event.guild_id,
            event.reason.value,
        )
        if not event.reason.may_start_next:
            return
        await self._advance(
            event.guild_id, event.entry, honour_track_loop=event.reason is TrackEndReason.FINISHED
        )

    async def _on_track_errored(self, event: TrackErrored) -> None:
        if event.refused:
            return
        logger.warning(
            LogTemplates.TRACK_ERRORED,
            event.entry.title if event.entry else None,
            event.guild_id,
            event.error,
        )
        await self._advance(event.guild_id, event.entry, honour_track_loop=False)

    async def _advance(self, guild_id: int, ended: QueueEntry | None, *, honour_track_loop: bool) -> None:
        async with self._guild_locks.hold(guild_id):
            session = self._registry.get(guild_id)
            if session is None:
                return
            if ended is not None and session.current != ended:
                # Stale callback for an entry the session already moved past.
                return

            upcoming = session.advance(honour_track_loop=honour_track_loop)
            if upcoming is None:
                await self._finish_queue(session, ended)
                return
            try:
                await self._play_through(session, upcoming)
            except CollaboratorFailureError:
                await self._finish_queue(session, ended)

    async def _finish_queue(self, session: GuildSession, last: QueueEntry | None) -> None:
        logger.info(LogTemplates.QUEUE_ENDED, session.guild_id)
        await self._bus.publish(
            QueueEnded(
                guild_id=session.guild_id,
                text_channel_id=session.text_channel_id,
                last_entry=last,
            )
        )
        await self._registry.destroy(session.guild_id, DestroyReasons.QUEUE_ENDED)
