"""Owns the guild -> session map; the only place sessions are created or destroyed."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.music.entities import GuildSession
from ...domain.shared.constants import DestroyReasons
from ...domain.shared.events import SessionCreated, SessionDestroyed, get_event_bus
from ...domain.shared.exceptions import (
    CollaboratorFailureError,
    CollaboratorUnavailableError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...utils.locks import GuildLocks

if TYPE_CHECKING:
    from ...application.interfaces.audio_engine import AudioEngine, Player

logger = logging.getLogger(__name__)


class SessionRegistry:
    """In-memory registry of live guild sessions and their players.

    Creation is single-flight per guild: concurrent ``get_or_create`` calls
    for the same guild serialize on a per-guild lock, so the second caller
    sees the session the first one registered.
    """

    def __init__(self, *, audio_engine: AudioEngine, default_volume: int) -> None:
        self._engine = audio_engine
        self._default_volume = default_volume
        self._sessions: dict[int, GuildSession] = {}
        self._players: dict[int, Player] = {}
        self._creation_locks = GuildLocks()
        self._bus = get_event_bus()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, guild_id: int) -> bool:
        return guild_id in self._sessions

    def get(self, guild_id: int) -> GuildSession | None:
        return self._sessions.get(guild_id)

    def require(self, guild_id: int) -> GuildSession:
        """Like ``get`` but raises when the guild has no session."""
        session = self._sessions.get(guild_id)
        if session is None:
            raise CollaboratorUnavailableError(ErrorMessages.NOTHING_PLAYING, collaborator="session")
        return session

    def player(self, guild_id: int) -> Player:
        player = self._players.get(guild_id)
        if player is None:
            raise CollaboratorUnavailableError(ErrorMessages.NOTHING_PLAYING, collaborator="player")
        return player

    def all(self) -> list[GuildSession]:
        return list(self._sessions.values())

    async def get_or_create(
        self, guild_id: int, voice_channel_id: int, text_channel_id: int
    ) -> GuildSession:
        existing = self._sessions.get(guild_id)
        if existing is not None:
            await self._refresh_channels(existing, voice_channel_id, text_channel_id)
            return existing

        if not self._engine.is_available:
            raise CollaboratorUnavailableError(ErrorMessages.MUSIC_UNAVAILABLE)

        async with self._creation_locks.hold(guild_id):
            existing = self._sessions.get(guild_id)
            if existing is not None:
                await self._refresh_channels(existing, voice_channel_id, text_channel_id)
                return existing

            try:
                player = await self._engine.create_connection(
                    guild_id, voice_channel_id, text_channel_id, self._default_volume
                )
            except CollaboratorFailureError as exc:
                logger.warning(LogTemplates.SESSION_CONNECT_FAILED, guild_id, exc)
                raise
            except Exception as exc:
                logger.warning(LogTemplates.SESSION_CONNECT_FAILED, guild_id, exc)
                raise CollaboratorFailureError(
                    "audio_engine",
                    ErrorMessages.VOICE_CONNECT_FAILED.format(channel_id=voice_channel_id),
                ) from exc

            session = GuildSession(
                guild_id=guild_id,
                voice_channel_id=voice_channel_id,
                text_channel_id=text_channel_id,
                volume=self._default_volume,
            )
            self._sessions[guild_id] = session
            self._players[guild_id] = player

        logger.info(LogTemplates.SESSION_CREATED, guild_id, voice_channel_id, text_channel_id)
        await self._bus.publish(
            SessionCreated(
                guild_id=guild_id,
                voice_channel_id=voice_channel_id,
                text_channel_id=text_channel_id,
            )
        )
        return session

    async def _refresh_channels(self, session: GuildSession, voice_channel_id: int, text_channel_id: int) -> None:
        moved = voice_channel_id != session.voice_channel_id
        if not session.update_channels(voice_channel_id, text_channel_id):
            return
        logger.debug(LogTemplates.SESSION_CHANNELS_UPDATED, session.guild_id, voice_channel_id, text_channel_id)
        player = self._players.get(session.guild_id)
        if moved and player is not None:
            await player.move_to(voice_channel_id)

    async def destroy(self, guild_id: int, reason: str = DestroyReasons.STOPPED) -> bool:
        """Stop and forget a guild's session. Unknown guilds are a no-op (returns False)."""
        session = self._sessions.pop(guild_id, None)
        player = self._players.pop(guild_id, None)
        if session is None:
            return False

        session.stop()
        if player is not None:
            try:
                await player.destroy()
            except Exception as exc:
                logger.warning(LogTemplates.SESSION_PLAYER_DESTROY_FAILED, guild_id, exc)

        logger.info(LogTemplates.SESSION_DESTROYED, guild_id, reason)
        await self._bus.publish(
            SessionDestroyed(guild_id=guild_id, text_channel_id=session.text_channel_id, reason=reason)
        )
        return True

    async def destroy_all(self, reason: str = DestroyReasons.SHUTDOWN) -> int:
        destroyed = 0
        for guild_id in list(self._sessions):
            if await self.destroy(guild_id, reason):
                destroyed += 1
        return destroyed
