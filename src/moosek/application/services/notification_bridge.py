"""Turns session lifecycle events into channel notifications."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...application.interfaces.notifier import NotificationPayload
from ...domain.music.value_objects import TrackEndReason
from ...domain.shared.constants import DestroyReasons
from ...domain.shared.datetime_utils import format_duration_ms
from ...domain.shared.events import (
    QueueEnded,
    SessionDestroyed,
    TrackAdded,
    TrackEnded,
    TrackErrored,
    TrackStarted,
    get_event_bus,
)
from ...domain.shared.messages import DiscordUIMessages, LogTemplates

if TYPE_CHECKING:
    from ...application.interfaces.notifier import NotificationSink
    from ...domain.guild.entities import SessionSnapshot
    from ...domain.guild.repository import GuildSettingsRepository
    from ...domain.music.entities import GuildSession
    from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)

EMBED_COLOR = 0x000000
ERROR_COLOR = 0xE74C3C


def now_playing_payload(event: TrackStarted, session: GuildSession | None) -> NotificationPayload | None:
    entry = event.entry
    if entry is None:
        return None
    payload = NotificationPayload(
        title=DiscordUIMessages.EMBED_NOW_PLAYING,
        description=f"**[{entry.title}]({entry.uri})**",
        thumbnail_url=entry.thumbnail_url,
        color=EMBED_COLOR,
    )
    payload = payload.with_field(DiscordUIMessages.FIELD_ARTIST, entry.author)
    payload = payload.with_field(
        DiscordUIMessages.FIELD_DURATION, DiscordUIMessages.LIVE if entry.is_live else entry.duration_formatted
    )
    if session is not None:
        payload = payload.with_field(DiscordUIMessages.FIELD_VOLUME, f"{session.volume}%")
        payload = payload.with_field(DiscordUIMessages.FIELD_QUEUE_SIZE, str(len(session.queue)))
        payload = payload.with_field(DiscordUIMessages.FIELD_LOOP_MODE, session.loop_mode.label)
    if entry.requester_id is not None:
        payload = payload.with_field(DiscordUIMessages.FIELD_REQUESTED_BY, f"<@{entry.requester_id}>")
    return payload


def track_finished_payload(event: TrackEnded) -> NotificationPayload | None:
    if event.entry is None or not event.reason.is_reportable:
        return None
    status = (
        DiscordUIMessages.STATUS_COMPLETED
        if event.reason is TrackEndReason.FINISHED
        else DiscordUIMessages.STATUS_STOPPED
    )
    return NotificationPayload(
        title=DiscordUIMessages.EMBED_TRACK_FINISHED,
        description=f"**{event.entry.title}**",
        color=EMBED_COLOR,
    ).with_field(DiscordUIMessages.FIELD_STATUS, status)


def track_error_payload(event: TrackErrored) -> NotificationPayload:
    title = event.entry.title if event.entry else "Unknown track"
    return (
        NotificationPayload(
            title=DiscordUIMessages.EMBED_TRACK_ERROR,
            description=f"**{title}**",
            color=ERROR_COLOR,
        )
        .with_field(DiscordUIMessages.FIELD_ERROR, event.error or "Unknown error", inline=False)
        .with_field(DiscordUIMessages.FIELD_ACTION, DiscordUIMessages.TRACK_ERROR_ACTION, inline=False)
    )


def queue_finished_payload(event: QueueEnded) -> NotificationPayload:
    return NotificationPayload(
        title=DiscordUIMessages.EMBED_QUEUE_FINISHED,
        description=DiscordUIMessages.QUEUE_FINISHED_DESCRIPTION,
        color=EMBED_COLOR,
    ).with_field(DiscordUIMessages.FIELD_WHATS_NEXT, DiscordUIMessages.QUEUE_FINISHED_TIPS, inline=False)


def track_added_payload(event: TrackAdded) -> NotificationPayload | None:
    entry = event.entry
    if entry is None:
        return None
    return (
        NotificationPayload(
            title=DiscordUIMessages.EMBED_TRACK_ADDED,
            description=f"**[{entry.title}]({entry.uri})**\nby {entry.author}",
            thumbnail_url=entry.thumbnail_url,
            color=EMBED_COLOR,
        )
        .with_field(DiscordUIMessages.FIELD_POSITION, f"#{event.position}")
        .with_field(DiscordUIMessages.FIELD_TOTAL, str(event.queue_length))
        .with_field(DiscordUIMessages.FIELD_ESTIMATED_WAIT, format_duration_ms(event.estimated_wait_ms))
    )


def inactivity_payload() -> NotificationPayload:
    return NotificationPayload(title=DiscordUIMessages.INACTIVITY_DISCONNECT, color=EMBED_COLOR)


def resumable_payload(snapshot: SessionSnapshot) -> NotificationPayload | None:
    head = snapshot.current or (snapshot.entries[0] if snapshot.entries else None)
    if head is None:
        return None
    return NotificationPayload(
        title=DiscordUIMessages.EMBED_RESUMABLE,
        description=DiscordUIMessages.RESUMABLE_DESCRIPTION.format(title=head.title, count=snapshot.track_count),
        color=EMBED_COLOR,
    )


class NotificationBridge:
    """Subscribes to lifecycle events and forwards payloads to a sink.

    Delivery goes to the guild's configured music channel when there is one,
    otherwise to the session's text channel. Failures are the sink's problem;
    nothing here raises back into the engine.
    """

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        sink: NotificationSink,
        settings_repository: GuildSettingsRepository,
    ) -> None:
        self._registry = registry
        self._sink = sink
        self._settings_repo = settings_repository
        self._bus = get_event_bus()
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self._bus.subscribe(TrackStarted, self._on_track_started)
        self._bus.subscribe(TrackEnded, self._on_track_ended)
        self._bus.subscribe(TrackErrored, self._on_track_errored)
        self._bus.subscribe(QueueEnded, self._on_queue_ended)
        self._bus.subscribe(TrackAdded, self._on_track_added)
        self._bus.subscribe(SessionDestroyed, self._on_session_destroyed)
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._bus.unsubscribe(TrackStarted, self._on_track_started)
        self._bus.unsubscribe(TrackEnded, self._on_track_ended)
        self._bus.unsubscribe(TrackErrored, self._on_track_errored)
        self._bus.unsubscribe(QueueEnded, self._on_queue_ended)
        self._bus.unsubscribe(TrackAdded, self._on_track_added)
        self._bus.unsubscribe(SessionDestroyed, self._on_session_destroyed)
        self._started = False

    async def _target_channel(self, guild_id: int, fallback: int | None) -> int | None:
        settings = await self._settings_repo.get(guild_id)
        if settings is not None and settings.music_channel_id is not None:
            return settings.music_channel_id
        if fallback is not None:
            return fallback
        session = self._registry.get(guild_id)
        return session.text_channel_id if session is not None else None

    async def _deliver(self, guild_id: int, payload: NotificationPayload | None, fallback: int | None = None) -> None:
        if payload is None:
            return
        channel_id = await self._target_channel(guild_id, fallback)
        if channel_id is None:
            return
        delivered = await self._sink.send(channel_id, payload)
        if not delivered:
            logger.debug(LogTemplates.NOTIFY_FAILED, channel_id, payload.title)

    async def announce_restart(self, snapshot: SessionSnapshot) -> None:
        """Tell a guild what it was listening to before the last restart."""
        await self._deliver(snapshot.guild_id, resumable_payload(snapshot), snapshot.text_channel_id)

    async def _on_track_started(self, event: TrackStarted) -> None:
        session = self._registry.get(event.guild_id)
        await self._deliver(event.guild_id, now_playing_payload(event, session))

    async def _on_track_ended(self, event: TrackEnded) -> None:
        await self._deliver(event.guild_id, track_finished_payload(event))

    async def _on_track_errored(self, event: TrackErrored) -> None:
        await self._deliver(event.guild_id, track_error_payload(event))

    async def _on_queue_ended(self, event: QueueEnded) -> None:
        await self._deliver(event.guild_id, queue_finished_payload(event), event.text_channel_id)

    async def _on_track_added(self, event: TrackAdded) -> None:
        await self._deliver(event.guild_id, track_added_payload(event))

    async def _on_session_destroyed(self, event: SessionDestroyed) -> None:
        if event.reason != DestroyReasons.INACTIVITY:
            return
        await self._deliver(event.guild_id, inactivity_payload(), event.text_channel_id)
