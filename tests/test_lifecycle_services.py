"""
Unit Tests for Lifecycle Services

Tests for:
- PlaybackCoordinator (advance, stale events, loops, errors, queue end)
- NotificationBridge routing and payloads
- InactivityMonitor timers
- SessionSnapshotService save / load
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from moosek.application.interfaces.notifier import NotificationSink
from moosek.application.services.inactivity_monitor import InactivityMonitor
from moosek.application.services.notification_bridge import NotificationBridge
from moosek.application.services.session_snapshots import SessionSnapshotService
from moosek.domain.guild.entities import GuildSettingsUpdate, SessionSnapshot
from moosek.domain.music.value_objects import LoopMode, TrackEndReason
from moosek.domain.shared.constants import DestroyReasons
from moosek.domain.shared.events import (
    BotDisconnected,
    QueueEnded,
    SessionDestroyed,
    TrackAdded,
    TrackEnded,
    TrackErrored,
    TrackStarted,
    VoiceChannelEmptied,
    VoiceChannelOccupied,
    get_event_bus,
)
from moosek.domain.shared.exceptions import CollaboratorFailureError
from moosek.domain.shared.messages import DiscordUIMessages

from conftest import GUILD_ID, TEXT_ID, VOICE_ID


class RecordingSink(NotificationSink):
    def __init__(self, delivered: bool = True) -> None:
        self.sent = []
        self.delivered = delivered

    async def send(self, channel_id, payload):
        self.sent.append((channel_id, payload))
        return self.delivered


def _collect(event_type):
    events = []

    async def handler(event):
        events.append(event)

    get_event_bus().subscribe(event_type, handler)
    return events


async def _end(entry, reason=TrackEndReason.FINISHED):
    await get_event_bus().publish(TrackEnded(guild_id=GUILD_ID, entry=entry, reason=reason))


# =============================================================================
# PlaybackCoordinator
# =============================================================================


class TestPlaybackCoordinator:
    @pytest.mark.asyncio
    async def test_finished_track_advances(self, harness, playing_session):
        await _end(playing_session.current)

        assert playing_session.current.title == "Track 2"
        assert harness.engine.players[GUILD_ID].played[-1].title == "Track 2"

    @pytest.mark.asyncio
    async def test_stale_event_is_ignored(self, harness, playing_session, sample_entries):
        await _end(sample_entries[2])

        assert playing_session.current.title == "Track 1"
        assert len(playing_session.queue) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reason", [TrackEndReason.REPLACED, TrackEndReason.CLEANUP])
    async def test_non_advancing_reasons(self, harness, playing_session, reason):
        await _end(playing_session.current, reason)
        assert playing_session.current.title == "Track 1"

    @pytest.mark.asyncio
    async def test_track_loop_replays_finished(self, harness, playing_session):
        playing_session.set_loop(LoopMode.TRACK)

        await _end(playing_session.current)

        assert playing_session.current.title == "Track 1"
        assert [e.title for e in harness.engine.players[GUILD_ID].played] == ["Track 1", "Track 1"]

    @pytest.mark.asyncio
    async def test_error_skips_even_with_track_loop(self, harness, playing_session):
        playing_session.set_loop(LoopMode.TRACK)

        await get_event_bus().publish(
            TrackErrored(guild_id=GUILD_ID, entry=playing_session.current, error="403")
        )

        assert playing_session.current.title == "Track 2"

    @pytest.mark.asyncio
    async def test_queue_end_publishes_and_destroys(self, harness, entry_factory):
        ended = _collect(QueueEnded)
        destroyed = _collect(SessionDestroyed)
        session = await harness.registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)
        session.queue.add(entry_factory("Only"))
        await harness.coordinator.start_if_idle(session)

        await _end(session.current)

        assert ended[0].last_entry.title == "Only"
        assert ended[0].text_channel_id == TEXT_ID
        assert destroyed[0].reason == DestroyReasons.QUEUE_ENDED
        assert harness.registry.get(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_unplayable_next_entry_is_passed_over(self, harness, playing_session):
        player = harness.engine.players[GUILD_ID]
        original_play = player.play
        attempts = []

        async def flaky_play(entry, *, start_ms=0):
            attempts.append(entry.title)
            if entry.title == "Track 2":
                raise CollaboratorFailureError("audio_engine", "gone")
            await original_play(entry, start_ms=start_ms)

        player.play = flaky_play

        await _end(playing_session.current)

        assert attempts == ["Track 2", "Track 3"]
        assert playing_session.current.title == "Track 3"

    @pytest.mark.asyncio
    async def test_event_for_unknown_guild(self, harness, sample_entry):
        await _end(sample_entry)
        assert len(harness.registry) == 0

    @pytest.mark.asyncio
    async def test_start_if_idle_does_nothing_while_playing(self, harness, playing_session):
        assert await harness.coordinator.start_if_idle(playing_session) is None

    @pytest.mark.asyncio
    async def test_start_if_idle_passes_over_refused_head(self, harness, entry_factory):
        errors = _collect(TrackErrored)
        session = await harness.registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)
        session.queue.extend([entry_factory("Broken"), entry_factory("Fine")])
        player = harness.engine.players[GUILD_ID]
        original_play = player.play

        async def refuse_broken(entry, *, start_ms=0):
            if entry.title == "Broken":
                raise CollaboratorFailureError("audio_engine", "no stream")
            await original_play(entry, start_ms=start_ms)

        player.play = refuse_broken

        started = await harness.coordinator.start_if_idle(session)

        assert started.title == "Fine"
        assert session.current.title == "Fine"
        assert [e.entry.title for e in errors] == ["Broken"]
        assert errors[0].refused

    @pytest.mark.asyncio
    async def test_start_if_idle_raises_when_everything_is_refused(self, harness, entry_factory):
        errors = _collect(TrackErrored)
        session = await harness.registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)
        session.queue.extend([entry_factory("A"), entry_factory("B")])
        harness.engine.players[GUILD_ID].play_error = CollaboratorFailureError("audio_engine", "no stream")

        with pytest.raises(CollaboratorFailureError):
            await harness.coordinator.start_if_idle(session)

        assert session.current is None
        assert not session.state.is_active
        assert len(session.queue) == 0
        assert [e.entry.title for e in errors] == ["A", "B"]
        assert harness.registry.get(GUILD_ID) is session

    @pytest.mark.asyncio
    async def test_refusal_report_does_not_advance_again(self, harness, playing_session):
        await get_event_bus().publish(
            TrackErrored(guild_id=GUILD_ID, entry=playing_session.current, error="no stream", refused=True)
        )

        assert playing_session.current.title == "Track 1"
        assert len(playing_session.queue) == 2

    @pytest.mark.asyncio
    async def test_queue_of_refused_entries_ends_session(self, harness, playing_session):
        ended = _collect(QueueEnded)
        harness.engine.players[GUILD_ID].play_error = CollaboratorFailureError("audio_engine", "gone")

        await _end(playing_session.current)

        assert ended[0].last_entry.title == "Track 1"
        assert harness.registry.get(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_guild_lock_not_kept_after_advance(self, harness, playing_session):
        await _end(playing_session.current)

        assert playing_session.current.title == "Track 2"
        assert len(harness.coordinator._guild_locks) == 0


# =============================================================================
# NotificationBridge
# =============================================================================


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def bridge(registry, sink, guild_settings_repository):
    bridge = NotificationBridge(registry=registry, sink=sink, settings_repository=guild_settings_repository)
    bridge.start()
    yield bridge
    bridge.stop()


class TestNotificationBridge:
    @pytest.mark.asyncio
    async def test_now_playing_goes_to_session_channel(self, bridge, sink, registry, sample_entry):
        await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)

        await get_event_bus().publish(TrackStarted(guild_id=GUILD_ID, entry=sample_entry))

        channel_id, payload = sink.sent[0]
        assert channel_id == TEXT_ID
        assert payload.title == DiscordUIMessages.EMBED_NOW_PLAYING
        assert payload.thumbnail_url == sample_entry.thumbnail_url
        assert any(f.value == "<@111>" for f in payload.fields)

    @pytest.mark.asyncio
    async def test_music_channel_overrides_session_channel(
        self, bridge, sink, registry, guild_settings_repository, sample_entry
    ):
        await guild_settings_repository.upsert(GUILD_ID, GuildSettingsUpdate(music_channel_id=9999))
        await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)

        await get_event_bus().publish(TrackStarted(guild_id=GUILD_ID, entry=sample_entry))

        assert sink.sent[0][0] == 9999

    @pytest.mark.asyncio
    async def test_no_channel_no_delivery(self, bridge, sink, sample_entry):
        await get_event_bus().publish(TrackStarted(guild_id=GUILD_ID, entry=sample_entry))
        assert sink.sent == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reason,reported",
        [
            (TrackEndReason.FINISHED, True),
            (TrackEndReason.STOPPED, True),
            (TrackEndReason.REPLACED, False),
            (TrackEndReason.LOAD_FAILED, False),
        ],
    )
    async def test_track_finished_only_for_reportable_reasons(
        self, bridge, sink, registry, sample_entry, reason, reported
    ):
        await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)
        await get_event_bus().publish(TrackEnded(guild_id=GUILD_ID, entry=sample_entry, reason=reason))
        assert bool(sink.sent) is reported

    @pytest.mark.asyncio
    async def test_track_error(self, bridge, sink, registry, sample_entry):
        await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)

        await get_event_bus().publish(TrackErrored(guild_id=GUILD_ID, entry=sample_entry, error="HTTP 403"))

        payload = sink.sent[0][1]
        assert payload.title == DiscordUIMessages.EMBED_TRACK_ERROR
        assert payload.fields[0].value == "HTTP 403"

    @pytest.mark.asyncio
    async def test_queue_ended_uses_event_channel(self, bridge, sink):
        await get_event_bus().publish(QueueEnded(guild_id=GUILD_ID, text_channel_id=TEXT_ID))
        assert sink.sent[0][0] == TEXT_ID
        assert sink.sent[0][1].title == DiscordUIMessages.EMBED_QUEUE_FINISHED

    @pytest.mark.asyncio
    async def test_track_added(self, bridge, sink, registry, sample_entry):
        await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)

        await get_event_bus().publish(
            TrackAdded(guild_id=GUILD_ID, entry=sample_entry, position=2, queue_length=2, estimated_wait_ms=65_000)
        )

        values = [f.value for f in sink.sent[0][1].fields]
        assert values == ["#2", "2", "1:05"]

    @pytest.mark.asyncio
    async def test_only_inactivity_destruction_is_announced(self, bridge, sink):
        bus = get_event_bus()
        await bus.publish(SessionDestroyed(guild_id=GUILD_ID, text_channel_id=TEXT_ID, reason=DestroyReasons.STOPPED))
        await bus.publish(
            SessionDestroyed(guild_id=GUILD_ID, text_channel_id=TEXT_ID, reason=DestroyReasons.INACTIVITY)
        )

        assert len(sink.sent) == 1
        assert sink.sent[0][1].title == DiscordUIMessages.INACTIVITY_DISCONNECT

    @pytest.mark.asyncio
    async def test_failed_delivery_does_not_raise(self, registry, guild_settings_repository, sample_entry):
        sink = RecordingSink(delivered=False)
        bridge = NotificationBridge(registry=registry, sink=sink, settings_repository=guild_settings_repository)
        bridge.start()
        await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)

        await get_event_bus().publish(TrackStarted(guild_id=GUILD_ID, entry=sample_entry))

        assert len(sink.sent) == 1
        bridge.stop()

    @pytest.mark.asyncio
    async def test_announce_restart(self, bridge, sink, sample_entries):
        snapshot = SessionSnapshot(
            guild_id=GUILD_ID,
            voice_channel_id=VOICE_ID,
            text_channel_id=TEXT_ID,
            volume=50,
            entries=sample_entries,
        )

        await bridge.announce_restart(snapshot)

        channel_id, payload = sink.sent[0]
        assert channel_id == TEXT_ID
        assert payload.description == DiscordUIMessages.RESUMABLE_DESCRIPTION.format(title="Track 1", count=3)

    @pytest.mark.asyncio
    async def test_stop_unsubscribes(self, bridge, sink, registry, sample_entry):
        bridge.stop()
        await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)
        await get_event_bus().publish(TrackStarted(guild_id=GUILD_ID, entry=sample_entry))
        assert sink.sent == []


# =============================================================================
# InactivityMonitor
# =============================================================================


@pytest.fixture
def monitor(registry):
    monitor = InactivityMonitor(registry=registry, grace_seconds=0.05)
    monitor.start()
    yield monitor
    monitor.stop()


class TestInactivityMonitor:
    @pytest.mark.asyncio
    async def test_empty_channel_disconnects_after_grace(self, monitor, registry):
        destroyed = _collect(SessionDestroyed)
        await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)

        await get_event_bus().publish(VoiceChannelEmptied(guild_id=GUILD_ID, channel_id=VOICE_ID))
        assert monitor.pending_guilds == {GUILD_ID}
        await asyncio.sleep(0.15)

        assert registry.get(GUILD_ID) is None
        assert destroyed[0].reason == DestroyReasons.INACTIVITY

    @pytest.mark.asyncio
    async def test_rejoin_cancels_timer(self, monitor, registry):
        await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)
        bus = get_event_bus()

        await bus.publish(VoiceChannelEmptied(guild_id=GUILD_ID, channel_id=VOICE_ID))
        await bus.publish(VoiceChannelOccupied(guild_id=GUILD_ID, channel_id=VOICE_ID))
        await asyncio.sleep(0.15)

        assert registry.get(GUILD_ID) is not None
        assert monitor.pending_guilds == set()

    @pytest.mark.asyncio
    async def test_other_channel_ignored(self, monitor, registry):
        await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)
        await get_event_bus().publish(VoiceChannelEmptied(guild_id=GUILD_ID, channel_id=1234))
        assert monitor.pending_guilds == set()

    @pytest.mark.asyncio
    async def test_bot_disconnect_destroys_immediately(self, monitor, registry):
        destroyed = _collect(SessionDestroyed)
        await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)

        await get_event_bus().publish(BotDisconnected(guild_id=GUILD_ID, channel_id=VOICE_ID))

        assert registry.get(GUILD_ID) is None
        assert destroyed[0].reason == DestroyReasons.BOT_DISCONNECTED

    @pytest.mark.asyncio
    async def test_destroyed_session_cancels_timer(self, monitor, registry):
        await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)
        await get_event_bus().publish(VoiceChannelEmptied(guild_id=GUILD_ID, channel_id=VOICE_ID))

        await registry.destroy(GUILD_ID, DestroyReasons.STOPPED)

        assert monitor.pending_guilds == set()


# =============================================================================
# SessionSnapshotService
# =============================================================================


class TestSessionSnapshotService:
    @pytest.mark.asyncio
    async def test_save_and_load_round_trip(self, registry, audio_engine, snapshot_repository, sample_entries):
        session = await registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)
        session.queue.extend(sample_entries)
        session.start_next()
        audio_engine.players[GUILD_ID].position = 42_000
        await registry.get_or_create(2, 556, 778)

        service = SessionSnapshotService(registry=registry, repository=snapshot_repository)

        assert await service.save_all() == 1

        loaded = await service.load_pending()
        assert len(loaded) == 1
        assert loaded[0].current.title == "Track 1"
        assert [e.title for e in loaded[0].entries] == ["Track 2", "Track 3"]
        assert loaded[0].position_ms == 42_000

        assert await service.load_pending() == []

    @pytest.mark.asyncio
    async def test_load_pending_without_snapshots_skips_clear(self, registry):
        repository = AsyncMock()
        repository.load_all.return_value = []
        service = SessionSnapshotService(registry=registry, repository=repository)

        assert await service.load_pending() == []
        repository.clear.assert_not_awaited()
