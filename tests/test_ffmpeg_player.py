"""
Tests for FFmpegPlayer - Audio Playback

Tests for the FFmpeg-based per-guild player including:
- Audio source construction
- Lifecycle events from discord.py's after callback
- Playback control (play, pause, resume, stop, seek)
- Volume and voice channel moves
- Resource cleanup
- Error handling
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest
import pytest_asyncio

from moosek.config.settings import AudioSettings
from moosek.domain.music.value_objects import LoopMode, TrackEndReason
from moosek.domain.shared.events import TrackEnded, TrackErrored, TrackStarted, get_event_bus
from moosek.domain.shared.exceptions import CollaboratorFailureError
from moosek.infrastructure.audio.ffmpeg_player import FFmpegPlayer

from conftest import GUILD_ID, make_entry

FFMPEG = "moosek.infrastructure.audio.ffmpeg_player.discord.FFmpegPCMAudio"

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_voice_client():
    client = MagicMock(spec=discord.VoiceClient)
    client.is_playing.return_value = False
    client.is_paused.return_value = False
    client.is_connected.return_value = True
    client.source = None
    client.disconnect = AsyncMock()
    client.move_to = AsyncMock()
    return client


@pytest.fixture
def resolver():
    resolver = MagicMock()
    resolver.refresh_stream = AsyncMock()
    return resolver


@pytest.fixture
def ffmpeg_audio():
    def _source(*args, **kwargs):
        source = MagicMock(spec=discord.AudioSource)
        source.is_opus.return_value = False
        return source

    with patch(FFMPEG, side_effect=_source) as mock_ffmpeg:
        yield mock_ffmpeg


@pytest_asyncio.fixture
async def player(mock_voice_client, resolver, ffmpeg_audio):
    return FFmpegPlayer(
        mock_voice_client, guild_id=GUILD_ID, resolver=resolver, settings=AudioSettings(), volume=50
    )


@pytest.fixture
def events():
    received = []

    async def handler(event):
        received.append(event)

    bus = get_event_bus()
    for event_type in (TrackStarted, TrackEnded, TrackErrored):
        bus.subscribe(event_type, handler)
    return received


@pytest.fixture
def entry():
    return make_entry("Song", stream_url="https://cdn/song.m4a")


def _after(vc, call=-1):
    return vc.play.call_args_list[call].kwargs["after"]


async def _drain():
    # run_coroutine_threadsafe schedules onto the loop; give it a few turns.
    for _ in range(5):
        await asyncio.sleep(0)


# =============================================================================
# Source construction
# =============================================================================


class TestSource:
    @pytest.mark.asyncio
    async def test_play_builds_volume_transformer(self, player, mock_voice_client, ffmpeg_audio, entry):
        await player.play(entry)

        source = mock_voice_client.play.call_args.args[0]
        assert isinstance(source, discord.PCMVolumeTransformer)
        assert source.volume == 0.5
        args, kwargs = ffmpeg_audio.call_args
        assert args[0] == "https://cdn/song.m4a"
        assert "-reconnect 1" in kwargs["before_options"]
        assert "User-Agent" in kwargs["before_options"]
        assert "afade" in kwargs["options"]

    @pytest.mark.asyncio
    async def test_start_offset_seeks_input(self, player, ffmpeg_audio, entry):
        await player.play(entry, start_ms=30_000)

        kwargs = ffmpeg_audio.call_args.kwargs
        assert kwargs["before_options"].startswith("-ss 30.000")
        assert "afade" not in kwargs["options"]
        assert player.position_ms >= 30_000


# =============================================================================
# Lifecycle events
# =============================================================================


class TestEvents:
    @pytest.mark.asyncio
    async def test_play_publishes_started(self, player, events, entry):
        await player.play(entry)
        assert isinstance(events[0], TrackStarted)
        assert events[0].entry == entry

    @pytest.mark.asyncio
    async def test_natural_end_publishes_finished(self, player, mock_voice_client, events, entry):
        await player.play(entry)

        _after(mock_voice_client)(None)
        await _drain()

        ended = events[-1]
        assert isinstance(ended, TrackEnded)
        assert ended.reason is TrackEndReason.FINISHED
        assert player.position_ms == 0

    @pytest.mark.asyncio
    async def test_source_error_publishes_errored(self, player, mock_voice_client, events, entry):
        await player.play(entry)

        _after(mock_voice_client)(RuntimeError("ffmpeg died"))
        await _drain()

        assert isinstance(events[-1], TrackErrored)
        assert events[-1].error == "ffmpeg died"

    @pytest.mark.asyncio
    async def test_stop_reports_stopped(self, player, mock_voice_client, events, entry):
        await player.play(entry)
        mock_voice_client.is_playing.return_value = True

        await player.stop()
        _after(mock_voice_client)(None)
        await _drain()

        mock_voice_client.stop.assert_called_once()
        assert events[-1].reason is TrackEndReason.STOPPED

    @pytest.mark.asyncio
    async def test_replacing_reports_replaced(self, player, mock_voice_client, events, entry):
        await player.play(entry)
        mock_voice_client.is_playing.return_value = True

        await player.play(make_entry("Next", stream_url="https://cdn/next.m4a"))
        _after(mock_voice_client, call=0)(None)
        await _drain()

        ended = [e for e in events if isinstance(e, TrackEnded)]
        assert ended[0].reason is TrackEndReason.REPLACED
        assert ended[0].entry == entry

    @pytest.mark.asyncio
    async def test_seek_is_silent(self, player, mock_voice_client, ffmpeg_audio, events, entry):
        await player.play(entry)
        mock_voice_client.is_playing.return_value = True

        await player.seek(60_000)
        _after(mock_voice_client, call=0)(None)
        await _drain()

        assert not any(isinstance(e, TrackEnded) for e in events)
        assert ffmpeg_audio.call_args.kwargs["before_options"].startswith("-ss 60.000")
        assert mock_voice_client.play.call_count == 2


# =============================================================================
# Failures
# =============================================================================


class TestFailures:
    @pytest.mark.asyncio
    async def test_missing_stream_is_refreshed(self, player, resolver, mock_voice_client):
        flat = make_entry("Flat")
        resolver.refresh_stream.return_value = flat.model_copy(update={"stream_url": "https://cdn/fresh"})

        await player.play(flat)

        resolver.refresh_stream.assert_awaited_once_with(flat)
        mock_voice_client.play.assert_called_once()

    @pytest.mark.asyncio
    async def test_refresh_failure(self, player, resolver, mock_voice_client):
        resolver.refresh_stream.side_effect = LookupError("gone")

        with pytest.raises(CollaboratorFailureError):
            await player.play(make_entry("Flat"))

        mock_voice_client.play.assert_not_called()

    @pytest.mark.asyncio
    async def test_voice_client_refuses(self, player, mock_voice_client, events, entry):
        mock_voice_client.play.side_effect = discord.ClientException("Not connected to voice.")

        with pytest.raises(CollaboratorFailureError):
            await player.play(entry)

        assert events == []


# =============================================================================
# Controls
# =============================================================================


class TestControls:
    @pytest.mark.asyncio
    async def test_pause_freezes_position(self, player, mock_voice_client, entry):
        await player.play(entry, start_ms=10_000)
        mock_voice_client.is_playing.return_value = True

        await player.pause()
        frozen = player.position_ms
        await asyncio.sleep(0.02)

        mock_voice_client.pause.assert_called_once()
        assert player.position_ms == frozen

    @pytest.mark.asyncio
    async def test_resume_only_when_paused(self, player, mock_voice_client, entry):
        await player.play(entry)

        await player.resume()
        mock_voice_client.resume.assert_not_called()

        mock_voice_client.is_paused.return_value = True
        await player.resume()
        mock_voice_client.resume.assert_called_once()

    @pytest.mark.asyncio
    async def test_pause_without_playback(self, player, mock_voice_client):
        await player.pause()
        mock_voice_client.pause.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_volume_updates_live_source(self, player, mock_voice_client):
        source = MagicMock(spec=discord.PCMVolumeTransformer)
        mock_voice_client.source = source

        await player.set_volume(150)

        assert source.volume == 1.5

    @pytest.mark.asyncio
    async def test_set_loop(self, player):
        await player.set_loop(LoopMode.QUEUE)
        assert player._loop_mode is LoopMode.QUEUE

    @pytest.mark.asyncio
    async def test_move_to_voice_channel(self, player, mock_voice_client):
        channel = MagicMock(spec=discord.VoiceChannel)
        channel.name = "Lounge"
        mock_voice_client.guild.get_channel.return_value = channel

        await player.move_to(42)

        mock_voice_client.move_to.assert_awaited_once_with(channel)

    @pytest.mark.asyncio
    async def test_move_to_text_channel_is_ignored(self, player, mock_voice_client):
        mock_voice_client.guild.get_channel.return_value = MagicMock(spec=discord.TextChannel)

        await player.move_to(42)

        mock_voice_client.move_to.assert_not_awaited()


# =============================================================================
# Cleanup
# =============================================================================


class TestDestroy:
    @pytest.mark.asyncio
    async def test_destroy_disconnects_once(self, player, mock_voice_client, events, entry):
        await player.play(entry)
        mock_voice_client.is_playing.return_value = True

        await player.destroy()
        await player.destroy()
        _after(mock_voice_client)(None)
        await _drain()

        mock_voice_client.disconnect.assert_awaited_once_with(force=True)
        assert not player.is_connected
        assert events[-1].reason is TrackEndReason.CLEANUP

    @pytest.mark.asyncio
    async def test_disconnect_failure_is_logged(self, player, mock_voice_client):
        mock_voice_client.disconnect.side_effect = discord.ClientException("already gone")
        await player.destroy()
        assert not player.is_connected
