"""Tests for YtDlpEngine: voice connection setup and delegation to the resolver."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from moosek.application.interfaces.audio_engine import LoadResult
from moosek.domain.music.value_objects import SearchSource
from moosek.domain.shared.exceptions import CollaboratorFailureError
from moosek.infrastructure.audio.ffmpeg_player import FFmpegPlayer
from moosek.infrastructure.audio.ytdlp_engine import YtDlpEngine

from conftest import GUILD_ID, TEXT_ID, VOICE_ID


def _voice_channel(channel_id=VOICE_ID):
    channel = MagicMock(spec=discord.VoiceChannel)
    channel.id = channel_id
    channel.name = "Lounge"
    channel.connect = AsyncMock()
    return channel


@pytest.fixture
def channel():
    return _voice_channel()


@pytest.fixture
def guild(channel):
    guild = MagicMock(spec=discord.Guild)
    guild.id = GUILD_ID
    guild.name = "Test Guild"
    guild.voice_client = None
    guild.get_channel.return_value = channel
    return guild


@pytest.fixture
def bot(guild):
    bot = MagicMock()
    bot.get_guild.return_value = guild
    bot.is_ready.return_value = True
    return bot


@pytest.fixture
def resolver():
    resolver = MagicMock()
    resolver.resolve = AsyncMock(return_value=LoadResult.empty())
    return resolver


@pytest.fixture
def engine(bot, resolver):
    return YtDlpEngine(bot, resolver=resolver)


def _voice_client(connected=True, channel=None):
    vc = MagicMock(spec=discord.VoiceClient)
    vc.is_connected.return_value = connected
    vc.channel = channel
    vc.move_to = AsyncMock()
    vc.disconnect = AsyncMock()
    return vc


class TestAvailability:
    def test_follows_bot_readiness(self, engine, bot):
        assert engine.is_available
        bot.is_ready.return_value = False
        assert not engine.is_available


class TestResolve:
    @pytest.mark.asyncio
    async def test_delegates_to_resolver(self, engine, resolver):
        result = await engine.resolve("song", SearchSource.SOUNDCLOUD)

        resolver.resolve.assert_awaited_once_with("song", SearchSource.SOUNDCLOUD)
        assert result == LoadResult.empty()

    @pytest.mark.asyncio
    async def test_search_delegates_with_limit(self, engine, resolver):
        resolver.search = AsyncMock(return_value=LoadResult.empty())

        await engine.search("song", SearchSource.YOUTUBE, 7)

        resolver.search.assert_awaited_once_with("song", SearchSource.YOUTUBE, 7)


class TestCreateConnection:
    @pytest.mark.asyncio
    async def test_connects_deafened(self, engine, bot, channel):
        bot.loop = asyncio.get_running_loop()
        channel.connect.return_value = _voice_client()

        player = await engine.create_connection(GUILD_ID, VOICE_ID, TEXT_ID, 70)

        channel.connect.assert_awaited_once_with(self_deaf=True)
        assert isinstance(player, FFmpegPlayer)
        assert player.guild_id == GUILD_ID

    @pytest.mark.asyncio
    async def test_unknown_guild(self, engine, bot):
        bot.get_guild.return_value = None
        with pytest.raises(CollaboratorFailureError):
            await engine.create_connection(GUILD_ID, VOICE_ID, TEXT_ID, 50)

    @pytest.mark.asyncio
    async def test_text_channel_rejected(self, engine, guild):
        guild.get_channel.return_value = MagicMock(spec=discord.TextChannel)
        with pytest.raises(CollaboratorFailureError):
            await engine.create_connection(GUILD_ID, VOICE_ID, TEXT_ID, 50)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            TimeoutError(),
            discord.Forbidden(MagicMock(status=403, reason="Forbidden"), "Missing Permissions"),
            discord.ClientException("Already connected"),
        ],
    )
    async def test_connect_failures(self, engine, channel, error):
        channel.connect.side_effect = error
        with pytest.raises(CollaboratorFailureError):
            await engine.create_connection(GUILD_ID, VOICE_ID, TEXT_ID, 50)

    @pytest.mark.asyncio
    async def test_reuses_leftover_connection(self, engine, bot, guild, channel):
        bot.loop = asyncio.get_running_loop()
        leftover = _voice_client(connected=True, channel=_voice_channel(123))
        guild.voice_client = leftover

        player = await engine.create_connection(GUILD_ID, VOICE_ID, TEXT_ID, 50)

        leftover.move_to.assert_awaited_once_with(channel)
        channel.connect.assert_not_awaited()
        assert player.is_connected

    @pytest.mark.asyncio
    async def test_stale_connection_replaced(self, engine, bot, guild, channel):
        bot.loop = asyncio.get_running_loop()
        stale = _voice_client(connected=False)
        guild.voice_client = stale
        channel.connect.return_value = _voice_client()

        await engine.create_connection(GUILD_ID, VOICE_ID, TEXT_ID, 50)

        stale.disconnect.assert_awaited_once_with(force=True)
        channel.connect.assert_awaited_once()
