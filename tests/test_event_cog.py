"""Tests for EventCog: voice state changes become domain events."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from moosek.domain.shared.constants import DestroyReasons
from moosek.domain.shared.events import (
    BotDisconnected,
    VoiceChannelEmptied,
    VoiceChannelOccupied,
    get_event_bus,
)
from moosek.infrastructure.discord.cogs.event_cog import EventCog, setup

BOT_ID = 999
GUILD_ID = 987654321
BOT_CHANNEL = 555


def _channel(channel_id, members=()):
    channel = MagicMock(spec=discord.VoiceChannel)
    channel.id = channel_id
    channel.members = list(members)
    return channel


def _member(member_id, guild, *, bot=False):
    member = MagicMock(spec=discord.Member)
    member.id = member_id
    member.bot = bot
    member.guild = guild
    return member


def _state(channel):
    state = MagicMock(spec=discord.VoiceState)
    state.channel = channel
    return state


@pytest.fixture
def guild():
    guild = MagicMock(spec=discord.Guild)
    guild.id = GUILD_ID
    guild.voice_client = MagicMock()
    guild.voice_client.channel = _channel(BOT_CHANNEL)
    return guild


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.session_registry.destroy = AsyncMock(return_value=True)
    return container


@pytest.fixture
def cog(mock_container):
    bot = MagicMock()
    bot.user.id = BOT_ID
    return EventCog(bot, mock_container)


@pytest.fixture
def published():
    events = []

    async def handler(event):
        events.append(event)

    bus = get_event_bus()
    for event_type in (BotDisconnected, VoiceChannelEmptied, VoiceChannelOccupied):
        bus.subscribe(event_type, handler)
    return events


@pytest.mark.asyncio
async def test_last_human_leaving_empties_channel(cog, guild, published):
    bot_member = _member(BOT_ID, guild, bot=True)
    guild.voice_client.channel.members = [bot_member]
    leaver = _member(1, guild)

    await cog.on_voice_state_update(leaver, _state(guild.voice_client.channel), _state(None))

    assert len(published) == 1
    assert isinstance(published[0], VoiceChannelEmptied)
    assert published[0].channel_id == BOT_CHANNEL


@pytest.mark.asyncio
async def test_leaving_with_others_still_present(cog, guild, published):
    guild.voice_client.channel.members = [_member(2, guild)]

    await cog.on_voice_state_update(_member(1, guild), _state(guild.voice_client.channel), _state(None))

    assert published == []


@pytest.mark.asyncio
async def test_human_joining_occupies_channel(cog, guild, published):
    await cog.on_voice_state_update(_member(1, guild), _state(None), _state(guild.voice_client.channel))

    assert len(published) == 1
    assert isinstance(published[0], VoiceChannelOccupied)


@pytest.mark.asyncio
async def test_other_bot_joining_is_ignored(cog, guild, published):
    await cog.on_voice_state_update(
        _member(1, guild, bot=True), _state(None), _state(guild.voice_client.channel)
    )
    assert published == []


@pytest.mark.asyncio
async def test_bot_kicked_from_voice(cog, guild, published):
    await cog.on_voice_state_update(_member(BOT_ID, guild, bot=True), _state(_channel(BOT_CHANNEL)), _state(None))

    assert isinstance(published[0], BotDisconnected)
    assert published[0].channel_id == BOT_CHANNEL


@pytest.mark.asyncio
async def test_no_voice_client_means_nothing_to_track(cog, guild, published):
    guild.voice_client = None
    await cog.on_voice_state_update(_member(1, guild), _state(_channel(BOT_CHANNEL)), _state(None))
    assert published == []


@pytest.mark.asyncio
async def test_guild_remove_destroys_session(cog, mock_container, guild):
    await cog.on_guild_remove(guild)
    mock_container.session_registry.destroy.assert_awaited_once_with(GUILD_ID, DestroyReasons.GUILD_REMOVED)


@pytest.mark.asyncio
async def test_setup_requires_container():
    with pytest.raises(RuntimeError):
        await setup(MagicMock(spec=["add_cog"]))
