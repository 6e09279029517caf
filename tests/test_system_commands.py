"""Tests for the general commands: ping, stats, help, shutdown and the informational ones."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from moosek.application.commands.base import CommandDefinition, CommandOutcome
from moosek.application.commands.system import SystemCommandHandler
from moosek.application.queries.system_stats import SystemStatsHandler
from moosek.domain.shared.datetime_utils import utcnow
from moosek.domain.shared.exceptions import CollaboratorUnavailableError
from moosek.domain.shared.messages import DiscordUIMessages, ErrorMessages


async def _noop(ctx, args):
    return CommandOutcome.success("ok")


DEFINITIONS = [
    CommandDefinition(name="play", description="Play a track", handler=_noop, category="music"),
    CommandDefinition(name="skip", description="Skip tracks", handler=_noop, category="music"),
    CommandDefinition(name="ping", description="Check latency", handler=_noop),
]


@pytest.fixture
def handler(registry):
    return SystemCommandHandler(
        stats_query=SystemStatsHandler(registry=registry),
        definitions=lambda: DEFINITIONS,
    )


@pytest.mark.asyncio
async def test_ping_reports_bound_latency(handler, actors, make_context):
    handler.bind_transport(latency=lambda: 0.0425, guild_count=lambda: 3, shutdown=AsyncMock())

    outcome = await handler.ping(make_context(actors["member"]), {})

    assert outcome.data == 42
    assert outcome.message == DiscordUIMessages.PING.format(latency_ms=42)


@pytest.mark.asyncio
async def test_stats_counts_live_sessions(harness, playing_session, handler, actors, make_context):
    handler.bind_transport(latency=lambda: 0.0, guild_count=lambda: 7, shutdown=AsyncMock())

    outcome = await handler.stats(make_context(actors["member"]), {})

    assert outcome.data.sessions == 1
    assert outcome.data.playing == 1
    assert outcome.data.paused == 0
    assert outcome.data.queued_entries == 2
    assert "Servers: **7**" in outcome.payload.description


@pytest.mark.asyncio
async def test_stats_without_sessions(handler, actors, make_context):
    outcome = await handler.stats(make_context(actors["member"]), {})
    assert outcome.data.sessions == 0
    assert outcome.data.queued_entries == 0


@pytest.mark.asyncio
async def test_help_groups_by_category(handler, actors, make_context):
    outcome = await handler.help(make_context(actors["member"]), {})

    fields = {field.name: field.value for field in outcome.payload.fields}
    assert outcome.ephemeral
    assert fields["Music"] == "`/play` Play a track\n`/skip` Skip tracks"
    assert fields["General"] == "`/ping` Check latency"


@pytest.mark.asyncio
async def test_shutdown_invokes_transport(handler, actors, make_context):
    shutdown = AsyncMock()
    handler.bind_transport(latency=lambda: 0.0, guild_count=lambda: 0, shutdown=shutdown)

    outcome = await handler.shutdown(make_context(actors["admin"]), {})

    shutdown.assert_awaited_once()
    assert outcome.message == DiscordUIMessages.SHUTDOWN_ACK


@pytest.mark.asyncio
async def test_shutdown_unbound_still_acknowledges(handler, actors, make_context):
    outcome = await handler.shutdown(make_context(actors["admin"]), {})
    assert outcome.is_success


# =============================================================================
# Informational commands
# =============================================================================


@pytest.fixture
def info_handler(registry):
    return SystemCommandHandler(
        stats_query=SystemStatsHandler(registry=registry),
        definitions=lambda: DEFINITIONS,
        versions={"moosek": "1.2.0", "discord.py": "2.4.0", "python": "3.12.1"},
        started_at=utcnow() - timedelta(hours=1, minutes=2, seconds=5),
    )


@pytest.mark.asyncio
async def test_uptime_reports_elapsed_and_sessions(harness, playing_session, info_handler, actors, make_context):
    outcome = await info_handler.uptime(make_context(actors["member"]), {})

    fields = {field.name: field.value for field in outcome.payload.fields}
    assert outcome.payload.title == DiscordUIMessages.EMBED_UPTIME
    assert outcome.data >= timedelta(hours=1, minutes=2, seconds=5)
    assert fields[DiscordUIMessages.FIELD_UPTIME].startswith("1h 2m ")
    assert fields[DiscordUIMessages.FIELD_STARTED].startswith("<t:")
    assert fields[DiscordUIMessages.FIELD_ACTIVE_SESSIONS] == "1"


@pytest.mark.asyncio
async def test_version_lists_components(info_handler, actors, make_context):
    outcome = await info_handler.version(make_context(actors["member"]), {})

    fields = {field.name: field.value for field in outcome.payload.fields}
    assert outcome.data == "1.2.0"
    assert outcome.payload.description == DiscordUIMessages.VERSION_DESCRIPTION.format(version="1.2.0")
    assert fields == {"discord.py": "`2.4.0`", "python": "`3.12.1`"}


@pytest.mark.asyncio
async def test_version_without_metadata(handler, actors, make_context):
    outcome = await handler.version(make_context(actors["member"]), {})
    assert outcome.data == "unknown"
    assert outcome.payload.fields == []


@pytest.mark.asyncio
async def test_invite_before_login(handler, actors, make_context):
    with pytest.raises(CollaboratorUnavailableError) as excinfo:
        await handler.invite(make_context(actors["member"]), {})
    assert excinfo.value.message == ErrorMessages.INVITE_UNAVAILABLE


@pytest.mark.asyncio
async def test_invite_uses_bound_link(handler, actors, make_context):
    url = "https://discord.com/oauth2/authorize?client_id=1234"
    handler.bind_transport(latency=lambda: 0.0, guild_count=lambda: 0, shutdown=AsyncMock(), invite_url=lambda: url)

    outcome = await handler.invite(make_context(actors["member"]), {})

    assert outcome.data == url
    assert url in outcome.payload.description


@pytest.mark.asyncio
async def test_binding_without_invite_keeps_previous_link(handler, actors, make_context):
    handler.bind_transport(latency=lambda: 0.0, guild_count=lambda: 0, shutdown=AsyncMock(), invite_url=lambda: "x")
    handler.bind_transport(latency=lambda: 0.0, guild_count=lambda: 0, shutdown=AsyncMock())

    outcome = await handler.invite(make_context(actors["member"]), {})

    assert outcome.data == "x"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "support_url,expected",
    [
        ("https://discord.gg/moosek", DiscordUIMessages.SUPPORT_DESCRIPTION.format(url="https://discord.gg/moosek")),
        (None, DiscordUIMessages.SUPPORT_NOT_CONFIGURED),
    ],
)
async def test_support(registry, actors, make_context, support_url, expected):
    handler = SystemCommandHandler(
        stats_query=SystemStatsHandler(registry=registry),
        definitions=lambda: DEFINITIONS,
        support_url=support_url,
    )

    outcome = await handler.support(make_context(actors["member"]), {})

    assert outcome.ephemeral
    assert outcome.payload.description == expected
    assert outcome.payload.fields[0].name == DiscordUIMessages.FIELD_COMMON_ISSUES
