from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from moosek.application.interfaces.audio_engine import AudioEngine, LoadResult, Player
from moosek.domain.music.value_objects import LoadType

# ============================================================================
# Event Bus
# ============================================================================


@pytest.fixture(autouse=True)
def fresh_event_bus():
    """Give every test its own global event bus."""
    from moosek.domain.shared.events import reset_event_bus

    reset_event_bus()
    yield
    reset_event_bus()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from moosek.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def guild_settings_repository(in_memory_database):
    from moosek.infrastructure.persistence.repositories.guild_settings_repository import (
        SQLiteGuildSettingsRepository,
    )

    return SQLiteGuildSettingsRepository(in_memory_database)


@pytest_asyncio.fixture
async def snapshot_repository(in_memory_database):
    from moosek.infrastructure.persistence.repositories.session_snapshot_repository import (
        SQLiteSessionSnapshotRepository,
    )

    return SQLiteSessionSnapshotRepository(in_memory_database)


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


def make_entry(title="Test Track", *, duration_ms=180_000, requester_id=None, author="Test Artist", **kwargs):
    from moosek.domain.music.entities import QueueEntry

    slug = title.lower().replace(" ", "-")
    return QueueEntry(
        title=title,
        author=author,
        uri=f"https://youtube.com/watch?v={slug}",
        duration_ms=duration_ms,
        requester_id=requester_id,
        **kwargs,
    )


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def sample_entry():
    return make_entry(
        "Test Track",
        stream_url="https://stream.url/test",
        thumbnail_url="https://thumbnail.url/test.jpg",
        requester_id=111,
    )


@pytest.fixture
def sample_entries():
    return [make_entry(f"Track {i}", requester_id=111) for i in range(1, 4)]


@pytest.fixture
def sample_session():
    from moosek.domain.music.entities import GuildSession

    return GuildSession(guild_id=987654321, voice_channel_id=555, text_channel_id=777)


# ============================================================================
# Audio Engine Doubles
# ============================================================================


class FakePlayer(Player):
    """Records every call; publishes nothing unless a test does it."""

    def __init__(self, guild_id: int) -> None:
        self.guild_id = guild_id
        self.played = []
        self.calls = []
        self.volume = None
        self.loop_mode = None
        self.moved_to = None
        self.destroyed = 0
        self.position = 0
        self.play_error = None

    async def play(self, entry, *, start_ms=0):
        if self.play_error is not None:
            raise self.play_error
        self.played.append(entry)
        self.calls.append("play")

    async def pause(self):
        self.calls.append("pause")

    async def resume(self):
        self.calls.append("resume")

    async def stop(self):
        self.calls.append("stop")

    async def seek(self, position_ms):
        self.calls.append(("seek", position_ms))

    async def set_volume(self, volume):
        self.volume = volume

    async def set_loop(self, mode):
        self.loop_mode = mode

    async def move_to(self, voice_channel_id):
        self.moved_to = voice_channel_id

    @property
    def position_ms(self):
        return self.position

    @property
    def is_connected(self):
        return self.destroyed == 0

    async def destroy(self):
        self.destroyed += 1


class FakeAudioEngine(AudioEngine):
    def __init__(self) -> None:
        self.players = {}
        self.result = LoadResult(load_type=LoadType.EMPTY)
        self.available = True
        self.connect_error = None
        self.connect_calls = 0
        self.resolve = AsyncMock(side_effect=lambda query, source: self.result)
        self.search = AsyncMock(side_effect=lambda query, source, limit: self.result)

    @property
    def is_available(self):
        return self.available

    async def resolve(self, query, source):
        return self.result

    async def search(self, query, source, limit):
        return self.result

    async def create_connection(self, guild_id, voice_channel_id, text_channel_id, volume):
        self.connect_calls += 1
        if self.connect_error is not None:
            raise self.connect_error
        player = FakePlayer(guild_id)
        self.players[guild_id] = player
        return player


@pytest.fixture
def audio_engine():
    return FakeAudioEngine()


@pytest.fixture
def registry(audio_engine):
    from moosek.application.services.session_registry import SessionRegistry

    return SessionRegistry(audio_engine=audio_engine, default_volume=50)


# ============================================================================
# Discord Doubles
# ============================================================================


@pytest.fixture
def mock_interaction():
    """Interaction from a guild member sitting in voice channel 555."""
    import discord

    interaction = MagicMock(spec=discord.Interaction)
    interaction.guild_id = 987654321
    interaction.channel_id = 777

    member = MagicMock(spec=discord.Member)
    member.id = 111
    member.display_name = "TestUser"
    member.roles = []
    member.guild_permissions = discord.Permissions.none()
    member.voice = MagicMock()
    member.voice.channel = MagicMock()
    member.voice.channel.id = 555
    interaction.user = member

    interaction.response = MagicMock()
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.send_message = AsyncMock()
    interaction.response.defer = AsyncMock()
    interaction.response.edit_message = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    interaction.original_response = AsyncMock(return_value=MagicMock(spec=discord.Message))
    return interaction


# ============================================================================
# Application Harness
# ============================================================================


GUILD_ID = 987654321
VOICE_ID = 555
TEXT_ID = 777
DJ_ROLE_ID = 4242


@pytest.fixture
def actors():
    """Members with each tier of authority, all sitting in the voice channel."""
    from moosek.application.services.permission_gate import Actor

    return {
        "admin": Actor(user_id=1, display_name="Admin", is_administrator=True, voice_channel_id=VOICE_ID),
        "dj": Actor(user_id=2, display_name="DJ", role_ids=frozenset({DJ_ROLE_ID}), voice_channel_id=VOICE_ID),
        "manager": Actor(user_id=3, display_name="Manager", can_manage_guild=True, voice_channel_id=VOICE_ID),
        "member": Actor(user_id=4, display_name="Member", voice_channel_id=VOICE_ID),
    }


@pytest.fixture
def make_context():
    from moosek.application.commands.base import CommandContext

    def _make(actor, name="test", guild_id=GUILD_ID, channel_id=TEXT_ID):
        return CommandContext(command_name=name, actor=actor, guild_id=guild_id, channel_id=channel_id)

    return _make


@pytest_asyncio.fixture
async def harness(registry, audio_engine, guild_settings_repository):
    """Real services and handlers wired over the fake audio engine."""
    from types import SimpleNamespace

    from moosek.application.commands.guild_config import GuildConfigHandler
    from moosek.application.commands.play import PlayHandler
    from moosek.application.commands.playback import PlaybackControlHandler
    from moosek.application.commands.queue_edit import QueueEditHandler
    from moosek.application.commands.queue_view import QueueViewHandler
    from moosek.application.queries.get_queue import GetQueueHandler
    from moosek.application.queries.now_playing import NowPlayingHandler
    from moosek.application.services.guild_settings import GuildSettingsService
    from moosek.application.services.permission_gate import PermissionGate
    from moosek.application.services.playback_coordinator import PlaybackCoordinator

    gate = PermissionGate()
    settings = GuildSettingsService(repository=guild_settings_repository)
    coordinator = PlaybackCoordinator(registry=registry)
    coordinator.start()

    common = {"registry": registry, "permission_gate": gate, "guild_settings": settings}
    ns = SimpleNamespace(
        registry=registry,
        engine=audio_engine,
        gate=gate,
        settings=settings,
        coordinator=coordinator,
        play=PlayHandler(
            registry=registry, audio_engine=audio_engine, coordinator=coordinator, guild_settings=settings
        ),
        playback=PlaybackControlHandler(coordinator=coordinator, **common),
        queue_edit=QueueEditHandler(**common),
        queue_view=QueueViewHandler(
            queue_query=GetQueueHandler(registry=registry),
            now_playing_query=NowPlayingHandler(registry=registry),
            page_size=2,
        ),
        guild_config=GuildConfigHandler(guild_settings=settings, permission_gate=gate, registry=registry),
    )
    yield ns
    coordinator.stop()


@pytest_asyncio.fixture
async def playing_session(harness, sample_entries):
    """A session playing Track 1 with Track 2 and Track 3 queued."""
    session = await harness.registry.get_or_create(GUILD_ID, VOICE_ID, TEXT_ID)
    session.queue.extend(sample_entries)
    await harness.coordinator.start_if_idle(session)
    return session
