"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the registry, gates, handlers, event
subscribers, repositories and adapters. Components are created on-demand
and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
import platform
from dataclasses import dataclass
from importlib import metadata
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.commands.dispatcher import CommandDispatcher
    from ..application.commands.guild_config import GuildConfigHandler
    from ..application.commands.play import PlayHandler
    from ..application.commands.playback import PlaybackControlHandler
    from ..application.commands.queue_edit import QueueEditHandler
    from ..application.commands.queue_view import QueueViewHandler
    from ..application.commands.search import SearchHandler
    from ..application.commands.system import SystemCommandHandler
    from ..application.interfaces.audio_engine import AudioEngine
    from ..application.interfaces.notifier import NotificationSink
    from ..application.queries.get_queue import GetQueueHandler
    from ..application.queries.now_playing import NowPlayingHandler
    from ..application.queries.system_stats import SystemStatsHandler
    from ..application.services.cooldown_gate import CooldownGate
    from ..application.services.guild_settings import GuildSettingsService
    from ..application.services.inactivity_monitor import InactivityMonitor
    from ..application.services.notification_bridge import NotificationBridge
    from ..application.services.permission_gate import PermissionGate
    from ..application.services.playback_coordinator import PlaybackCoordinator
    from ..application.services.session_registry import SessionRegistry
    from ..application.services.session_snapshots import SessionSnapshotService
    from ..domain.guild.repository import GuildSettingsRepository, SessionSnapshotRepository
    from ..infrastructure.persistence.database import Database
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed. The audio engine
    and the notification sink talk to Discord, so ``set_bot`` must be called
    before either is touched; tests may inject fakes through the matching
    private fields instead.
    """

    settings: Settings
    _bot: Bot | None = None

    # Persistence layer
    _database: Database | None = None
    _guild_settings_repository: GuildSettingsRepository | None = None
    _snapshot_repository: SessionSnapshotRepository | None = None

    # Infrastructure adapters
    _audio_engine: AudioEngine | None = None
    _notification_sink: NotificationSink | None = None

    # Core services
    _session_registry: SessionRegistry | None = None
    _permission_gate: PermissionGate | None = None
    _cooldown_gate: CooldownGate | None = None
    _guild_settings_service: GuildSettingsService | None = None

    # Event subscribers
    _playback_coordinator: PlaybackCoordinator | None = None
    _notification_bridge: NotificationBridge | None = None
    _inactivity_monitor: InactivityMonitor | None = None
    _snapshot_service: SessionSnapshotService | None = None

    # Query handlers
    _get_queue_handler: GetQueueHandler | None = None
    _now_playing_handler: NowPlayingHandler | None = None
    _system_stats_handler: SystemStatsHandler | None = None

    # Command handlers
    _play_handler: PlayHandler | None = None
    _search_handler: SearchHandler | None = None
    _playback_handler: PlaybackControlHandler | None = None
    _queue_view_handler: QueueViewHandler | None = None
    _queue_edit_handler: QueueEditHandler | None = None
    _guild_config_handler: GuildConfigHandler | None = None
    _system_handler: SystemCommandHandler | None = None
    _dispatcher: CommandDispatcher | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Database ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    # === Repositories ===

    @property
    def guild_settings_repository(self) -> GuildSettingsRepository:
        if self._guild_settings_repository is None:
            from ..infrastructure.persistence.repositories.guild_settings_repository import (
                SQLiteGuildSettingsRepository,
            )

            self._guild_settings_repository = SQLiteGuildSettingsRepository(self.database)
        return self._guild_settings_repository

    @property
    def snapshot_repository(self) -> SessionSnapshotRepository:
        if self._snapshot_repository is None:
            from ..infrastructure.persistence.repositories.session_snapshot_repository import (
                SQLiteSessionSnapshotRepository,
            )

            self._snapshot_repository = SQLiteSessionSnapshotRepository(self.database)
        return self._snapshot_repository

    # === Infrastructure Adapters ===

    @property
    def audio_engine(self) -> AudioEngine:
        """Get the yt-dlp/FFmpeg audio engine."""
        if self._audio_engine is None:
            from ..infrastructure.audio.ytdlp_engine import YtDlpEngine

            self._audio_engine = YtDlpEngine(self.bot, self.settings.audio)
        return self._audio_engine

    @property
    def notification_sink(self) -> NotificationSink:
        """Get the Discord channel notification sink."""
        if self._notification_sink is None:
            from ..infrastructure.discord.adapters.notification_sink import (
                DiscordNotificationSink,
            )

            self._notification_sink = DiscordNotificationSink(self.bot)
        return self._notification_sink

    # === Core Services ===

    @property
    def session_registry(self) -> SessionRegistry:
        if self._session_registry is None:
            from ..application.services.session_registry import SessionRegistry

            self._session_registry = SessionRegistry(
                audio_engine=self.audio_engine,
                default_volume=self.settings.audio.default_volume,
            )
        return self._session_registry

    @property
    def permission_gate(self) -> PermissionGate:
        if self._permission_gate is None:
            from ..application.services.permission_gate import PermissionGate

            self._permission_gate = PermissionGate()
        return self._permission_gate

    @property
    def cooldown_gate(self) -> CooldownGate:
        if self._cooldown_gate is None:
            from ..application.services.cooldown_gate import CooldownGate

            self._cooldown_gate = CooldownGate()
        return self._cooldown_gate

    @property
    def guild_settings_service(self) -> GuildSettingsService:
        if self._guild_settings_service is None:
            from ..application.services.guild_settings import GuildSettingsService

            self._guild_settings_service = GuildSettingsService(
                repository=self.guild_settings_repository,
                default_auto_play=self.settings.guild_defaults.auto_play,
                default_max_queue_size=self.settings.guild_defaults.max_queue_size,
            )
        return self._guild_settings_service

    # === Event Subscribers ===

    @property
    def playback_coordinator(self) -> PlaybackCoordinator:
        if self._playback_coordinator is None:
            from ..application.services.playback_coordinator import PlaybackCoordinator

            self._playback_coordinator = PlaybackCoordinator(registry=self.session_registry)
        return self._playback_coordinator

    @property
    def notification_bridge(self) -> NotificationBridge:
        if self._notification_bridge is None:
            from ..application.services.notification_bridge import NotificationBridge

            self._notification_bridge = NotificationBridge(
                registry=self.session_registry,
                sink=self.notification_sink,
                settings_repository=self.guild_settings_repository,
            )
        return self._notification_bridge

    @property
    def inactivity_monitor(self) -> InactivityMonitor:
        if self._inactivity_monitor is None:
            from ..application.services.inactivity_monitor import InactivityMonitor

            self._inactivity_monitor = InactivityMonitor(
                registry=self.session_registry,
                grace_seconds=self.settings.audio.empty_channel_grace_seconds,
            )
        return self._inactivity_monitor

    @property
    def snapshot_service(self) -> SessionSnapshotService:
        if self._snapshot_service is None:
            from ..application.services.session_snapshots import SessionSnapshotService

            self._snapshot_service = SessionSnapshotService(
                registry=self.session_registry, repository=self.snapshot_repository
            )
        return self._snapshot_service

    # === Query Handlers ===

    @property
    def get_queue_handler(self) -> GetQueueHandler:
        if self._get_queue_handler is None:
            from ..application.queries.get_queue import GetQueueHandler

            self._get_queue_handler = GetQueueHandler(registry=self.session_registry)
        return self._get_queue_handler

    @property
    def now_playing_handler(self) -> NowPlayingHandler:
        if self._now_playing_handler is None:
            from ..application.queries.now_playing import NowPlayingHandler

            self._now_playing_handler = NowPlayingHandler(registry=self.session_registry)
        return self._now_playing_handler

    @property
    def system_stats_handler(self) -> SystemStatsHandler:
        if self._system_stats_handler is None:
            from ..application.queries.system_stats import SystemStatsHandler

            self._system_stats_handler = SystemStatsHandler(registry=self.session_registry)
        return self._system_stats_handler

    # === Command Handlers ===

    @property
    def play_handler(self) -> PlayHandler:
        if self._play_handler is None:
            from ..application.commands.play import PlayHandler

            self._play_handler = PlayHandler(
                registry=self.session_registry,
                audio_engine=self.audio_engine,
                coordinator=self.playback_coordinator,
                guild_settings=self.guild_settings_service,
                default_source=self.settings.audio.search_source,
            )
        return self._play_handler

    @property
    def search_handler(self) -> SearchHandler:
        if self._search_handler is None:
            from ..application.commands.search import SearchHandler

            self._search_handler = SearchHandler(audio_engine=self.audio_engine, play=self.play_handler)
        return self._search_handler

    @property
    def playback_handler(self) -> PlaybackControlHandler:
        if self._playback_handler is None:
            from ..application.commands.playback import PlaybackControlHandler

            self._playback_handler = PlaybackControlHandler(
                registry=self.session_registry,
                permission_gate=self.permission_gate,
                guild_settings=self.guild_settings_service,
                coordinator=self.playback_coordinator,
                max_volume=self.settings.audio.max_volume,
            )
        return self._playback_handler

    @property
    def queue_view_handler(self) -> QueueViewHandler:
        if self._queue_view_handler is None:
            from ..application.commands.queue_view import QueueViewHandler

            self._queue_view_handler = QueueViewHandler(
                queue_query=self.get_queue_handler,
                now_playing_query=self.now_playing_handler,
                page_size=self.settings.commands.queue_page_size,
            )
        return self._queue_view_handler

    @property
    def queue_edit_handler(self) -> QueueEditHandler:
        if self._queue_edit_handler is None:
            from ..application.commands.queue_edit import QueueEditHandler

            self._queue_edit_handler = QueueEditHandler(
                registry=self.session_registry,
                permission_gate=self.permission_gate,
                guild_settings=self.guild_settings_service,
                smart_shuffle_window=self.settings.commands.smart_shuffle_window,
            )
        return self._queue_edit_handler

    @property
    def guild_config_handler(self) -> GuildConfigHandler:
        if self._guild_config_handler is None:
            from ..application.commands.guild_config import GuildConfigHandler

            self._guild_config_handler = GuildConfigHandler(
                guild_settings=self.guild_settings_service,
                permission_gate=self.permission_gate,
                registry=self.session_registry,
            )
        return self._guild_config_handler

    @property
    def system_handler(self) -> SystemCommandHandler:
        """Transport callables (latency, guild count, shutdown) are bound by the bot."""
        if self._system_handler is None:
            from ..application.commands.system import SystemCommandHandler

            self._system_handler = SystemCommandHandler(
                stats_query=self.system_stats_handler,
                definitions=lambda: self.dispatcher.definitions,
                versions=installed_versions(),
                support_url=self.settings.discord.support_url,
            )
        return self._system_handler

    @property
    def dispatcher(self) -> CommandDispatcher:
        """Get the command dispatcher, populated with the full command catalogue."""
        if self._dispatcher is None:
            from ..application.commands.catalogue import build_command_catalogue
            from ..application.commands.dispatcher import CommandDispatcher

            dispatcher = CommandDispatcher(
                cooldown_gate=self.cooldown_gate,
                owner_ids=self.settings.discord.owner_ids,
                default_cooldown_seconds=self.settings.commands.default_cooldown_seconds,
            )
            dispatcher.register_all(
                build_command_catalogue(
                    play=self.play_handler,
                    search=self.search_handler,
                    playback=self.playback_handler,
                    queue_view=self.queue_view_handler,
                    queue_edit=self.queue_edit_handler,
                    guild_config=self.guild_config_handler,
                    system=self.system_handler,
                    max_volume=self.settings.audio.max_volume,
                    skip_max_amount=self.settings.commands.skip_max_amount,
                )
            )
            self._dispatcher = dispatcher
        return self._dispatcher

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        await self.database.initialize()

        # Start cross-cutting subscribers.
        self.playback_coordinator.start()
        self.notification_bridge.start()
        self.inactivity_monitor.start()

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources.

        Live sessions are destroyed after the subscribers stop, so no
        farewell notifications are sent during shutdown.
        """
        for name in ("_notification_bridge", "_inactivity_monitor", "_playback_coordinator"):
            subscriber = getattr(self, name)
            if subscriber is None:
                continue
            try:
                subscriber.stop()
            except Exception as exc:
                logger.warning(LogTemplates.SUBSCRIBER_STOP_FAILED, name.lstrip("_"), exc)

        if self._session_registry is not None:
            await self._session_registry.destroy_all()

        if self._database is not None:
            await self._database.close()


VERSIONED_DISTRIBUTIONS = ("moosek", "discord.py", "yt-dlp", "pydantic")


def installed_versions() -> dict[str, str]:
    """Versions shown by /version; a distribution that is not installed reads as ``unknown``."""
    versions: dict[str, str] = {}
    for name in VERSIONED_DISTRIBUTIONS:
        try:
            versions[name] = metadata.version(name)
        except metadata.PackageNotFoundError:
            versions[name] = "unknown"
    versions["python"] = platform.python_version()
    return versions


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
