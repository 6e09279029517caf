"""Centralized constants for the database schema, limits and defaults."""

from __future__ import annotations


class DatabaseTables:
    GUILD_SETTINGS = "guild_settings"
    SESSION_SNAPSHOTS = "session_snapshots"
    SNAPSHOT_ENTRIES = "snapshot_entries"


class SQLPragmas:
    """SQLite PRAGMA statements."""

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    FOREIGN_KEYS_ON = "PRAGMA foreign_keys=ON"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"
    PAGE_COUNT = "PRAGMA page_count"


class QueueConstants:
    PAGE_SIZE = 8
    SHORT_TRACK_MS = 180_000
    LONG_TRACK_MS = 300_000
    SMART_SHUFFLE_WINDOW = 5
    SKIP_MAX_AMOUNT = 10


class SearchConstants:
    DEFAULT_LIMIT = 10
    MAX_LIMIT = 25
    COOLDOWN_SECONDS = 5


class VolumeConstants:
    MIN_VOLUME = 0
    MAX_VOLUME = 1000
    DEFAULT_VOLUME = 50


class CommandConstants:
    DEFAULT_COOLDOWN_SECONDS = 3
    COLLECTOR_TIMEOUT_SECONDS = 300.0
    EMPTY_CHANNEL_GRACE_SECONDS = 120.0
    # Permission bits requested by the /invite link.
    INVITE_PERMISSIONS = 3148800


class GuildDefaultsConstants:
    AUTO_PLAY = True
    MAX_QUEUE_SIZE = 100
    MAX_QUEUE_SIZE_LIMIT = 1000


class DestroyReasons:
    """Reason strings attached to SessionDestroyed events."""

    STOPPED = "stopped"
    QUEUE_ENDED = "queue_ended"
    INACTIVITY = "inactivity"
    BOT_DISCONNECTED = "bot_disconnected"
    GUILD_REMOVED = "guild_removed"
    SETTINGS_RESET = "settings_reset"
    SHUTDOWN = "shutdown"
