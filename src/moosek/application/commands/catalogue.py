"""The full command table: names, options, cooldowns and the handler for each."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...domain.music.value_objects import LoopMode, QueueFilter, QueueSort, SearchKind, SearchSource, ShuffleMode
from ...domain.shared.constants import (
    GuildDefaultsConstants,
    QueueConstants,
    SearchConstants,
    VolumeConstants,
)
from .base import CommandDefinition, OptionKind, OptionSpec

if TYPE_CHECKING:
    from .guild_config import GuildConfigHandler
    from .play import PlayHandler
    from .playback import PlaybackControlHandler
    from .queue_edit import QueueEditHandler
    from .queue_view import QueueViewHandler
    from .search import SearchHandler
    from .system import SystemCommandHandler


def _values(enum_cls) -> tuple[str, ...]:
    return tuple(member.value for member in enum_cls)


def build_command_catalogue(
    *,
    play: PlayHandler,
    search: SearchHandler,
    playback: PlaybackControlHandler,
    queue_view: QueueViewHandler,
    queue_edit: QueueEditHandler,
    guild_config: GuildConfigHandler,
    system: SystemCommandHandler,
    max_volume: int = VolumeConstants.MAX_VOLUME,
    skip_max_amount: int = QueueConstants.SKIP_MAX_AMOUNT,
) -> list[CommandDefinition]:
    return [
        # Playback
        CommandDefinition(
            name="play",
            description="Play a song or add it to the queue",
            handler=play.handle,
            options=(
                OptionSpec(name="query", kind=OptionKind.STRING, description="Song name, URL or playlist", required=True),
                OptionSpec(
                    name="source",
                    kind=OptionKind.STRING,
                    description="Where to search",
                    choices=_values(SearchSource),
                ),
            ),
            cooldown_seconds=3,
            category="playback",
        ),
        CommandDefinition(
            name="search",
            description="Search for music and pick what to queue",
            handler=search.search,
            options=(
                OptionSpec(name="query", kind=OptionKind.STRING, description="Song, artist or playlist URL", required=True),
                OptionSpec(
                    name="platform",
                    kind=OptionKind.STRING,
                    description="Where to search",
                    choices=_values(SearchSource),
                ),
                OptionSpec(
                    name="type",
                    kind=OptionKind.STRING,
                    description="Kind of result to accept",
                    choices=_values(SearchKind),
                    default=SearchKind.ALL.value,
                ),
                OptionSpec(
                    name="limit",
                    kind=OptionKind.INTEGER,
                    description="Number of results",
                    min_value=1,
                    max_value=SearchConstants.MAX_LIMIT,
                    default=SearchConstants.DEFAULT_LIMIT,
                ),
            ),
            cooldown_seconds=SearchConstants.COOLDOWN_SECONDS,
            category="playback",
        ),
        CommandDefinition(
            name="skip",
            description="Skip the current track, or several",
            handler=playback.skip,
            options=(
                OptionSpec(
                    name="amount",
                    kind=OptionKind.INTEGER,
                    description="How many tracks to skip",
                    min_value=1,
                    max_value=skip_max_amount,
                    default=1,
                ),
            ),
            cooldown_seconds=2,
            category="playback",
        ),
        CommandDefinition(
            name="pause", description="Pause playback", handler=playback.pause, cooldown_seconds=2, category="playback"
        ),
        CommandDefinition(
            name="resume", description="Resume playback", handler=playback.resume, cooldown_seconds=2, category="playback"
        ),
        CommandDefinition(
            name="stop",
            description="Stop playback, clear the queue and leave voice",
            handler=playback.stop,
            cooldown_seconds=3,
            category="playback",
        ),
        CommandDefinition(
            name="seek",
            description="Jump to a position in the current track",
            handler=playback.seek,
            options=(
                OptionSpec(
                    name="position", kind=OptionKind.INTEGER, description="Position in seconds", required=True, min_value=0
                ),
            ),
            cooldown_seconds=2,
            category="playback",
        ),
        CommandDefinition(
            name="volume",
            description="Set the playback volume",
            handler=playback.volume,
            options=(
                OptionSpec(
                    name="level",
                    kind=OptionKind.INTEGER,
                    description=f"Volume level ({VolumeConstants.MIN_VOLUME}-{max_volume})",
                    required=True,
                    min_value=VolumeConstants.MIN_VOLUME,
                    max_value=max_volume,
                ),
            ),
            cooldown_seconds=2,
            category="playback",
        ),
        CommandDefinition(
            name="loop",
            description="Set the loop mode",
            handler=playback.loop,
            options=(
                OptionSpec(name="mode", kind=OptionKind.STRING, required=True, choices=_values(LoopMode)),
            ),
            cooldown_seconds=2,
            category="playback",
        ),
        CommandDefinition(
            name="nowplaying",
            description="Show the current track",
            handler=queue_view.now_playing,
            cooldown_seconds=2,
            category="playback",
        ),
        # Queue
        CommandDefinition(
            name="queue",
            description="Show the queue",
            handler=queue_view.queue,
            options=(
                OptionSpec(name="page", kind=OptionKind.INTEGER, min_value=1, default=1),
                OptionSpec(name="filter", kind=OptionKind.STRING, choices=_values(QueueFilter)),
                OptionSpec(name="sort", kind=OptionKind.STRING, choices=_values(QueueSort)),
            ),
            cooldown_seconds=3,
            category="queue",
        ),
        CommandDefinition(
            name="shuffle",
            description="Shuffle the queue",
            handler=queue_edit.shuffle,
            options=(
                OptionSpec(
                    name="type",
                    kind=OptionKind.STRING,
                    choices=_values(ShuffleMode),
                    default=ShuffleMode.NORMAL.value,
                ),
            ),
            cooldown_seconds=3,
            category="queue",
        ),
        CommandDefinition(
            name="remove",
            description="Remove a track from the queue",
            handler=queue_edit.remove,
            options=(OptionSpec(name="position", kind=OptionKind.INTEGER, required=True, min_value=1),),
            cooldown_seconds=2,
            category="queue",
        ),
        CommandDefinition(
            name="move",
            description="Move a track to another position",
            handler=queue_edit.move,
            options=(
                OptionSpec(name="from", kind=OptionKind.INTEGER, required=True, min_value=1),
                OptionSpec(name="to", kind=OptionKind.INTEGER, required=True, min_value=1),
            ),
            cooldown_seconds=2,
            category="queue",
        ),
        CommandDefinition(
            name="clear", description="Clear the queue", handler=queue_edit.clear, cooldown_seconds=3, category="queue"
        ),
        # DJ / admin
        CommandDefinition(
            name="dj set",
            description="Set the DJ role",
            handler=guild_config.dj_set,
            options=(OptionSpec(name="role", kind=OptionKind.ROLE, required=True),),
            cooldown_seconds=5,
            category="settings",
        ),
        CommandDefinition(
            name="dj remove",
            description="Remove the DJ role",
            handler=guild_config.dj_remove,
            cooldown_seconds=5,
            category="settings",
        ),
        CommandDefinition(
            name="dj list",
            description="Show who can control playback",
            handler=guild_config.dj_list,
            cooldown_seconds=3,
            category="settings",
        ),
        CommandDefinition(
            name="admin settings",
            description="Show this server's settings",
            handler=guild_config.show_settings,
            cooldown_seconds=5,
            category="settings",
        ),
        CommandDefinition(
            name="admin config",
            description="Change this server's settings",
            handler=guild_config.configure,
            options=(
                OptionSpec(name="auto_play", kind=OptionKind.BOOLEAN),
                OptionSpec(name="max_queue_size", kind=OptionKind.INTEGER, min_value=1, max_value=GuildDefaultsConstants.MAX_QUEUE_SIZE_LIMIT),
                OptionSpec(name="music_channel", kind=OptionKind.CHANNEL),
            ),
            cooldown_seconds=5,
            category="settings",
        ),
        CommandDefinition(
            name="admin reset",
            description="Reset this server's settings",
            handler=guild_config.reset,
            cooldown_seconds=10,
            category="settings",
        ),
        # General
        CommandDefinition(name="ping", description="Check latency", handler=system.ping, cooldown_seconds=3),
        CommandDefinition(name="stats", description="Show bot statistics", handler=system.stats, cooldown_seconds=5),
        CommandDefinition(name="help", description="List commands", handler=system.help, cooldown_seconds=3),
        CommandDefinition(name="uptime", description="Show how long the bot has been up", handler=system.uptime, cooldown_seconds=3),
        CommandDefinition(name="version", description="Show version information", handler=system.version, cooldown_seconds=3),
        CommandDefinition(name="invite", description="Get the bot invite link", handler=system.invite, cooldown_seconds=3),
        CommandDefinition(name="support", description="Get help and the support server link", handler=system.support, cooldown_seconds=3),
        CommandDefinition(
            name="shutdown",
            description="Shut the bot down",
            handler=system.shutdown,
            cooldown_seconds=0,
            owner_only=True,
        ),
    ]
