"""Discord cogs - command handlers."""

from moosek.infrastructure.discord.cogs.event_cog import EventCog
from moosek.infrastructure.discord.cogs.info_cog import InfoCog
from moosek.infrastructure.discord.cogs.music_cog import MusicCog
from moosek.infrastructure.discord.cogs.queue_cog import QueueCog
from moosek.infrastructure.discord.cogs.settings_cog import SettingsCog

__all__ = [
    "MusicCog",
    "QueueCog",
    "SettingsCog",
    "InfoCog",
    "EventCog",
]
