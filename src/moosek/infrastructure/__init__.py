"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite repositories)
- Discord (bot, cogs, adapters)
- Audio (yt-dlp, FFmpeg)
"""

from moosek.infrastructure.audio.ytdlp_engine import YtDlpEngine
from moosek.infrastructure.discord.bot import create_bot
from moosek.infrastructure.persistence.database import Database

__all__ = [
    "create_bot",
    "Database",
    "YtDlpEngine",
]
