"""AudioEngine implementation: yt-dlp for resolution, FFmpeg over Discord voice for playback."""

from __future__ import annotations

import asyncio
import logging

import discord

from moosek.application.interfaces.audio_engine import AudioEngine, LoadResult, Player
from moosek.config.settings import AudioSettings
from moosek.domain.music.value_objects import SearchSource
from moosek.domain.shared.exceptions import CollaboratorFailureError
from moosek.domain.shared.messages import ErrorMessages, LogTemplates

from .ffmpeg_player import FFmpegPlayer
from .ytdlp_resolver import YtDlpResolver

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 10.0


class YtDlpEngine(AudioEngine):
    def __init__(
        self,
        bot: discord.Client,
        settings: AudioSettings | None = None,
        resolver: YtDlpResolver | None = None,
    ) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._resolver = resolver or YtDlpResolver(self._settings)

    @property
    def is_available(self) -> bool:
        return self._bot.is_ready()

    async def resolve(self, query: str, source: SearchSource) -> LoadResult:
        return await self._resolver.resolve(query, source)

    async def search(self, query: str, source: SearchSource, limit: int) -> LoadResult:
        return await self._resolver.search(query, source, limit)

    async def create_connection(
        self,
        guild_id: int,
        voice_channel_id: int,
        text_channel_id: int,
        volume: int,
    ) -> Player:
        failure = CollaboratorFailureError(
            "audio_engine", ErrorMessages.VOICE_CONNECT_FAILED.format(channel_id=voice_channel_id)
        )

        guild = self._bot.get_guild(guild_id)
        if guild is None:
            logger.warning(LogTemplates.GUILD_NOT_FOUND, guild_id)
            raise failure

        channel = guild.get_channel(voice_channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, voice_channel_id)
            raise failure

        voice_client = await self._connect(guild, channel, failure)
        return FFmpegPlayer(
            voice_client,
            guild_id=guild_id,
            resolver=self._resolver,
            settings=self._settings,
            volume=volume,
            loop=self._bot.loop,
        )

    async def _connect(
        self,
        guild: discord.Guild,
        channel: discord.VoiceChannel | discord.StageChannel,
        failure: CollaboratorFailureError,
    ) -> discord.VoiceClient:
        existing = guild.voice_client
        if isinstance(existing, discord.VoiceClient):
            if existing.is_connected():
                # Left over from a session that was destroyed without a clean disconnect.
                if existing.channel is None or existing.channel.id != channel.id:
                    await existing.move_to(channel)
                return existing
            await existing.disconnect(force=True)

        try:
            async with asyncio.timeout(CONNECT_TIMEOUT):
                voice_client = await channel.connect(self_deaf=True)
        except TimeoutError as exc:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel.id)
            raise failure from exc
        except discord.Forbidden as exc:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel.id)
            raise failure from exc
        except discord.ClientException as exc:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, exc)
            raise failure from exc

        logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
        return voice_client
