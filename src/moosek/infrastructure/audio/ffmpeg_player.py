"""
FFmpeg Audio Player

Per-guild ``Player`` that streams entries through a discord.py voice client.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import discord

from moosek.application.interfaces.audio_engine import Player
from moosek.config.settings import AudioSettings
from moosek.domain.music.value_objects import LoopMode, TrackEndReason
from moosek.domain.shared.events import TrackEnded, TrackErrored, TrackStarted, get_event_bus
from moosek.domain.shared.exceptions import CollaboratorFailureError
from moosek.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...domain.music.entities import QueueEntry
    from .ytdlp_resolver import YtDlpResolver

logger = logging.getLogger(__name__)

FADE_IN_SECONDS: float = 0.5

# Matches yt-dlp's Android client user-agent to avoid YouTube 403 responses
ANDROID_USER_AGENT = "com.google.android.youtube/19.44.38 (Linux; U; Android 14) gzip"


@dataclass
class _Playback:
    """One run of an entry through FFmpeg.

    ``end_reason`` is set by whoever interrupts the run. A ``silent`` run
    (superseded by a seek) publishes nothing when it ends.
    """

    entry: QueueEntry
    stream_url: str
    end_reason: TrackEndReason | None = None
    silent: bool = False
    base_ms: int = 0
    resumed_at: float | None = field(default_factory=time.monotonic)

    def position_ms(self) -> int:
        if self.resumed_at is None:
            return self.base_ms
        return self.base_ms + int((time.monotonic() - self.resumed_at) * 1000)


class FFmpegPlayer(Player):
    """Plays one guild's entries and reports their lifecycle on the event bus.

    discord.py invokes the ``after`` callback on its audio thread, so end
    events are handed back to the bot loop with ``run_coroutine_threadsafe``.
    """

    def __init__(
        self,
        voice_client: discord.VoiceClient,
        *,
        guild_id: int,
        resolver: YtDlpResolver,
        settings: AudioSettings | None = None,
        volume: int = 50,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.guild_id = guild_id
        self._vc = voice_client
        self._resolver = resolver
        self._settings = settings or AudioSettings()
        self._volume = volume
        self._loop_mode = LoopMode.NONE
        self._loop = loop or asyncio.get_running_loop()
        self._bus = get_event_bus()
        self._current: _Playback | None = None
        self._destroyed = False

    # ── source construction ──

    def _create_source(self, stream_url: str, start_ms: int) -> discord.PCMVolumeTransformer:
        base_before_opts = self._settings.ffmpeg_options.get("before_options", "")
        before_opts = f'{base_before_opts} -headers "User-Agent: {ANDROID_USER_AGENT}"'
        if start_ms > 0:
            before_opts = f"-ss {start_ms / 1000:.3f} {before_opts}"

        options = self._settings.ffmpeg_options.get("options", "")
        if start_ms == 0:
            options = f'{options} -af "afade=t=in:ss=0:d={FADE_IN_SECONDS}"'

        source = discord.FFmpegPCMAudio(
            stream_url,
            before_options=before_opts.strip(),
            options=options.strip(),
        )
        return discord.PCMVolumeTransformer(source, volume=self._volume / 100)

    def _after_callback(self, playback: _Playback) -> Callable[[Exception | None], None]:
        def after(error: Exception | None = None) -> None:
            if playback.silent:
                return
            if error is not None:
                logger.warning(LogTemplates.PLAYBACK_SOURCE_ERROR, self.guild_id, error)
                event = TrackErrored(guild_id=self.guild_id, entry=playback.entry, error=str(error))
            else:
                event = TrackEnded(
                    guild_id=self.guild_id,
                    entry=playback.entry,
                    reason=playback.end_reason or TrackEndReason.FINISHED,
                )
            if self._current is playback:
                self._current = None
            asyncio.run_coroutine_threadsafe(self._bus.publish(event), self._loop)

        return after

    async def _start(self, entry: QueueEntry, start_ms: int, stream_url: str | None = None) -> _Playback:
        stream_url = stream_url or entry.stream_url
        if not stream_url:
            try:
                refreshed = await self._resolver.refresh_stream(entry)
            except Exception as exc:
                raise CollaboratorFailureError(
                    "audio_engine", ErrorMessages.STREAM_UNAVAILABLE.format(title=entry.title)
                ) from exc
            stream_url = refreshed.stream_url

        playback = _Playback(entry=entry, stream_url=stream_url, base_ms=start_ms)
        try:
            source = self._create_source(stream_url, start_ms)
            self._vc.play(source, after=self._after_callback(playback))
        except discord.ClientException as exc:
            logger.error(LogTemplates.PLAYBACK_FAILED_START, self.guild_id, exc)
            raise CollaboratorFailureError(
                "audio_engine", ErrorMessages.PLAYBACK_START_FAILED.format(error=exc)
            ) from exc
        self._current = playback
        return playback

    def _interrupt(self, reason: TrackEndReason | None, *, silent: bool = False) -> None:
        playback = self._current
        if playback is None:
            return
        playback.end_reason = reason
        playback.silent = silent
        if self._vc.is_playing() or self._vc.is_paused():
            self._vc.stop()

    # ── Player API ──

    async def play(self, entry: QueueEntry, *, start_ms: int = 0) -> None:
        self._interrupt(TrackEndReason.REPLACED)
        playback = await self._start(entry, start_ms)
        logger.info(LogTemplates.TRACK_STARTED, playback.entry.title, self.guild_id)
        await self._bus.publish(TrackStarted(guild_id=self.guild_id, entry=entry))

    async def pause(self) -> None:
        playback = self._current
        if playback is None or not self._vc.is_playing():
            return
        self._vc.pause()
        playback.base_ms = playback.position_ms()
        playback.resumed_at = None

    async def resume(self) -> None:
        playback = self._current
        if playback is None or not self._vc.is_paused():
            return
        self._vc.resume()
        playback.resumed_at = time.monotonic()

    async def stop(self) -> None:
        self._interrupt(TrackEndReason.STOPPED)

    async def seek(self, position_ms: int) -> None:
        playback = self._current
        if playback is None:
            return
        logger.debug(LogTemplates.FFMPEG_SEEK, position_ms, self.guild_id)
        was_paused = self._vc.is_paused()
        self._interrupt(None, silent=True)
        restarted = await self._start(playback.entry, position_ms, playback.stream_url)
        if was_paused:
            self._vc.pause()
            restarted.resumed_at = None

    async def set_volume(self, volume: int) -> None:
        self._volume = volume
        source = self._vc.source
        if isinstance(source, discord.PCMVolumeTransformer):
            source.volume = volume / 100

    async def set_loop(self, mode: LoopMode) -> None:
        # Looping is driven by the session; the player only remembers the mode.
        self._loop_mode = mode

    async def move_to(self, voice_channel_id: int) -> None:
        channel = self._vc.guild.get_channel(voice_channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, voice_channel_id)
            return
        await self._vc.move_to(channel)
        logger.info(LogTemplates.VOICE_MOVED, channel.name, self.guild_id)

    @property
    def position_ms(self) -> int:
        return self._current.position_ms() if self._current is not None else 0

    @property
    def is_connected(self) -> bool:
        return not self._destroyed and self._vc.is_connected()

    async def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        self._interrupt(TrackEndReason.CLEANUP)
        try:
            await self._vc.disconnect(force=True)
            logger.info(LogTemplates.VOICE_DISCONNECTED, self.guild_id)
        except (discord.ClientException, discord.HTTPException, OSError) as exc:
            logger.warning(LogTemplates.VOICE_DISCONNECT_FAILED, self.guild_id, exc)
