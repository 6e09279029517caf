"""Audio infrastructure - yt-dlp resolver, FFmpeg player and the engine tying them together."""

from moosek.infrastructure.audio.ffmpeg_player import FFmpegPlayer
from moosek.infrastructure.audio.ytdlp_engine import YtDlpEngine
from moosek.infrastructure.audio.ytdlp_resolver import (
    AudioFormatInfo,
    CacheEntry,
    YtDlpOpts,
    YtDlpResolver,
    YtDlpTrackInfo,
)

__all__ = [
    "AudioFormatInfo",
    "CacheEntry",
    "FFmpegPlayer",
    "YtDlpEngine",
    "YtDlpOpts",
    "YtDlpResolver",
    "YtDlpTrackInfo",
]
