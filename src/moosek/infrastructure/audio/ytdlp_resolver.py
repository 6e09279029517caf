"""yt-dlp backed resolution of URLs and search queries into queue entries."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Final, cast
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field, field_validator
from yt_dlp import YoutubeDL

from moosek.application.interfaces.audio_engine import LoadResult
from moosek.config.settings import AudioSettings
from moosek.domain.music.entities import QueueEntry
from moosek.domain.music.value_objects import LoadType, SearchSource
from moosek.domain.shared.messages import ErrorMessages, LogTemplates
from moosek.domain.shared.types import NonEmptyStr, NonNegativeFloat, NonNegativeInt, PositiveInt

logger = logging.getLogger(__name__)

CACHE_TTL: Final[int] = 3600
CACHE_MAX_SIZE: Final[int] = 500
DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
DEFAULT_HTTP_CHUNK_SIZE: Final[int] = 1024 * 1024  # 1 MiB
LOG_URL_TRUNCATE: Final[int] = 60
TITLE_MAX_LENGTH: Final[int] = 500
UNKNOWN_TITLE: Final[str] = "Unknown Title"
UNKNOWN_AUTHOR: Final[str] = "Unknown"
YOUTUBE_MUSIC_SEARCH_URL: Final[str] = "https://music.youtube.com/search?q={query}#songs"


# ── Pydantic models for yt-dlp data ────────────────────────────────────


class AudioFormatInfo(BaseModel):
    """A single format entry from yt-dlp extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None


class YtDlpTrackInfo(BaseModel):
    """Trimmed yt-dlp extraction result.

    Extra fields from yt-dlp are ignored. Before-validators coerce the
    garbage yt-dlp sometimes returns instead of rejecting the whole entry.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    webpage_url: NonEmptyStr | None = None
    original_url: NonEmptyStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr = UNKNOWN_TITLE
    duration: NonNegativeInt | None = None
    is_live: bool = False
    thumbnail: NonEmptyStr | None = None
    artist: NonEmptyStr | None = None
    creator: NonEmptyStr | None = None
    uploader: NonEmptyStr | None = None
    channel: NonEmptyStr | None = None
    formats: list[AudioFormatInfo] = Field(default_factory=list)

    @field_validator(
        "id", "webpage_url", "original_url", "url", "thumbnail",
        "artist", "creator", "uploader", "channel",
        mode="before",
    )
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        """Convert empty / whitespace-only / non-string values to None."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return UNKNOWN_TITLE
        return v[:TITLE_MAX_LENGTH]

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> int | None:
        """Coerce to non-negative int; return None for garbage values."""
        if v is None:
            return None
        try:
            val = int(v)
            return val if val >= 0 else None
        except (TypeError, ValueError):
            return None

    @field_validator("is_live", mode="before")
    @classmethod
    def _coerce_live(cls, v: Any) -> bool:
        return bool(v)

    @property
    def page_url(self) -> str | None:
        return self.webpage_url or self.original_url

    @property
    def stream_url(self) -> str | None:
        """Direct media URL, preferring the top-level one yt-dlp picked."""
        if self.url and self.url != self.webpage_url:
            return self.url
        audio_formats = [f for f in self.formats if f.acodec != "none" and f.url]
        if audio_formats:
            return audio_formats[-1].url
        return None


class CacheEntry(BaseModel):
    """Cached yt-dlp extraction result with its timestamp."""

    model_config = ConfigDict(frozen=True)

    info: YtDlpTrackInfo | None = None
    cached_at: NonNegativeFloat


class YtDlpOpts(BaseModel):
    """Typed yt-dlp options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    default_search: NonEmptyStr = SearchSource.YOUTUBE.value
    forceipv4: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    http_chunk_size: PositiveInt = DEFAULT_HTTP_CHUNK_SIZE
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False
    playlist_items: NonEmptyStr | None = None


# ── Module-level state and patterns ────────────────────────────────────

_info_cache: dict[str, CacheEntry] = {}

URL_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"^https?://"),
    re.compile(r"^www\."),
]

PLAYLIST_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"[?&]list="),
    re.compile(r"/playlist\?"),
    re.compile(r"/sets/"),
    re.compile(r"/album/"),
]


def is_url(query: str) -> bool:
    return any(p.search(query) for p in URL_PATTERNS)


def is_playlist_url(query: str) -> bool:
    return is_url(query) and any(p.search(query) for p in PLAYLIST_PATTERNS)


def clear_info_cache() -> None:
    _info_cache.clear()


class YtDlpResolver:
    """Turns queries into ``LoadResult``s without ever raising.

    Every blocking yt-dlp call runs in a worker thread. Single-item lookups
    are cached per URL for ``CACHE_TTL`` seconds.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(format=self._settings.ytdlp_format)

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _get_playlist_opts(self) -> YtDlpOpts:
        return self._get_opts(noplaylist=False, extract_flat="in_playlist")

    @staticmethod
    def _parse_info(data: dict[str, Any]) -> YtDlpTrackInfo:
        return YtDlpTrackInfo.model_validate(data)

    @staticmethod
    def to_entry(info: YtDlpTrackInfo, *, with_stream: bool = True) -> QueueEntry | None:
        """Map a yt-dlp record onto a queue entry; None when it has no usable URL.

        Flat playlist records only carry the page URL, so ``with_stream=False``
        leaves the stream to be fetched when the entry is played.
        """
        uri = info.page_url or info.url
        if not uri:
            return None

        author = info.artist or info.creator or info.uploader or info.channel or UNKNOWN_AUTHOR
        duration_ms = (info.duration or 0) * 1000
        return QueueEntry(
            title=info.title,
            author=author,
            uri=uri,
            duration_ms=duration_ms,
            is_live=info.is_live,
            is_seekable=not info.is_live and duration_ms > 0,
            thumbnail_url=info.thumbnail,
            stream_url=info.stream_url if with_stream else None,
        )

    # ── blocking helpers (run via asyncio.to_thread) ──

    def _extract_info_sync(self, url: str) -> YtDlpTrackInfo | None:
        now = time.time()
        cached = _info_cache.get(url)
        if cached is not None:
            if now - cached.cached_at < CACHE_TTL:
                logger.debug(LogTemplates.YTDLP_CACHE_HIT, url[:LOG_URL_TRUNCATE])
                return cached.info
            _info_cache.pop(url, None)

        with YoutubeDL(params=cast(Any, self._get_opts().model_dump())) as ydl:
            data = ydl.extract_info(url, download=False)

        if isinstance(data, dict) and data.get("entries"):
            # A search-like URL; take the first real entry.
            entries = [e for e in data["entries"] if isinstance(e, dict)]
            data = entries[0] if entries else None
        result = self._parse_info(dict(data)) if isinstance(data, dict) else None

        _info_cache[url] = CacheEntry(info=result, cached_at=now)
        if len(_info_cache) > CACHE_MAX_SIZE:
            expired = [k for k, entry in _info_cache.items() if now - entry.cached_at >= CACHE_TTL]
            for k in expired:
                _info_cache.pop(k, None)
            if expired:
                logger.debug(LogTemplates.YTDLP_CACHE_EXPIRED, len(expired))

        return result

    def _search_sync(self, query: str, source: SearchSource, limit: int = 1) -> list[YtDlpTrackInfo]:
        if source is SearchSource.YOUTUBE_MUSIC:
            # yt-dlp has no search prefix for YouTube Music; its search page is a playlist.
            search_query = YOUTUBE_MUSIC_SEARCH_URL.format(query=quote_plus(query))
            opts = self._get_opts(noplaylist=False, playlist_items=f"1:{limit}")
        else:
            search_query = f"{source.value}{limit}:{query}"
            opts = self._get_opts()
        with YoutubeDL(params=cast(Any, opts.model_dump())) as ydl:
            data = ydl.extract_info(search_query, download=False)

        if not isinstance(data, dict):
            return []
        entries = data.get("entries") or []
        return [self._parse_info(dict(e)) for e in entries if isinstance(e, dict)]

    def _extract_playlist_sync(self, url: str) -> tuple[str | None, list[YtDlpTrackInfo]]:
        with YoutubeDL(params=cast(Any, self._get_playlist_opts().model_dump())) as ydl:
            data = ydl.extract_info(url, download=False)

        if not isinstance(data, dict):
            return None, []
        entries = data.get("entries") or []
        title = data.get("title") if isinstance(data.get("title"), str) else None
        return title, [self._parse_info(dict(e)) for e in entries if isinstance(e, dict)]

    # ── async API ──

    async def resolve(self, query: str, source: SearchSource) -> LoadResult:
        return await self._load(query, source, limit=1)

    async def search(self, query: str, source: SearchSource, limit: int) -> LoadResult:
        """Resolve ``query`` keeping up to ``limit`` search hits; URLs resolve as usual."""
        return await self._load(query, source, limit=max(1, limit))

    async def _load(self, query: str, source: SearchSource, *, limit: int) -> LoadResult:
        query = query.strip()
        try:
            if is_playlist_url(query):
                result = await self._resolve_playlist(query)
            elif is_url(query):
                info = await asyncio.to_thread(self._extract_info_sync, query)
                result = self._single(LoadType.TRACK, info)
            else:
                infos = await asyncio.to_thread(self._search_sync, query, source, limit)
                result = self._many(LoadType.SEARCH, infos)
        except Exception as exc:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, query)
            return LoadResult.failed(str(exc) or ErrorMessages.LOAD_FAILED.format(query=query))

        logger.debug(
            LogTemplates.YTDLP_RESOLVED,
            query[:LOG_URL_TRUNCATE],
            source.value,
            result.load_type.value,
            len(result.tracks),
        )
        return result

    async def refresh_stream(self, entry: QueueEntry) -> QueueEntry:
        """Return ``entry`` with a fresh stream URL.

        Raises:
            LookupError: yt-dlp produced nothing playable for the entry.
        """
        _info_cache.pop(entry.uri, None)
        info = await asyncio.to_thread(self._extract_info_sync, entry.uri)
        stream_url = info.stream_url if info is not None else None
        if not stream_url:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, entry.title)
            raise LookupError(ErrorMessages.STREAM_UNAVAILABLE.format(title=entry.title))
        return entry.model_copy(update={"stream_url": stream_url})

    def _single(self, load_type: LoadType, info: YtDlpTrackInfo | None) -> LoadResult:
        entry = self.to_entry(info) if info is not None else None
        if entry is None:
            return LoadResult.empty()
        return LoadResult(load_type=load_type, tracks=[entry])

    def _many(self, load_type: LoadType, infos: list[YtDlpTrackInfo]) -> LoadResult:
        tracks = [entry for entry in map(self.to_entry, infos) if entry is not None]
        if not tracks:
            return LoadResult.empty()
        return LoadResult(load_type=load_type, tracks=tracks)

    async def _resolve_playlist(self, url: str) -> LoadResult:
        name, infos = await asyncio.to_thread(self._extract_playlist_sync, url)
        tracks: list[QueueEntry] = []
        for info in infos:
            entry = self.to_entry(info, with_stream=False)
            if entry is None:
                logger.debug(LogTemplates.YTDLP_ENTRY_SKIPPED, url[:LOG_URL_TRUNCATE])
                continue
            tracks.append(entry)

        if not tracks:
            return LoadResult.empty()
        return LoadResult(load_type=LoadType.PLAYLIST, tracks=tracks, playlist_name=name)
