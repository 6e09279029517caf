"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum

from moosek.domain.shared.messages import EmojiConstants


class PlaybackState(Enum):
    """Playback state with enforced transitions.

    State transitions:
    - STOPPED -> PLAYING (play)
    - PLAYING -> PAUSED (pause)
    - PAUSED -> PLAYING (resume)
    - PLAYING/PAUSED -> STOPPED (queue exhausted, stop, destroy)
    - PLAYING -> PLAYING (next entry promoted, track replaced)
    """

    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"

    def can_transition_to(self, target: PlaybackState) -> bool:
        valid_transitions = {
            PlaybackState.STOPPED: {PlaybackState.PLAYING, PlaybackState.STOPPED},
            PlaybackState.PLAYING: {
                PlaybackState.PLAYING,
                PlaybackState.PAUSED,
                PlaybackState.STOPPED,
            },
            PlaybackState.PAUSED: {PlaybackState.PLAYING, PlaybackState.STOPPED},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_active(self) -> bool:
        return self in {PlaybackState.PLAYING, PlaybackState.PAUSED}


class LoopMode(Enum):
    """Loop mode settings for queue playback."""

    NONE = "none"
    TRACK = "track"  # repeat current entry
    QUEUE = "queue"  # re-append finished entries

    @property
    def emoji(self) -> str:
        return {
            LoopMode.NONE: EmojiConstants.LOOP_NONE,
            LoopMode.TRACK: EmojiConstants.LOOP_TRACK,
            LoopMode.QUEUE: EmojiConstants.LOOP_QUEUE,
        }[self]

    @property
    def label(self) -> str:
        return "Off" if self is LoopMode.NONE else self.value.title()


class LoadType(Enum):
    """Outcome category of an audio-engine resolve call."""

    TRACK = "track"
    SEARCH = "search"
    PLAYLIST = "playlist"
    EMPTY = "empty"
    ERROR = "error"


class SearchSource(Enum):
    """Search prefixes understood by the audio engine."""

    YOUTUBE_MUSIC = "ytmsearch"
    YOUTUBE = "ytsearch"
    SOUNDCLOUD = "scsearch"

    @classmethod
    def parse(cls, value: str | None, default: SearchSource) -> SearchSource:
        if not value:
            return default
        return cls(value.strip().lower())


class TrackEndReason(Enum):
    """Why the engine stopped emitting audio for an entry."""

    FINISHED = "finished"
    LOAD_FAILED = "load_failed"
    STOPPED = "stopped"
    REPLACED = "replaced"
    CLEANUP = "cleanup"

    @property
    def may_start_next(self) -> bool:
        """Whether the queue should advance after this end."""
        return self in {TrackEndReason.FINISHED, TrackEndReason.LOAD_FAILED, TrackEndReason.STOPPED}

    @property
    def is_reportable(self) -> bool:
        return self in {TrackEndReason.FINISHED, TrackEndReason.STOPPED}


class QueueFilter(Enum):
    ALL = "all"
    USER = "user"
    SHORT = "short"
    LONG = "long"
    LIVE = "live"


class QueueSort(Enum):
    ADDED = "added"
    DURATION_ASC = "duration_asc"
    DURATION_DESC = "duration_desc"
    ARTIST_ASC = "artist_asc"
    TITLE_ASC = "title_asc"


class DurationBand(Enum):
    SHORT = "short"
    LONG = "long"


class ShuffleMode(Enum):
    NORMAL = "normal"
    SMART = "smart"


class SearchKind(Enum):
    """Which kind of /search result the caller will accept."""

    ALL = "all"
    TRACKS = "tracks"
    PLAYLISTS = "playlists"

    def accepts(self, load_type: LoadType) -> bool:
        if self is SearchKind.ALL:
            return True
        return (load_type is LoadType.PLAYLIST) == (self is SearchKind.PLAYLISTS)
