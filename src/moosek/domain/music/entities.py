"""Core domain entities for the music bounded context."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from moosek.domain.music.queue import TrackQueue
from moosek.domain.music.value_objects import LoopMode, PlaybackState
from moosek.domain.shared.constants import VolumeConstants
from moosek.domain.shared.datetime_utils import format_duration_ms, utcnow
from moosek.domain.shared.exceptions import InvalidOperationError
from moosek.domain.shared.messages import ErrorMessages
from moosek.domain.shared.types import (
    DiscordSnowflake,
    DurationMs,
    NonEmptyStr,
    TrackTitleStr,
    UtcDatetimeField,
    VolumeInt,
)


class QueueEntry(BaseModel):
    """Immutable track metadata as returned by the audio engine.

    ``requester_id`` is stamped once when the entry is enqueued.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    title: TrackTitleStr
    author: NonEmptyStr = "Unknown"
    uri: NonEmptyStr
    duration_ms: DurationMs = 0
    is_live: bool = False
    is_seekable: bool = True
    thumbnail_url: str | None = None
    stream_url: str | None = None
    requester_id: DiscordSnowflake | None = None

    @property
    def duration_formatted(self) -> str:
        if self.is_live:
            return "LIVE"
        return format_duration_ms(self.duration_ms)

    def with_requester(self, user_id: DiscordSnowflake) -> QueueEntry:
        return self.model_copy(update={"requester_id": user_id})

    def was_requested_by(self, user_id: int) -> bool:
        return self.requester_id == user_id


class GuildSession(BaseModel):
    """Aggregate root holding the playback state for one guild.

    Only the session registry creates and destroys these. Every mutation is
    synchronous so it completes between two suspension points.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    guild_id: DiscordSnowflake
    voice_channel_id: DiscordSnowflake
    text_channel_id: DiscordSnowflake
    queue: TrackQueue = Field(default_factory=TrackQueue)
    current: QueueEntry | None = None
    state: PlaybackState = PlaybackState.STOPPED
    volume: VolumeInt = VolumeConstants.DEFAULT_VOLUME
    loop_mode: LoopMode = LoopMode.NONE
    created_at: UtcDatetimeField = Field(default_factory=utcnow)
    last_activity: UtcDatetimeField = Field(default_factory=utcnow)

    @property
    def is_playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    @property
    def is_paused(self) -> bool:
        return self.state is PlaybackState.PAUSED

    @property
    def has_tracks(self) -> bool:
        return self.current is not None or bool(self.queue)

    def touch(self) -> None:
        self.last_activity = utcnow()

    def update_channels(self, voice_channel_id: int, text_channel_id: int) -> bool:
        """Point the session at new channels; returns True when anything changed."""
        changed = (voice_channel_id, text_channel_id) != (self.voice_channel_id, self.text_channel_id)
        self.voice_channel_id = voice_channel_id
        self.text_channel_id = text_channel_id
        self.touch()
        return changed

    def transition_to(self, new_state: PlaybackState) -> None:
        if not self.state.can_transition_to(new_state):
            raise InvalidOperationError(
                operation=f"transition to {new_state.value}",
                current_state=self.state.value,
                message=ErrorMessages.INVALID_TRANSITION.format(
                    current=self.state.value, target=new_state.value
                ),
            )
        self.state = new_state
        self.touch()

    def begin(self, entry: QueueEntry) -> None:
        """Make ``entry`` the current track and mark the session playing."""
        self.transition_to(PlaybackState.PLAYING)
        self.current = entry

    def start_next(self) -> QueueEntry | None:
        """Promote the queue head when idle; None if the queue is empty."""
        entry = self.queue.pop_next()
        if entry is not None:
            self.begin(entry)
        return entry

    def pause(self) -> None:
        self.transition_to(PlaybackState.PAUSED)

    def resume(self) -> None:
        self.transition_to(PlaybackState.PLAYING)

    def advance(self, *, honour_track_loop: bool = True) -> QueueEntry | None:
        """Apply loop mode to the finished entry and promote the next one.

        Returns the entry that should play now, or None once the queue is
        exhausted (the session is then stopped).
        """
        finished = self.current

        if finished is not None and self.loop_mode is LoopMode.TRACK and honour_track_loop:
            return finished

        if finished is not None and self.loop_mode is LoopMode.QUEUE:
            self.queue.add(finished)

        upcoming = self.queue.pop_next()
        self.current = upcoming
        if upcoming is None:
            self.state = PlaybackState.STOPPED
        elif self.state is not PlaybackState.PLAYING:
            self.state = PlaybackState.PLAYING
        self.touch()
        return upcoming

    def halt(self) -> None:
        """Drop the current entry after the engine refused it; the queue is kept."""
        self.current = None
        self.state = PlaybackState.STOPPED
        self.touch()

    def stop(self) -> int:
        """Terminal stop: clears the queue and current entry; returns entries dropped."""
        dropped = self.queue.clear()
        self.current = None
        self.state = PlaybackState.STOPPED
        self.touch()
        return dropped

    def set_volume(self, volume: int) -> None:
        if not VolumeConstants.MIN_VOLUME <= volume <= VolumeConstants.MAX_VOLUME:
            raise ValueError(ErrorMessages.VOLUME_OUT_OF_RANGE.format(max_volume=VolumeConstants.MAX_VOLUME))
        self.volume = volume
        self.touch()

    def set_loop(self, mode: LoopMode) -> None:
        self.loop_mode = mode
        self.touch()
