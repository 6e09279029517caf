"""Ordered per-session track queue with shuffle variants and display projections."""

from __future__ import annotations

import random
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from moosek.domain.music.value_objects import DurationBand, QueueFilter, QueueSort
from moosek.domain.shared.constants import QueueConstants

if TYPE_CHECKING:
    from moosek.domain.music.entities import QueueEntry


@dataclass(frozen=True, slots=True)
class QueueStats:
    """Aggregate figures over a queue (live entries count but add no duration)."""

    count: int
    total_ms: int
    live_count: int

    @property
    def average_ms(self) -> int:
        timed = self.count - self.live_count
        return self.total_ms // timed if timed > 0 else 0


def _in_band(entry: QueueEntry, band: DurationBand) -> bool:
    if entry.is_live:
        return False
    if band is DurationBand.SHORT:
        return entry.duration_ms < QueueConstants.SHORT_TRACK_MS
    return entry.duration_ms > QueueConstants.LONG_TRACK_MS


def _sort_pairs(pairs: list[tuple[int, QueueEntry]], sort: QueueSort) -> list[tuple[int, QueueEntry]]:
    # sorted() is stable, so ties keep insertion order.
    if sort is QueueSort.DURATION_ASC:
        return sorted(pairs, key=lambda p: p[1].duration_ms)
    if sort is QueueSort.DURATION_DESC:
        return sorted(pairs, key=lambda p: p[1].duration_ms, reverse=True)
    if sort is QueueSort.ARTIST_ASC:
        return sorted(pairs, key=lambda p: p[1].author.casefold())
    if sort is QueueSort.TITLE_ASC:
        return sorted(pairs, key=lambda p: p[1].title.casefold())
    return list(pairs)


class TrackQueue:
    """Mutable sequence of pending entries.

    Positions are zero-based here; commands translate from the one-based
    positions users type. Range checks belong to the caller, so ``remove``
    and ``move`` raise ``IndexError`` when handed a bad index.
    """

    def __init__(self, entries: list[QueueEntry] | None = None, *, rng: random.Random | None = None) -> None:
        self._entries: list[QueueEntry] = list(entries or [])
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[QueueEntry]:
        return iter(list(self._entries))

    def __getitem__(self, index: int) -> QueueEntry:
        return self._entries[index]

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return f"TrackQueue(len={len(self._entries)})"

    @property
    def entries(self) -> list[QueueEntry]:
        """Snapshot copy of the entries in playback order."""
        return list(self._entries)

    # ── Mutations ───────────────────────────────────────────────────

    def add(self, entry: QueueEntry) -> int:
        """Append and return the new length. Capacity is the caller's concern."""
        self._entries.append(entry)
        return len(self._entries)

    def extend(self, entries: list[QueueEntry]) -> int:
        self._entries.extend(entries)
        return len(self._entries)

    def pop_next(self) -> QueueEntry | None:
        return self._entries.pop(0) if self._entries else None

    def peek(self) -> QueueEntry | None:
        return self._entries[0] if self._entries else None

    def remove(self, index: int) -> QueueEntry:
        if not 0 <= index < len(self._entries):
            raise IndexError(index)
        return self._entries.pop(index)

    def move(self, src: int, dst: int) -> QueueEntry:
        """Remove at ``src`` then insert at ``dst`` of the shortened sequence.

        This is not a swap: ``[a, b, c].move(0, 2)`` gives ``[b, c, a]``.
        """
        size = len(self._entries)
        if not 0 <= src < size or not 0 <= dst < size:
            raise IndexError((src, dst))
        entry = self._entries.pop(src)
        self._entries.insert(dst, entry)
        return entry

    def drop_front(self, count: int) -> list[QueueEntry]:
        """Discard up to ``count`` entries from the head and return them."""
        count = max(0, min(count, len(self._entries)))
        dropped, self._entries = self._entries[:count], self._entries[count:]
        return dropped

    def clear(self) -> int:
        previous = len(self._entries)
        self._entries.clear()
        return previous

    def shuffle(self) -> None:
        # random.shuffle is an in-place Fisher-Yates.
        self._rng.shuffle(self._entries)

    def smart_shuffle(self, window: int = QueueConstants.SMART_SHUFFLE_WINDOW) -> None:
        """Shuffle while keeping the current first ``window`` entries out of the new front.

        When there are fewer than ``window`` other entries, every one of them is
        placed in the front block and only the shortfall is filled with the
        recently-queued entries. Queues no longer than ``window`` get a plain
        shuffle.
        """
        if window <= 0 or len(self._entries) <= window:
            self.shuffle()
            return

        recent = self._entries[:window]
        others = self._entries[window:]
        self._rng.shuffle(recent)
        self._rng.shuffle(others)

        front = others[:window]
        shortfall = window - len(front)
        front.extend(recent[:shortfall])
        back = others[window:] + recent[shortfall:]

        self._rng.shuffle(front)
        self._rng.shuffle(back)
        self._entries = front + back

    # ── Projections (never alter playback order) ───────────────────

    def by_user(self, user_id: int) -> list[QueueEntry]:
        return [e for e in self._entries if e.requester_id == user_id]

    def by_duration_band(self, band: DurationBand) -> list[QueueEntry]:
        return [e for e in self._entries if _in_band(e, band)]

    def live_only(self) -> list[QueueEntry]:
        return [e for e in self._entries if e.is_live]

    def sorted_by(self, sort: QueueSort) -> list[QueueEntry]:
        return [e for _, e in _sort_pairs(list(enumerate(self._entries, start=1)), sort)]

    def view(
        self,
        queue_filter: QueueFilter = QueueFilter.ALL,
        sort: QueueSort = QueueSort.ADDED,
        *,
        user_id: int | None = None,
    ) -> list[tuple[int, QueueEntry]]:
        """Filtered and sorted ``(position, entry)`` pairs; positions are 1-based playback slots."""
        pairs = list(enumerate(self._entries, start=1))

        if queue_filter is QueueFilter.USER:
            pairs = [(i, e) for i, e in pairs if user_id is not None and e.requester_id == user_id]
        elif queue_filter is QueueFilter.SHORT:
            pairs = [(i, e) for i, e in pairs if _in_band(e, DurationBand.SHORT)]
        elif queue_filter is QueueFilter.LONG:
            pairs = [(i, e) for i, e in pairs if _in_band(e, DurationBand.LONG)]
        elif queue_filter is QueueFilter.LIVE:
            pairs = [(i, e) for i, e in pairs if e.is_live]

        return _sort_pairs(pairs, sort)

    def stats(self) -> QueueStats:
        live = [e for e in self._entries if e.is_live]
        total = sum(e.duration_ms for e in self._entries if not e.is_live)
        return QueueStats(count=len(self._entries), total_ms=total, live_count=len(live))

    def wait_before(self, index: int) -> int:
        """Milliseconds of queued audio ahead of ``index`` (live entries count as zero)."""
        return sum(e.duration_ms for e in self._entries[:index] if not e.is_live)
