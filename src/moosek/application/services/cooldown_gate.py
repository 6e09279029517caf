"""Per-command, per-user rate limiting (a token bucket of one)."""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CooldownDecision:
    allowed: bool
    retry_after_seconds: int = 0


class CooldownGate:
    """Remembers when each user last ran each command.

    ``check_and_stamp`` never awaits, so the check and the stamp cannot be
    interleaved with another invocation.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._stamps: dict[tuple[str, int], float] = {}

    def __len__(self) -> int:
        return len(self._stamps)

    def check_and_stamp(self, command_name: str, user_id: int, cooldown_seconds: int | None) -> CooldownDecision:
        if not cooldown_seconds or cooldown_seconds <= 0:
            return CooldownDecision(allowed=True)

        now_ms = self._clock() * 1000
        key = (command_name, user_id)
        last_ms = self._stamps.get(key)

        if last_ms is not None:
            expires_ms = last_ms + cooldown_seconds * 1000
            if now_ms < expires_ms:
                retry_after = max(1, math.ceil((expires_ms - now_ms) / 1000))
                return CooldownDecision(allowed=False, retry_after_seconds=retry_after)

        self._stamps[key] = now_ms
        return CooldownDecision(allowed=True)
