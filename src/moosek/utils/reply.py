"""Utility functions for formatting Discord messages."""

from __future__ import annotations

from functools import cache

from ..domain.shared.messages import EmojiConstants

EMBED_FIELD_LIMIT = 1024
EMBED_DESCRIPTION_LIMIT = 4096


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def progress_bar(fraction: float, width: int = 15) -> str:
    """Render a slider like ``▬▬▬🔘▬▬▬``.

    ``fraction`` is clamped to [0, 1]; the head sits on the cell that
    matches the played share of the track.
    """
    fraction = min(1.0, max(0.0, fraction))
    head = min(width - 1, int(fraction * width))
    return EmojiConstants.PROGRESS_FILLED * head + EmojiConstants.PROGRESS_HEAD + EmojiConstants.PROGRESS_FILLED * (
        width - head - 1
    )


def join_lines(lines: list[str], limit: int = EMBED_FIELD_LIMIT) -> str:
    """Join lines with newlines, dropping whole lines that would overflow ``limit``."""
    out: list[str] = []
    used = 0
    for line in lines:
        cost = len(line) + (1 if out else 0)
        if used + cost > limit:
            break
        out.append(line)
        used += cost
    return "\n".join(out)
