"""Interaction guard functions for Discord cogs."""

from moosek.infrastructure.discord.guards.interaction_guards import ensure_invoker, send_ephemeral

__all__ = [
    "ensure_invoker",
    "send_ephemeral",
]
