"""Reusable interaction guard functions for Discord cogs and views.

These are free functions that accept explicit dependencies rather than relying
on a specific cog instance, making them usable from any cog.
"""

from __future__ import annotations

import discord

from moosek.domain.shared.messages import DiscordUIMessages


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


async def ensure_invoker(interaction: discord.Interaction, owner_id: int) -> bool:
    """Only the member who opened a view may drive it. Rejects others ephemerally."""
    if interaction.user.id == owner_id:
        return True
    await send_ephemeral(interaction, DiscordUIMessages.VIEW_NOT_YOURS)
    return False
