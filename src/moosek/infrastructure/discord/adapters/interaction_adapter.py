"""Translates Discord interactions into dispatcher calls and outcomes back into replies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import discord

from moosek.application.commands.base import CommandContext, CommandOutcome
from moosek.application.services.permission_gate import Actor
from moosek.domain.shared.messages import ErrorMessages, LogTemplates
from moosek.infrastructure.discord.adapters.notification_sink import build_embed

if TYPE_CHECKING:
    from ....application.commands.dispatcher import CommandDispatcher

logger = logging.getLogger(__name__)


def actor_from_user(user: discord.User | discord.Member) -> Actor:
    """Reduce the invoking user to what authorization needs.

    Outside a guild the user is a plain ``discord.User`` with no roles,
    permissions or voice state.
    """
    if not isinstance(user, discord.Member):
        return Actor(user_id=user.id, display_name=user.display_name)

    voice_channel_id = None
    if user.voice is not None and user.voice.channel is not None:
        voice_channel_id = user.voice.channel.id

    permissions = user.guild_permissions
    return Actor(
        user_id=user.id,
        display_name=user.display_name,
        is_administrator=permissions.administrator,
        can_manage_guild=permissions.manage_guild,
        role_ids=frozenset(role.id for role in user.roles),
        voice_channel_id=voice_channel_id,
    )


def context_from_interaction(interaction: discord.Interaction, command_name: str) -> CommandContext:
    return CommandContext(
        command_name=command_name,
        actor=actor_from_user(interaction.user),
        guild_id=interaction.guild_id,
        channel_id=interaction.channel_id,
    )


async def send_outcome(
    interaction: discord.Interaction,
    outcome: CommandOutcome | None,
    *,
    view: discord.ui.View | None = None,
) -> discord.Message | None:
    """Render ``outcome`` as the interaction's single reply and return the sent message.

    A ``None`` outcome (an unknown command) is acknowledged without leaving
    anything visible in the channel.
    """
    if outcome is None:
        await _acknowledge_silently(interaction)
        return None

    kwargs: dict[str, Any] = {"ephemeral": outcome.ephemeral}
    if outcome.payload is not None:
        kwargs["embed"] = build_embed(outcome.payload)
        if outcome.message:
            kwargs["content"] = outcome.message
    else:
        kwargs["content"] = outcome.message or ErrorMessages.GENERIC_FAILURE
    if view is not None and outcome.is_success:
        kwargs["view"] = view

    if interaction.response.is_done():
        return await interaction.followup.send(wait=True, **kwargs)

    await interaction.response.send_message(**kwargs)
    return await interaction.original_response()


async def run_command(
    dispatcher: CommandDispatcher,
    interaction: discord.Interaction,
    name: str,
    args: dict[str, Any] | None = None,
    *,
    defer: bool = False,
) -> CommandOutcome | None:
    """Dispatch ``name`` for ``interaction`` and return the outcome without replying.

    ``defer`` acknowledges the interaction first, for handlers that may
    outlive Discord's three-second response window.
    """
    if defer and not interaction.response.is_done():
        await interaction.response.defer(thinking=True)

    ctx = context_from_interaction(interaction, name)
    return await dispatcher.dispatch(name, ctx, args)


async def respond(
    dispatcher: CommandDispatcher,
    interaction: discord.Interaction,
    name: str,
    args: dict[str, Any] | None = None,
    *,
    defer: bool = False,
) -> CommandOutcome | None:
    """Dispatch and reply in one step; the common path for every cog command."""
    outcome = await run_command(dispatcher, interaction, name, args, defer=defer)
    await send_outcome(interaction, outcome)
    return outcome


async def _acknowledge_silently(interaction: discord.Interaction) -> None:
    if not interaction.response.is_done():
        await interaction.response.defer(ephemeral=True)
    try:
        await interaction.delete_original_response()
    except discord.HTTPException as exc:
        logger.debug(LogTemplates.INTERACTION_ACK_CLEANUP_FAILED, exc)
