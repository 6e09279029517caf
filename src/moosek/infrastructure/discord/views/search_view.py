"""Pick-a-result controls for the /search reply."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord

from moosek.domain.shared.exceptions import (
    CollaboratorFailureError,
    CollaboratorUnavailableError,
    PermissionDeniedError,
    UserInputError,
)
from moosek.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from moosek.infrastructure.discord.adapters.interaction_adapter import context_from_interaction, send_outcome
from moosek.infrastructure.discord.guards.interaction_guards import send_ephemeral
from moosek.infrastructure.discord.views.base_view import InvokerOnlyView
from moosek.utils.reply import truncate

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from ....application.commands.base import CommandOutcome
    from ....application.commands.search import SearchHandler, SearchResults

logger = logging.getLogger(__name__)

SELECT_OPTION_LIMIT = 25


class SearchResultsView(InvokerOnlyView):
    """Queue one result, queue them all (optionally shuffled), or cancel.

    Track results get a select menu for picking a single entry and stay
    open for further picks. Queueing everything or cancelling closes the
    collector.
    """

    def __init__(self, *, handler: SearchHandler, results: SearchResults, timeout: float) -> None:
        super().__init__(owner_id=results.requester_id, timeout=timeout)
        self._handler = handler
        self._results = results
        if results.is_playlist:
            self.remove_item(self.track_select)
        else:
            self.track_select.options = [
                discord.SelectOption(
                    label=truncate(f"{index}. {entry.title}", 100),
                    description=truncate(f"{entry.author} • {entry.duration_formatted}", 100),
                    value=str(index - 1),
                )
                for index, entry in enumerate(results.tracks[:SELECT_OPTION_LIMIT], start=1)
            ]

    @property
    def results(self) -> SearchResults:
        return self._results

    async def _run(self, interaction: discord.Interaction, action: Awaitable[CommandOutcome]) -> CommandOutcome | None:
        try:
            return await action
        except (UserInputError, PermissionDeniedError, CollaboratorUnavailableError) as exc:
            await send_ephemeral(interaction, exc.message)
        except CollaboratorFailureError as exc:
            logger.error(LogTemplates.SEARCH_ACTION_FAILED, interaction.guild_id, exc.message)
            await send_ephemeral(interaction, ErrorMessages.GENERIC_FAILURE)
        return None

    async def _enqueue_all(self, interaction: discord.Interaction, *, shuffle: bool) -> None:
        # Joining voice can outlive the three-second response window.
        await interaction.response.defer()
        ctx = context_from_interaction(interaction, "search")
        outcome = await self._run(interaction, self._handler.enqueue_all(ctx, self._results, shuffle=shuffle))
        if outcome is None:
            return
        self.lock()
        await interaction.edit_original_response(view=self)
        await send_outcome(interaction, outcome)

    @discord.ui.select(placeholder=DiscordUIMessages.SEARCH_SELECT_PLACEHOLDER, min_values=1, max_values=1)
    async def track_select(self, interaction: discord.Interaction, select: discord.ui.Select) -> None:
        await interaction.response.defer()
        ctx = context_from_interaction(interaction, "search")
        outcome = await self._run(interaction, self._handler.enqueue_one(ctx, self._results, int(select.values[0])))
        if outcome is None:
            return
        await send_outcome(interaction, outcome.model_copy(update={"ephemeral": True}))

    @discord.ui.button(label=DiscordUIMessages.BUTTON_PLAY_ALL, style=discord.ButtonStyle.success)
    async def play_button(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._enqueue_all(interaction, shuffle=False)

    @discord.ui.button(label=DiscordUIMessages.BUTTON_SHUFFLE_PLAY, style=discord.ButtonStyle.primary)
    async def shuffle_button(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._enqueue_all(interaction, shuffle=True)

    @discord.ui.button(label=DiscordUIMessages.BUTTON_CANCEL, style=discord.ButtonStyle.danger)
    async def cancel_button(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        self.lock()
        await interaction.response.edit_message(content=DiscordUIMessages.SEARCH_CANCELLED, embed=None, view=None)
