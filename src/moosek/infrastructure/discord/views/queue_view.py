"""Previous/next pagination for the /queue reply."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from moosek.application.commands.queue_view import queue_page_payload
from moosek.domain.shared.exceptions import CollaboratorUnavailableError, UserInputError
from moosek.domain.shared.messages import DiscordUIMessages
from moosek.infrastructure.discord.adapters.notification_sink import build_embed
from moosek.infrastructure.discord.guards.interaction_guards import send_ephemeral
from moosek.infrastructure.discord.views.base_view import InvokerOnlyView

if TYPE_CHECKING:
    from ....application.commands.queue_view import QueueViewHandler
    from ....application.queries.get_queue import QueuePage


class QueuePaginationView(InvokerOnlyView):
    """Re-queries the live queue on every click, so pages never go stale.

    Only the invoking member may page; the buttons are disabled once the
    collector times out.
    """

    def __init__(self, *, handler: QueueViewHandler, page: QueuePage, timeout: float) -> None:
        super().__init__(owner_id=page.query.user_id, timeout=timeout)
        self._handler = handler
        self._page = page
        self._sync_buttons()

    @property
    def current_page(self) -> QueuePage:
        return self._page

    def _sync_buttons(self) -> None:
        self.previous_button.disabled = not self._page.has_previous
        self.next_button.disabled = not self._page.has_next

    async def _show(self, interaction: discord.Interaction, page_number: int) -> None:
        query = self._page.query.for_page(page_number)
        try:
            self._page = self._handler.page(query)
        except (CollaboratorUnavailableError, UserInputError) as exc:
            self.lock()
            await interaction.response.edit_message(view=self)
            await send_ephemeral(interaction, exc.message)
            return

        self._sync_buttons()
        await interaction.response.edit_message(embed=build_embed(queue_page_payload(self._page)), view=self)

    @discord.ui.button(label=DiscordUIMessages.BUTTON_PREVIOUS, style=discord.ButtonStyle.secondary)
    async def previous_button(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._show(interaction, max(1, self._page.page - 1))

    @discord.ui.button(label=DiscordUIMessages.BUTTON_NEXT, style=discord.ButtonStyle.secondary)
    async def next_button(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._show(interaction, self._page.page + 1)
