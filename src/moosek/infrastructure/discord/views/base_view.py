"""Views that only the member who opened them may drive."""

from __future__ import annotations

import discord

from moosek.infrastructure.discord.guards.interaction_guards import ensure_invoker


class InvokerOnlyView(discord.ui.View):
    """A component collector bound to one member and one reply.

    Clicks from anyone else are rejected ephemerally. When the collector
    times out or is locked, every component is disabled and the reply is
    re-rendered so the dead buttons show as greyed out.
    """

    def __init__(self, *, owner_id: int, timeout: float | None) -> None:
        super().__init__(timeout=timeout)
        self.owner_id = owner_id
        self._reply: discord.Message | None = None

    @property
    def reply(self) -> discord.Message | None:
        return self._reply

    def attach(self, reply: discord.Message | None) -> None:
        self._reply = reply

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        return await ensure_invoker(interaction, self.owner_id)

    def lock(self) -> None:
        for item in self.children:
            if hasattr(item, "disabled"):
                item.disabled = True
        self.stop()

    async def on_timeout(self) -> None:
        self.lock()
        if self._reply is None:
            return
        try:
            await self._reply.edit(view=self)
        except discord.HTTPException:
            # Deleted reply or expired interaction token.
            return
