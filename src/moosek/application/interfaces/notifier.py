"""Port interface for delivering out-of-band notifications to a text channel."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field


class PayloadField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    inline: bool = True


class NotificationPayload(BaseModel):
    """Transport-neutral message: rendered as an embed by the Discord adapter."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str | None = None
    fields: list[PayloadField] = Field(default_factory=list)
    thumbnail_url: str | None = None
    footer: str | None = None
    color: int = 0x000000

    def with_field(self, name: str, value: str, inline: bool = True) -> NotificationPayload:
        return self.model_copy(update={"fields": [*self.fields, PayloadField(name=name, value=value, inline=inline)]})


class NotificationSink(ABC):
    @abstractmethod
    async def send(self, channel_id: int, payload: NotificationPayload) -> bool:
        """Deliver ``payload`` to ``channel_id``.

        Returns False when delivery failed; implementations never raise for a
        missing channel or a rejected send.
        """
        ...
