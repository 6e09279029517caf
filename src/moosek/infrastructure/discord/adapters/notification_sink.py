"""Discord implementation of the NotificationSink port."""

from __future__ import annotations

import logging

import discord

from moosek.application.interfaces.notifier import NotificationPayload, NotificationSink
from moosek.domain.shared.messages import LogTemplates
from moosek.utils.reply import EMBED_DESCRIPTION_LIMIT, EMBED_FIELD_LIMIT, truncate

logger = logging.getLogger(__name__)


def build_embed(payload: NotificationPayload) -> discord.Embed:
    embed = discord.Embed(
        title=payload.title,
        description=truncate(payload.description, EMBED_DESCRIPTION_LIMIT) if payload.description else None,
        color=discord.Color(payload.color),
    )
    for item in payload.fields:
        embed.add_field(name=item.name, value=truncate(item.value, EMBED_FIELD_LIMIT), inline=item.inline)
    if payload.thumbnail_url:
        embed.set_thumbnail(url=payload.thumbnail_url)
    if payload.footer:
        embed.set_footer(text=payload.footer)
    return embed


class DiscordNotificationSink(NotificationSink):
    def __init__(self, bot: discord.Client) -> None:
        self._bot = bot

    async def send(self, channel_id: int, payload: NotificationPayload) -> bool:
        channel = self._bot.get_channel(channel_id)
        if not isinstance(channel, discord.abc.Messageable):
            logger.warning(LogTemplates.NOTIFY_CHANNEL_MISSING, channel_id)
            return False

        try:
            await channel.send(embed=build_embed(payload))
        except discord.HTTPException as exc:
            logger.warning(LogTemplates.NOTIFY_FAILED, channel_id, exc)
            return False
        return True
