"""Tests for QueueCog and the queue pagination view."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from moosek.application.commands.base import CommandOutcome, OutcomeStatus
from moosek.application.queries.get_queue import GetQueueQuery, QueuePage
from moosek.domain.shared.exceptions import CollaboratorUnavailableError
from moosek.domain.shared.messages import DiscordUIMessages, ErrorMessages
from moosek.infrastructure.discord.cogs.queue_cog import QueueCog
from moosek.infrastructure.discord.views.queue_view import QueuePaginationView

from conftest import make_entry

MODULE = "moosek.infrastructure.discord.cogs.queue_cog"


def _page(page=1, total_pages=3, user_id=111):
    query = GetQueueQuery(guild_id=987654321, user_id=user_id, page=page, page_size=2)
    items = [((page - 1) * 2 + 1, make_entry(f"T{page}a")), ((page - 1) * 2 + 2, make_entry(f"T{page}b"))]
    return QueuePage(query=query, items=items, matching=total_pages * 2, total_pages=total_pages, queue_length=6)


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.dispatcher = MagicMock()
    container.queue_view_handler = MagicMock()
    container.settings.commands.collector_timeout_seconds = 60.0
    return container


@pytest.fixture
def cog(mock_container):
    return QueueCog(MagicMock(), mock_container)


# =============================================================================
# QueueCog
# =============================================================================


@pytest.mark.asyncio
async def test_queue_single_page_has_no_view(cog, mock_interaction):
    outcome = CommandOutcome.success(data=_page(total_pages=1))
    with (
        patch(f"{MODULE}.run_command", new=AsyncMock(return_value=outcome)) as run_command,
        patch(f"{MODULE}.send_outcome", new=AsyncMock()) as send_outcome,
    ):
        await cog.queue.callback(cog, mock_interaction, page=1, filter=None, sort=None)

    assert run_command.call_args.args[3] == {"page": 1, "filter": None, "sort": None}
    assert send_outcome.call_args.kwargs["view"] is None


@pytest.mark.asyncio
async def test_queue_many_pages_attaches_view(cog, mock_interaction):
    outcome = CommandOutcome.success(data=_page(total_pages=3))
    message = MagicMock()
    with (
        patch(f"{MODULE}.run_command", new=AsyncMock(return_value=outcome)),
        patch(f"{MODULE}.send_outcome", new=AsyncMock(return_value=message)) as send_outcome,
    ):
        await cog.queue.callback(cog, mock_interaction, page=1, filter="user", sort="title_asc")

    view = send_outcome.call_args.kwargs["view"]
    assert isinstance(view, QueuePaginationView)
    assert view.timeout == 60.0
    assert view.reply is message


@pytest.mark.asyncio
async def test_queue_error_has_no_view(cog, mock_interaction):
    outcome = CommandOutcome.error(OutcomeStatus.UNAVAILABLE, ErrorMessages.NOTHING_PLAYING)
    with (
        patch(f"{MODULE}.run_command", new=AsyncMock(return_value=outcome)),
        patch(f"{MODULE}.send_outcome", new=AsyncMock()) as send_outcome,
    ):
        await cog.queue.callback(cog, mock_interaction, page=1, filter=None, sort=None)

    assert send_outcome.call_args.kwargs["view"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "command,kwargs,name,args",
    [
        ("shuffle", {"type": "smart"}, "shuffle", {"type": "smart"}),
        ("remove", {"position": 2}, "remove", {"position": 2}),
        ("move", {"from_position": 1, "to_position": 4}, "move", {"from": 1, "to": 4}),
    ],
)
async def test_edit_commands(cog, mock_container, mock_interaction, command, kwargs, name, args):
    with patch(f"{MODULE}.respond", new=AsyncMock()) as respond:
        await getattr(cog, command).callback(cog, mock_interaction, **kwargs)

    respond.assert_awaited_once_with(mock_container.dispatcher, mock_interaction, name, args)


@pytest.mark.asyncio
async def test_clear(cog, mock_container, mock_interaction):
    with patch(f"{MODULE}.respond", new=AsyncMock()) as respond:
        await cog.clear.callback(cog, mock_interaction)
    respond.assert_awaited_once_with(mock_container.dispatcher, mock_interaction, "clear")


# =============================================================================
# QueuePaginationView
# =============================================================================


class TestQueuePaginationView:
    @pytest.mark.asyncio
    async def test_initial_buttons(self):
        view = QueuePaginationView(handler=MagicMock(), page=_page(1), timeout=30)
        assert view.previous_button.disabled
        assert not view.next_button.disabled

    @pytest.mark.asyncio
    async def test_next_requeries_live_queue(self, mock_interaction):
        handler = MagicMock()
        handler.page.return_value = _page(2)
        view = QueuePaginationView(handler=handler, page=_page(1), timeout=30)

        await view.next_button.callback(mock_interaction)

        assert handler.page.call_args.args[0].page == 2
        assert view.current_page.page == 2
        assert not view.previous_button.disabled
        embed = mock_interaction.response.edit_message.call_args.kwargs["embed"]
        assert embed.title == DiscordUIMessages.EMBED_QUEUE

    @pytest.mark.asyncio
    async def test_last_page_disables_next(self, mock_interaction):
        handler = MagicMock()
        handler.page.return_value = _page(3)
        view = QueuePaginationView(handler=handler, page=_page(2), timeout=30)

        await view.next_button.callback(mock_interaction)

        assert view.next_button.disabled

    @pytest.mark.asyncio
    async def test_queue_gone_stops_view(self, mock_interaction):
        handler = MagicMock()
        handler.page.side_effect = CollaboratorUnavailableError(ErrorMessages.NOTHING_PLAYING)
        view = QueuePaginationView(handler=handler, page=_page(1), timeout=30)
        mock_interaction.response.is_done.side_effect = [True]

        await view.next_button.callback(mock_interaction)

        assert view.previous_button.disabled and view.next_button.disabled
        assert view.is_finished()
        mock_interaction.followup.send.assert_awaited_once_with(ErrorMessages.NOTHING_PLAYING, ephemeral=True)

    @pytest.mark.asyncio
    async def test_only_invoker_may_page(self, mock_interaction):
        view = QueuePaginationView(handler=MagicMock(), page=_page(1, user_id=999), timeout=30)
        assert await view.interaction_check(mock_interaction) is False

    @pytest.mark.asyncio
    async def test_timeout_disables_buttons(self):
        view = QueuePaginationView(handler=MagicMock(), page=_page(1), timeout=30)
        message = MagicMock()
        message.edit = AsyncMock()
        view.attach(message)

        await view.on_timeout()

        assert view.next_button.disabled
        message.edit.assert_awaited_once_with(view=view)
