"""
Application Commands

Command definitions, the dispatcher that gates and routes them, and the
handlers that change session or guild state.
"""

from moosek.application.commands.base import (
    CommandContext,
    CommandDefinition,
    CommandOutcome,
    OptionKind,
    OptionSpec,
    OutcomeStatus,
)
from moosek.application.commands.catalogue import build_command_catalogue
from moosek.application.commands.dispatcher import CommandDispatcher
from moosek.application.commands.guild_config import GuildConfigHandler
from moosek.application.commands.play import PlayHandler
from moosek.application.commands.playback import PlaybackControlHandler
from moosek.application.commands.queue_edit import QueueEditHandler
from moosek.application.commands.queue_view import QueueViewHandler, queue_page_payload
from moosek.application.commands.search import SearchHandler, SearchResults, search_results_payload
from moosek.application.commands.system import SystemCommandHandler

__all__ = [
    # Plumbing
    "CommandContext",
    "CommandDefinition",
    "CommandOutcome",
    "OptionKind",
    "OptionSpec",
    "OutcomeStatus",
    "CommandDispatcher",
    "build_command_catalogue",
    # Handlers
    "PlayHandler",
    "SearchHandler",
    "SearchResults",
    "PlaybackControlHandler",
    "QueueViewHandler",
    "QueueEditHandler",
    "GuildConfigHandler",
    "SystemCommandHandler",
    "queue_page_payload",
    "search_results_payload",
]
