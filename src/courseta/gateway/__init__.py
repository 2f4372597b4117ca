"""Discord adapter: slash command, select menu, modal and reply delivery."""

from .bot import AssistantBot
from .responder import DiscordResponder

__all__ = ["AssistantBot", "DiscordResponder"]
