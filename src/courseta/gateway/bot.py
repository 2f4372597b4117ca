from __future__ import annotations

import logging
from typing import Any

import discord
from discord import app_commands

from ..core.errors import DeliveryError, ValidationError
from ..features.session import CourseCatalog, InteractionRouter, decode_event
from .components import component_payload
from .responder import DiscordResponder

__all__ = ["AssistantBot", "build_ask_command"]

logger = logging.getLogger(__name__)


def build_ask_command(bot: AssistantBot, name: str = "ask") -> app_commands.Command:
    @app_commands.command(
        name=name,
        description="Ask the Game Beyond TA (choose a course, then ask a question).",
    )
    @app_commands.describe(question="Your question; leave empty to pick a course first.")
    async def ask(interaction: discord.Interaction, question: str | None = None) -> None:
        await bot.route_interaction(interaction, {"kind": "entry_command", "question": question})

    return ask


class AssistantBot(discord.Client):
    """Discord client that forwards every assistant interaction to the router."""

    def __init__(
        self,
        router: InteractionRouter,
        catalog: CourseCatalog,
        *,
        guild_id: int,
        channel_id: str,
    ) -> None:
        intents = discord.Intents.none()
        intents.guilds = True
        super().__init__(intents=intents)
        self.router = router
        self.catalog = catalog
        self.guild_id = guild_id
        self.channel_id = channel_id
        self.tree = app_commands.CommandTree(self)
        self._commands_registered = False

    async def route_interaction(self, interaction: discord.Interaction, payload: dict[str, Any]) -> None:
        responder = DiscordResponder(interaction)
        try:
            event = decode_event({**payload, "user_id": interaction.user.id, "channel_id": interaction.channel_id})
        except ValidationError as exc:
            logger.warning("undecodable interaction", extra={"interaction_id": interaction.id, "error": str(exc)})
            try:
                await responder.notify(self._decode_failed_notice(payload))
            except DeliveryError as delivery_exc:
                logger.warning("notice could not be delivered", extra={"error": str(delivery_exc)})
            return
        outcome = await self.router.handle(event, responder)
        logger.debug(
            "interaction handled",
            extra={
                "interaction_id": interaction.id,
                "kind": event.kind,
                "trail": [state.value for state in outcome.trail],
                "failure": outcome.failure.kind.value if outcome.failure else None,
            },
        )

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        # Routed by custom id: the view or modal may have expired or predate a restart.
        if interaction.type not in (discord.InteractionType.component, discord.InteractionType.modal_submit):
            return
        payload = component_payload(interaction.data)
        if payload is None:
            return
        await self.route_interaction(interaction, payload)

    def _decode_failed_notice(self, payload: dict[str, Any]) -> str:
        messages = self.router.messages
        kind = payload.get("kind")
        if kind == "course_selected":
            return messages.select_failed
        if kind == "question_submitted":
            return messages.answer_failed
        return messages.start_failed

    async def register_commands(self) -> None:
        """Replace this guild's commands with the assistant's command set."""

        guild = discord.Object(id=self.guild_id)
        self.tree.clear_commands(guild=guild)
        self.tree.add_command(build_ask_command(self, self.router.messages.command), guild=guild)
        synced = await self.tree.sync(guild=guild)
        logger.info("registered guild commands", extra={"guild_id": self.guild_id, "commands": [c.name for c in synced]})

    async def on_ready(self) -> None:
        logger.info("logged in as %s", self.user)
        logger.info("TA channel lock: %s", self.channel_id)
        logger.info("guild: %s", self.guild_id)
        for course in self.catalog.courses():
            logger.info("knowledge scope for %s: %s", course.label, course.scope_id)

        if self._commands_registered:
            return
        try:
            await self.register_commands()
        except discord.HTTPException:
            logger.exception("failed to register slash commands", extra={"guild_id": self.guild_id})
        else:
            self._commands_registered = True
