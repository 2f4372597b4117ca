from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager

import discord

from ..core.errors import DeliveryError
from ..core.models import Course, CourseOption
from ..features.session.router import ReplyHandle
from .components import CourseSelectView, QuestionModal

__all__ = ["DiscordResponder"]


@contextmanager
def _delivering(action: str) -> Iterator[None]:
    try:
        yield
    except (discord.HTTPException, discord.InteractionResponded) as exc:
        raise DeliveryError(f"{action} failed: {exc}") from exc


class DiscordResponder:
    """Delivers router replies for one Discord interaction.

    Notices, course menus and acknowledgements are ephemeral.  A private answer
    replaces the acknowledgement in place; a public one is posted as a new
    followup message in the channel.
    """

    def __init__(
        self,
        interaction: discord.Interaction,
        *,
        view_timeout: float | None = 600.0,
    ) -> None:
        self._interaction = interaction
        self._view_timeout = view_timeout

    async def notify(self, text: str) -> None:
        with _delivering("notice"):
            if self._interaction.response.is_done():
                await self._interaction.followup.send(text, ephemeral=True)
            else:
                await self._interaction.response.send_message(text, ephemeral=True)

    async def present_courses(self, prompt: str, options: Sequence[CourseOption]) -> None:
        view = CourseSelectView(options, timeout=self._view_timeout)
        with _delivering("course menu"):
            await self._interaction.response.send_message(prompt, view=view, ephemeral=True)

    async def open_question_form(self, course: Course) -> None:
        with _delivering("question form"):
            await self._interaction.response.send_modal(QuestionModal(course))

    async def acknowledge(self, text: str, *, public: bool = False) -> ReplyHandle:
        with _delivering("acknowledgement"):
            await self._interaction.response.send_message(text, ephemeral=True)
        return ReplyHandle(public=public, token=self._interaction.id)

    async def finalize(self, handle: ReplyHandle, content: str) -> None:
        with _delivering("answer"):
            if handle.public:
                await self._interaction.followup.send(content)
            else:
                await self._interaction.edit_original_response(content=content)
