from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any, Final

import discord

from ..core.models import Course, CourseOption

__all__ = [
    "ASK_MODAL_ID",
    "COURSE_SELECT_ID",
    "CourseSelectView",
    "QuestionModal",
    "component_payload",
]

COURSE_SELECT_ID: Final = "course_select"
ASK_MODAL_ID: Final = "ask_modal"
QUESTION_INPUT_ID: Final = "question"
# Discord caps modal titles at 45 characters.
_MODAL_TITLE_LIMIT: Final = 45


class CourseSelectView(discord.ui.View):
    """Ephemeral course menu.

    Picks are routed by custom id in :meth:`AssistantBot.on_interaction`, so a
    menu keeps working after the view expires or the bot restarts.
    """

    def __init__(self, options: Sequence[CourseOption], *, timeout: float | None = 600.0) -> None:
        super().__init__(timeout=timeout)
        self.add_item(
            discord.ui.Select(
                custom_id=COURSE_SELECT_ID,
                placeholder="Choose a course…",
                min_values=1,
                max_values=1,
                options=[discord.SelectOption(label=option.label, value=option.value) for option in options],
            )
        )


class QuestionModal(discord.ui.Modal):
    def __init__(self, course: Course, *, timeout: float | None = 900.0) -> None:
        super().__init__(title=f"Ask: {course.label}"[:_MODAL_TITLE_LIMIT], custom_id=ASK_MODAL_ID, timeout=timeout)
        self.question: discord.ui.TextInput = discord.ui.TextInput(
            label="Your question",
            custom_id=QUESTION_INPUT_ID,
            style=discord.TextStyle.paragraph,
            required=True,
        )
        self.add_item(self.question)


def _submitted_fields(components: Sequence[Mapping[str, Any]]) -> Iterator[Mapping[str, Any]]:
    for component in components:
        yield component
        yield from _submitted_fields(component.get("components") or ())
        if isinstance(component.get("component"), Mapping):
            yield from _submitted_fields((component["component"],))


def component_payload(data: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Translate raw menu/form interaction data into a router payload.

    Returns ``None`` for custom ids the assistant does not own.
    """

    if not data:
        return None
    custom_id = data.get("custom_id")
    if custom_id == COURSE_SELECT_ID:
        return {"kind": "course_selected", "values": list(data.get("values") or ())}
    if custom_id == ASK_MODAL_ID:
        question = ""
        for field in _submitted_fields(data.get("components") or ()):
            if field.get("custom_id") == QUESTION_INPUT_ID:
                question = field.get("value") or ""
                break
        return {"kind": "question_submitted", "question": question}
    return None
