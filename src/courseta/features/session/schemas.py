from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ...core.errors import ValidationError

__all__ = [
    "CourseSelected",
    "EntryCommand",
    "InteractionEvent",
    "QuestionSubmitted",
    "decode_event",
]


class _EventModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: str
    channel_id: str | None = None

    @field_validator("user_id", "channel_id", mode="before")
    @classmethod
    def _snowflake_to_str(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return value

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class EntryCommand(_EventModel):
    kind: Literal["entry_command"] = "entry_command"
    question: str | None = None


class CourseSelected(_EventModel):
    kind: Literal["course_selected"] = "course_selected"
    course_id: str

    @model_validator(mode="before")
    @classmethod
    def _single_value(cls, data: object) -> object:
        # Select menus deliver ``values``; exactly one entry is allowed.
        if not isinstance(data, Mapping) or "course_id" in data:
            return data
        values = data.get("values")
        if not isinstance(values, (list, tuple)) or len(values) != 1:
            raise ValueError("a course selection carries exactly one value")
        cleaned = {key: value for key, value in data.items() if key != "values"}
        cleaned["course_id"] = values[0]
        return cleaned


class QuestionSubmitted(_EventModel):
    kind: Literal["question_submitted"] = "question_submitted"
    question: str = ""


InteractionEvent = Annotated[
    Union[EntryCommand, CourseSelected, QuestionSubmitted],
    Field(discriminator="kind"),
]

_EVENT_ADAPTER: TypeAdapter[InteractionEvent] = TypeAdapter(InteractionEvent)


def decode_event(payload: Mapping[str, Any]) -> EntryCommand | CourseSelected | QuestionSubmitted:
    """Decode a raw interaction payload into one of the event kinds."""

    try:
        return _EVENT_ADAPTER.validate_python(dict(payload))
    except PydanticValidationError as exc:
        raise ValidationError(f"unrecognised interaction payload: {exc.error_count()} error(s)") from exc
