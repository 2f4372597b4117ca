from __future__ import annotations

import pytest

from courseta.core.errors import ValidationError
from courseta.features.session import CourseSelected, EntryCommand, QuestionSubmitted, decode_event


def test_decode_entry_command_coerces_snowflakes() -> None:
    event = decode_event({"kind": "entry_command", "user_id": 7, "channel_id": 1000, "question": None})
    assert isinstance(event, EntryCommand)
    assert event.user_id == "7"
    assert event.channel_id == "1000"
    assert event.question is None


def test_decode_course_selection_from_menu_values() -> None:
    event = decode_event({"kind": "course_selected", "user_id": "7", "channel_id": "1000", "values": ["bonus"]})
    assert isinstance(event, CourseSelected)
    assert event.course_id == "bonus"
    assert event.to_dict() == {"kind": "course_selected", "user_id": "7", "channel_id": "1000", "course_id": "bonus"}


@pytest.mark.parametrize("values", [[], ["bonus", "basics"], None])
def test_course_selection_requires_exactly_one_value(values: list[str] | None) -> None:
    with pytest.raises(ValidationError):
        decode_event({"kind": "course_selected", "user_id": "7", "values": values})


def test_decode_question_submission() -> None:
    event = decode_event({"kind": "question_submitted", "user_id": "7", "channel_id": None, "question": " hi "})
    assert isinstance(event, QuestionSubmitted)
    # Trimming is the router's job; the payload is kept as sent.
    assert event.question == " hi "
    assert event.channel_id is None


@pytest.mark.parametrize(
    "payload",
    [
        {"user_id": "7"},
        {"kind": "button_clicked", "user_id": "7"},
        {"kind": "entry_command"},
    ],
)
def test_unknown_or_incomplete_payloads_are_rejected(payload: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        decode_event(payload)
