from __future__ import annotations

import pytest

from courseta.core.formatting import (
    EMPTY_ANSWER,
    HARD_LIMIT,
    SOFT_LIMIT,
    TRUNCATION_MARKER,
    clip_answer,
    normalise_question,
)


@pytest.mark.parametrize("length", [0, 1, 1899, 1900])
def test_clip_answer_keeps_text_within_soft_limit(length: int) -> None:
    text = "x" * length
    result = clip_answer(f"  {text}\n")
    if length == 0:
        assert result.text == EMPTY_ANSWER
    else:
        assert result.text == text
    assert result.truncated is False


@pytest.mark.parametrize("length", [1901, 2500, 10_000])
def test_clip_answer_cuts_long_text_to_soft_limit_plus_marker(length: int) -> None:
    text = "".join(chr(ord("a") + i % 26) for i in range(length))
    result = clip_answer(text)
    assert result.truncated is True
    assert result.text == text[:SOFT_LIMIT] + TRUNCATION_MARKER
    assert len(result.text) <= HARD_LIMIT


def test_clip_answer_substitutes_fallback_for_blank_output() -> None:
    assert clip_answer(None).text == "I couldn't generate an answer."
    assert clip_answer(" \n\t ").text == "I couldn't generate an answer."


def test_clip_answer_rejects_limits_without_room_for_marker() -> None:
    with pytest.raises(ValueError):
        clip_answer("text", limit=HARD_LIMIT)


def test_normalise_question_trims_whitespace() -> None:
    assert normalise_question("  What is a core loop?\n") == "What is a core loop?"
    assert normalise_question(None) == ""
    assert normalise_question("   ") == ""
