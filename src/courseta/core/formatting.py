from __future__ import annotations

from typing import Final

from .models import AnswerResult

HARD_LIMIT: Final = 2000
SOFT_LIMIT: Final = 1900
TRUNCATION_MARKER: Final = "…"
EMPTY_ANSWER: Final = "I couldn't generate an answer."


def normalise_question(raw: str | None) -> str:
    return (raw or "").strip()


def clip_answer(
    raw: str | None,
    *,
    limit: int = SOFT_LIMIT,
    marker: str = TRUNCATION_MARKER,
) -> AnswerResult:
    """Trim ``raw`` and cut it to ``limit`` characters plus ``marker``.

    Blank output is replaced by :data:`EMPTY_ANSWER`.  The result never exceeds
    :data:`HARD_LIMIT`.
    """

    if limit + len(marker) > HARD_LIMIT:
        raise ValueError(f"limit {limit} leaves no room for the truncation marker")
    text = (raw or "").strip() or EMPTY_ANSWER
    if len(text) <= limit:
        return AnswerResult(text=text)
    return AnswerResult(text=text[:limit] + marker, truncated=True)
