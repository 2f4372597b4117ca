from __future__ import annotations

import logging
from typing import Final

from ...core.errors import BackendError, Failure, FailureKind
from ...core.formatting import SOFT_LIMIT, clip_answer, normalise_question
from ...core.models import AnswerResult, Course
from ...core.settings import DEFAULT_MODEL
from .backend import GroundedBackend, GroundedQuery

__all__ = ["ANSWER_POLICY", "AnswerService", "build_instructions"]

logger = logging.getLogger(__name__)

ANSWER_POLICY: Final = (
    "Answer ONLY using the provided curriculum files for this course. "
    "If the answer is not found in the curriculum, say you don't have that covered yet. "
    "Keep answers concise and practical."
)


def build_instructions(course: Course) -> str:
    return f"{course.hint} {ANSWER_POLICY}"


class AnswerService:
    """Answers one question against one course's knowledge scope."""

    def __init__(self, backend: GroundedBackend, *, model: str = DEFAULT_MODEL, limit: int = SOFT_LIMIT) -> None:
        self._backend = backend
        self._model = model
        self._limit = limit

    def build_query(self, course: Course, question: str) -> GroundedQuery:
        return GroundedQuery(
            model=self._model,
            instructions=build_instructions(course),
            question=question,
            scope_id=course.scope_id,
        )

    async def answer(self, course: Course, question: str | None) -> AnswerResult | Failure:
        text = normalise_question(question)
        if not text:
            return Failure(FailureKind.VALIDATION, "question is empty")

        query = self.build_query(course, text)
        try:
            raw = await self._backend.generate(query)
        except BackendError as exc:
            logger.warning(
                "grounded answer failed",
                extra={"course": course.key, "scope_id": course.scope_id, "error": str(exc)},
            )
            return Failure.from_error(exc)
        except Exception as exc:
            logger.exception("grounded answer raised unexpectedly", extra={"course": course.key})
            return Failure(FailureKind.BACKEND, f"{type(exc).__name__}: {exc}", exc)

        result = clip_answer(raw, limit=self._limit)
        if result.truncated:
            logger.info("answer truncated", extra={"course": course.key, "raw_length": len(raw)})
        return result
