"""Interaction state machine.

Every inbound event starts at ``IDLE`` and is carried to completion before
:meth:`InteractionRouter.handle` returns.  Nothing about the flow is kept per
user except the course selection in the session store, so the state a user is
"in" is re-derived from that store on each event.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final, Protocol

from ...core.errors import ChannelDenied, DeliveryError, Failure, FailureKind
from ...core.formatting import normalise_question
from ...core.models import AnswerResult, Course, CourseOption
from .answers import AnswerService
from .catalog import CourseCatalog
from .guard import ChannelGuard
from .schemas import CourseSelected, EntryCommand, QuestionSubmitted
from .store import SessionStore

__all__ = [
    "FlowOutcome",
    "FlowState",
    "InteractionRouter",
    "Messages",
    "ReplyHandle",
    "Responder",
]

logger = logging.getLogger(__name__)


class FlowState(str, Enum):
    IDLE = "idle"
    AWAITING_COURSE_SELECTION = "awaiting_course_selection"
    AWAITING_QUESTION = "awaiting_question"
    ANSWERING = "answering"


@dataclass(frozen=True)
class ReplyHandle:
    """Token returned by :meth:`Responder.acknowledge` for the later edit."""

    public: bool = False
    token: Any = None


class Responder(Protocol):
    """Delivery side of one interaction.  Every method may raise DeliveryError."""

    async def notify(self, text: str) -> None: ...

    async def present_courses(self, prompt: str, options: Sequence[CourseOption]) -> None: ...

    async def open_question_form(self, course: Course) -> None: ...

    async def acknowledge(self, text: str, *, public: bool = False) -> ReplyHandle: ...

    async def finalize(self, handle: ReplyHandle, content: str) -> None: ...


@dataclass(frozen=True)
class Messages:
    command: str = "ask"
    channel_name: str = "teacher_assistant"

    @property
    def wrong_channel(self) -> str:
        return f"Please use /{self.command} in the designated TA channel ({self.channel_name})."

    @property
    def pick_course(self) -> str:
        return "Pick which course to search:"

    @property
    def course_not_found(self) -> str:
        return f"Course not found. Please run /{self.command} again."

    @property
    def selection_lost(self) -> str:
        return f"I lost your course selection. Please run /{self.command} again."

    @property
    def empty_question(self) -> str:
        return f"Please enter a question. Try /{self.command} again."

    @property
    def answer_failed(self) -> str:
        return "Something went wrong while answering. Try again."

    @property
    def start_failed(self) -> str:
        return f"Something went wrong starting /{self.command}. Try again."

    @property
    def select_failed(self) -> str:
        return f"Something went wrong selecting the course. Try /{self.command} again."

    def ask_with_question(self, course: Course) -> str:
        return f"Course set to **{course.label}**. Run /{self.command} again with your question."

    def searching(self, course: Course) -> str:
        return f"Searching **{course.label}**…"


@dataclass
class FlowOutcome:
    """What one event did: the states visited and the failure, if any."""

    trail: list[FlowState] = field(default_factory=lambda: [FlowState.IDLE])
    failure: Failure | None = None
    answer: AnswerResult | None = None

    @property
    def state(self) -> FlowState:
        return self.trail[-1]

    @property
    def ok(self) -> bool:
        return self.failure is None

    def enter(self, state: FlowState) -> None:
        self.trail.append(state)

    def fail(self, failure: Failure) -> FlowOutcome:
        self.failure = failure
        if self.state is not FlowState.IDLE:
            self.trail.append(FlowState.IDLE)
        return self


_DEFAULT_MESSAGES: Final = Messages()


class InteractionRouter:
    def __init__(
        self,
        *,
        catalog: CourseCatalog,
        guard: ChannelGuard,
        store: SessionStore,
        answers: AnswerService,
        messages: Messages | None = None,
        question_form: bool = True,
        public_answers: bool = False,
    ) -> None:
        self._catalog = catalog
        self._guard = guard
        self._store = store
        self._answers = answers
        self._messages = messages or _DEFAULT_MESSAGES
        self._question_form = question_form
        self._public_answers = public_answers

    @property
    def messages(self) -> Messages:
        return self._messages

    async def handle(
        self,
        event: EntryCommand | CourseSelected | QuestionSubmitted,
        responder: Responder,
    ) -> FlowOutcome:
        outcome = FlowOutcome()
        if not self._guard.permits(event.channel_id):
            logger.info(
                "interaction outside the assistant channel",
                extra={"user_id": event.user_id, "channel_id": event.channel_id, "kind": event.kind},
            )
            outcome.fail(Failure.from_error(ChannelDenied(f"channel {event.channel_id!r} not permitted")))
            await self._notify(responder, self._messages.wrong_channel, outcome)
            return outcome

        try:
            if isinstance(event, EntryCommand):
                await self._on_entry(event, responder, outcome)
            elif isinstance(event, CourseSelected):
                await self._on_selection(event, responder, outcome)
            elif isinstance(event, QuestionSubmitted):
                await self._on_question(event.user_id, event.question, responder, outcome, public=False)
            else:
                raise TypeError(f"unsupported event {type(event).__name__}")
        except DeliveryError as exc:
            self._log_delivery(exc, event.user_id)
            outcome.fail(Failure.from_error(exc))
        except Exception as exc:
            logger.exception("interaction step failed", extra={"user_id": event.user_id, "kind": event.kind})
            outcome.fail(Failure(FailureKind.INTERNAL, f"{type(exc).__name__}: {exc}", exc))
            await self._notify(responder, self._step_failed_notice(event), outcome)
        if outcome.state is FlowState.ANSWERING:
            outcome.enter(FlowState.IDLE)
        return outcome

    # ------------------------------------------------------------------ steps
    async def _on_entry(self, event: EntryCommand, responder: Responder, outcome: FlowOutcome) -> None:
        question = normalise_question(event.question)
        if question and self._store.get(event.user_id) is not None:
            await self._on_question(event.user_id, question, responder, outcome, public=self._public_answers)
            return
        await self._present_courses(responder, outcome)

    async def _present_courses(self, responder: Responder, outcome: FlowOutcome) -> None:
        outcome.enter(FlowState.AWAITING_COURSE_SELECTION)
        await responder.present_courses(self._messages.pick_course, self._catalog.options())

    async def _on_selection(self, event: CourseSelected, responder: Responder, outcome: FlowOutcome) -> None:
        outcome.enter(FlowState.AWAITING_COURSE_SELECTION)
        course = self._catalog.lookup(event.course_id)
        if course is None:
            logger.info("unknown course selected", extra={"user_id": event.user_id, "course_id": event.course_id})
            outcome.fail(Failure(FailureKind.VALIDATION, f"unknown course '{event.course_id}'"))
            await self._notify(responder, self._messages.course_not_found, outcome)
            return

        self._store.set(event.user_id, course)
        outcome.enter(FlowState.AWAITING_QUESTION)
        logger.debug("course selected", extra={"user_id": event.user_id, "course": course.key})
        if self._question_form:
            await responder.open_question_form(course)
        else:
            await responder.notify(self._messages.ask_with_question(course))

    async def _on_question(
        self,
        user_id: str,
        raw_question: str | None,
        responder: Responder,
        outcome: FlowOutcome,
        *,
        public: bool,
    ) -> None:
        outcome.enter(FlowState.AWAITING_QUESTION)
        # Read before any await: a later re-selection must not change this answer.
        course = self._store.get(user_id)
        if course is None:
            outcome.fail(Failure(FailureKind.VALIDATION, "no course selected"))
            await self._notify(responder, self._messages.selection_lost, outcome)
            return

        question = normalise_question(raw_question)
        if not question:
            outcome.fail(Failure(FailureKind.VALIDATION, "question is empty"))
            await self._notify(responder, self._messages.empty_question, outcome)
            return

        outcome.enter(FlowState.ANSWERING)
        handle = await responder.acknowledge(self._messages.searching(course), public=public)

        result = await self._answers.answer(course, question)
        if isinstance(result, Failure):
            outcome.failure = result
            content = self._messages.answer_failed
            # Error notices stay private even on the public answer path.
            handle = ReplyHandle(public=False, token=handle.token)
        else:
            outcome.answer = result
            content = result.text

        try:
            await responder.finalize(handle, content)
        except DeliveryError as exc:
            self._log_delivery(exc, user_id)
            if outcome.failure is None:
                outcome.failure = Failure.from_error(exc)

    # ---------------------------------------------------------------- helpers
    def _step_failed_notice(self, event: EntryCommand | CourseSelected | QuestionSubmitted) -> str:
        if isinstance(event, CourseSelected):
            return self._messages.select_failed
        if isinstance(event, QuestionSubmitted) or normalise_question(getattr(event, "question", None)):
            return self._messages.answer_failed
        return self._messages.start_failed

    async def _notify(self, responder: Responder, text: str, outcome: FlowOutcome) -> None:
        try:
            await responder.notify(text)
        except DeliveryError as exc:
            logger.warning("notice could not be delivered", extra={"error": str(exc)})
            if outcome.failure is None:
                outcome.fail(Failure.from_error(exc))

    def _log_delivery(self, exc: DeliveryError, user_id: str) -> None:
        logger.warning("reply could not be delivered", extra={"user_id": user_id, "error": str(exc)})
