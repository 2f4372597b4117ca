from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

import pytest

# Ensure "src" is on sys.path for imports in tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from courseta.core.errors import DeliveryError  # noqa: E402
from courseta.core.models import Course, CourseOption  # noqa: E402
from courseta.features.session import (  # noqa: E402
    AnswerService,
    ChannelGuard,
    CourseCatalog,
    GroundedQuery,
    InMemorySessionStore,
    InteractionRouter,
    ReplyHandle,
)

TA_CHANNEL = "1000"

COURSES = (
    Course(
        key="masterclass",
        label="Masterclass Game Design",
        scope_id="vs_master",
        hint="You are the Game Beyond TA for the Masterclass Game Design course.",
    ),
    Course(
        key="basics",
        label="Game Design Basics",
        scope_id="vs_basics",
        hint="You are the Game Beyond TA for the Game Design Basics course.",
    ),
    Course(
        key="bonus",
        label="Bonus",
        scope_id="vs_bonus",
        hint="You are the Game Beyond TA for the Bonus course materials.",
    ),
)

ENV = {
    "DISCORD_BOT_TOKEN": "discord-token",
    "OPENAI_API_KEY": "sk-test",
    "TA_CHANNEL_ID": TA_CHANNEL,
    "GUILD_ID": "42",
    "VS_MASTERCLASS_GAME_DESIGN": "vs_master",
    "VS_GAME_DESIGN_BASICS": "vs_basics",
    "VS_BONUS": "vs_bonus",
}


class ScriptedBackend:
    """Grounded backend double that records queries and replays a script."""

    def __init__(self, reply: str | BaseException = "A core loop is the repeated cycle of play.") -> None:
        self.reply = reply
        self.queries: list[GroundedQuery] = []
        self.gate: asyncio.Event | None = None
        self.started: asyncio.Event | None = None

    async def generate(self, query: GroundedQuery) -> str:
        self.queries.append(query)
        if self.started is not None:
            self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.reply, BaseException):
            raise self.reply
        return self.reply


class RecordingResponder:
    """Responder double; ``fail_on`` names methods that raise DeliveryError."""

    def __init__(self, *, fail_on: Sequence[str] = ()) -> None:
        self.calls: list[tuple[str, object]] = []
        self.finalized: list[ReplyHandle] = []
        self.fail_on = set(fail_on)

    def _record(self, name: str, payload: object) -> None:
        self.calls.append((name, payload))
        if name in self.fail_on:
            raise DeliveryError(f"{name}: Unknown interaction")

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def payload(self, name: str) -> object:
        for call_name, payload in self.calls:
            if call_name == name:
                return payload
        raise AssertionError(f"{name} was never called; calls={self.names()}")

    async def notify(self, text: str) -> None:
        self._record("notify", text)

    async def present_courses(self, prompt: str, options: Sequence[CourseOption]) -> None:
        self._record("present_courses", list(options))

    async def open_question_form(self, course: Course) -> None:
        self._record("open_question_form", course)

    async def acknowledge(self, text: str, *, public: bool = False) -> ReplyHandle:
        self._record("acknowledge", text)
        return ReplyHandle(public=public, token=len(self.calls))

    async def finalize(self, handle: ReplyHandle, content: str) -> None:
        self.finalized.append(handle)
        self._record("finalize", content)


@pytest.fixture
def catalog() -> CourseCatalog:
    return CourseCatalog(COURSES)


@pytest.fixture
def backend() -> ScriptedBackend:
    return ScriptedBackend()


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def router(catalog: CourseCatalog, backend: ScriptedBackend, store: InMemorySessionStore) -> InteractionRouter:
    return InteractionRouter(
        catalog=catalog,
        guard=ChannelGuard(TA_CHANNEL),
        store=store,
        answers=AnswerService(backend),
    )


@pytest.fixture
def env() -> dict[str, str]:
    return dict(ENV)


@pytest.fixture
def responder() -> RecordingResponder:
    return RecordingResponder()


@pytest.fixture
def make_responder() -> type[RecordingResponder]:
    return RecordingResponder
