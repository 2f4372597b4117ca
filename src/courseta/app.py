"""Wire settings into a ready-to-use interaction router."""

from __future__ import annotations

from .core.settings import Settings
from .features.session import (
    AnswerService,
    ChannelGuard,
    CourseCatalog,
    GroundedBackend,
    InMemorySessionStore,
    InteractionRouter,
    OpenAIBackend,
    SessionStore,
)

__all__ = ["build_catalog", "build_router"]


def build_catalog(settings: Settings) -> CourseCatalog:
    return CourseCatalog.from_definitions(settings.courses, settings.course_scopes)


def build_router(
    settings: Settings,
    *,
    backend: GroundedBackend | None = None,
    store: SessionStore | None = None,
    catalog: CourseCatalog | None = None,
) -> InteractionRouter:
    if backend is None:
        backend = OpenAIBackend(settings.openai_api_key, timeout=settings.request_timeout)
    return InteractionRouter(
        catalog=catalog if catalog is not None else build_catalog(settings),
        guard=ChannelGuard(settings.channel_id),
        store=store if store is not None else InMemorySessionStore(),
        answers=AnswerService(backend, model=settings.model),
        question_form=not settings.inline_question,
        public_answers=settings.public_answers,
    )
