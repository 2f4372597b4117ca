"""Session feature: course selection, answering, and the interaction router."""

from .answers import AnswerService
from .backend import GroundedBackend, GroundedQuery, OpenAIBackend
from .catalog import CourseCatalog
from .guard import ChannelGuard
from .router import FlowOutcome, FlowState, InteractionRouter, Messages, ReplyHandle, Responder
from .schemas import CourseSelected, EntryCommand, QuestionSubmitted, decode_event
from .store import InMemorySessionStore, SessionStore

__all__ = [
    "AnswerService",
    "ChannelGuard",
    "CourseCatalog",
    "CourseSelected",
    "EntryCommand",
    "FlowOutcome",
    "FlowState",
    "GroundedBackend",
    "GroundedQuery",
    "InMemorySessionStore",
    "InteractionRouter",
    "Messages",
    "OpenAIBackend",
    "QuestionSubmitted",
    "ReplyHandle",
    "Responder",
    "SessionStore",
    "decode_event",
]
