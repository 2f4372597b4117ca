from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Course:
    key: str
    label: str
    scope_id: str
    # Prepended to the fixed answering policy for every query on this course.
    hint: str


@dataclass(frozen=True)
class CourseOption:
    """Entry shown in the course selection widget."""

    value: str
    label: str


@dataclass(frozen=True)
class AnswerResult:
    text: str
    truncated: bool = False
