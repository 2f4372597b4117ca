from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Final

from ...core.errors import ConfigurationError
from ...core.models import Course, CourseOption
from ...data.course_loader import CourseDefinition

__all__ = ["CourseCatalog"]

# Discord select menus accept at most 25 options.
MAX_COURSES: Final = 25


class CourseCatalog:
    """Immutable registry of the courses the assistant can answer for."""

    def __init__(self, courses: Iterable[Course]) -> None:
        ordered: dict[str, Course] = {}
        for course in courses:
            if not course.scope_id.strip():
                raise ConfigurationError(f"course '{course.key}' has no knowledge scope id")
            if course.key in ordered:
                raise ConfigurationError(f"duplicate course id '{course.key}'")
            ordered[course.key] = course
        if not ordered:
            raise ConfigurationError("course catalog is empty")
        if len(ordered) > MAX_COURSES:
            raise ConfigurationError(f"course catalog holds {len(ordered)} courses; at most {MAX_COURSES} fit a menu")
        self._courses = ordered

    @classmethod
    def from_definitions(
        cls,
        definitions: Iterable[CourseDefinition],
        scopes: Mapping[str, str],
    ) -> CourseCatalog:
        courses: list[Course] = []
        for definition in definitions:
            scope = (scopes.get(definition.key) or "").strip()
            if not scope:
                raise ConfigurationError(f"Missing {definition.scope_env} for course '{definition.key}'")
            courses.append(
                Course(key=definition.key, label=definition.label, scope_id=scope, hint=definition.hint)
            )
        return cls(courses)

    def lookup(self, course_id: str | None) -> Course | None:
        if course_id is None:
            return None
        return self._courses.get(course_id)

    def courses(self) -> tuple[Course, ...]:
        return tuple(self._courses.values())

    def options(self) -> list[CourseOption]:
        return [CourseOption(value=course.key, label=course.label) for course in self._courses.values()]

    def __len__(self) -> int:
        return len(self._courses)

    def __contains__(self, course_id: object) -> bool:
        return course_id in self._courses
