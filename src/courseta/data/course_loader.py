from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import ConfigurationError

__all__ = ["CourseDefinition", "CourseLoaderConfig", "load_course_definitions"]


class CourseDefinition(BaseModel):
    """Static description of a course; the scope id itself comes from the env."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    scope_env: str
    hint: str

    @field_validator("key", "label", "scope_env", "hint")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class _CourseFile(BaseModel):
    courses: list[CourseDefinition]


@dataclass(slots=True)
class CourseLoaderConfig:
    """Location of the course definition resource."""

    resource: Path


def _default_resource() -> Path:
    return Path(__file__).with_name("courses.json")


def load_course_definitions(config: CourseLoaderConfig | None = None) -> list[CourseDefinition]:
    resource = config.resource if config else _default_resource()
    try:
        with resource.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"cannot read course definitions from {resource}: {exc}") from exc
    try:
        parsed = _CourseFile.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigurationError(f"invalid course definitions in {resource}: {exc}") from exc
    return list(parsed.courses)
