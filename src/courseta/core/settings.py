"""Environment-driven configuration.

Every required value is read once at startup.  Anything missing is reported
in a single :class:`ConfigurationError` so operators can fix the deployment in
one pass; the process never reaches a ready state with a partial config.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..data.course_loader import CourseDefinition, load_course_definitions
from . import feature_flags
from .errors import ConfigurationError

__all__ = ["DeploymentEnv", "Settings", "load_settings"]

DEFAULT_MODEL: Final = "gpt-4.1-mini"
DEFAULT_TIMEOUT: Final = 60.0

# Blank and absent values are both reported as missing.
_MISSING_ERRORS: Final = frozenset({"missing", "string_too_short"})


class DeploymentEnv(BaseSettings):
    """Fixed process settings, one environment variable per field."""

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
        str_strip_whitespace=True,
    )

    discord_token: str = Field(validation_alias="DISCORD_BOT_TOKEN", min_length=1, repr=False)
    openai_api_key: str = Field(validation_alias="OPENAI_API_KEY", min_length=1, repr=False)
    channel_id: str = Field(validation_alias="TA_CHANNEL_ID", min_length=1)
    guild_id: int = Field(validation_alias="GUILD_ID")
    model: str = Field(default=DEFAULT_MODEL, validation_alias="OPENAI_MODEL", min_length=1)
    request_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, validation_alias="OPENAI_TIMEOUT")
    log_level: str = Field(default="INFO", validation_alias="COURSETA_LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper() or "INFO"
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    discord_token: str = Field(repr=False)
    openai_api_key: str = Field(repr=False)
    channel_id: str
    guild_id: int
    courses: tuple[CourseDefinition, ...]
    # course key -> knowledge-scope id
    course_scopes: dict[str, str]
    model: str = DEFAULT_MODEL
    request_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    log_level: str = "INFO"
    public_answers: bool = False
    inline_question: bool = False


def _read_deployment(environ: Mapping[str, str] | None) -> DeploymentEnv:
    if environ is None:
        return DeploymentEnv()
    return DeploymentEnv.model_validate({name: value for name, value in environ.items() if value and value.strip()})


def _error_name(error: Mapping[str, Any]) -> str:
    return ".".join(str(part) for part in error["loc"])


def load_settings(
    environ: Mapping[str, str] | None = None,
    courses: Sequence[CourseDefinition] | None = None,
) -> Settings:
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ``)."""

    env = os.environ if environ is None else environ
    definitions = tuple(courses if courses is not None else load_course_definitions())

    deployment: DeploymentEnv | None = None
    missing: list[str] = []
    invalid: list[str] = []
    try:
        deployment = _read_deployment(environ)
    except PydanticValidationError as exc:
        for error in exc.errors():
            if error["type"] in _MISSING_ERRORS:
                missing.append(_error_name(error))
            else:
                invalid.append(f"{_error_name(error)} ({error['msg']})")

    scopes: dict[str, str] = {}
    for definition in definitions:
        scope = (env.get(definition.scope_env) or "").strip()
        if scope:
            scopes[definition.key] = scope
        else:
            missing.append(definition.scope_env)

    if missing:
        raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")
    if invalid or deployment is None:
        raise ConfigurationError(f"Invalid settings: {'; '.join(invalid)}")

    return Settings(
        **deployment.model_dump(),
        courses=definitions,
        course_scopes=scopes,
        public_answers=feature_flags.is_enabled(feature_flags.PUBLIC_ANSWERS, env),
        inline_question=feature_flags.is_enabled(feature_flags.INLINE_QUESTION, env),
    )
