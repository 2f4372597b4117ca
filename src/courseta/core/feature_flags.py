"""Lightweight feature flag helpers.

The assistant exposes a couple of behavioural switches that operators flip per
deployment without touching code.  Flags are read from an environment variable
and can be temporarily overridden in tests via a context manager.

Usage::

    from courseta.core import feature_flags

    if feature_flags.is_enabled(feature_flags.PUBLIC_ANSWERS):
        ...

The environment variable ``COURSETA_FEATURES`` accepts a comma-separated list
of flag names.  Flag names are case-insensitive.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from contextlib import contextmanager
from typing import Final

_ENV_VAR: Final = "COURSETA_FEATURES"

# Post answers requested through the command argument as visible channel messages.
PUBLIC_ANSWERS: Final = "answers.public"
# After a course pick, ask the user to re-run the command with a question
# instead of opening the question form.
INLINE_QUESTION: Final = "flow.inline_question"


def _normalise(flag: str) -> str:
    return flag.strip().lower()


def _parse_env(raw: str | None) -> set[str]:
    if not raw:
        return set()
    return {_normalise(entry) for entry in raw.split(",") if entry.strip()}


_OVERRIDE_STACK: list[tuple[set[str], set[str]]] = []


def _current_overrides() -> tuple[set[str], set[str]]:
    enabled: set[str] = set()
    disabled: set[str] = set()
    for en, dis in _OVERRIDE_STACK:
        enabled.update(en)
        disabled.update(dis)
    return enabled, disabled


def is_enabled(flag: str, environ: Mapping[str, str] | None = None) -> bool:
    """Return True when *flag* is enabled via env var or overrides."""

    key = _normalise(flag)
    enabled, disabled = _current_overrides()
    if key in disabled:
        return False
    if key in enabled:
        return True
    source = os.environ if environ is None else environ
    return key in _parse_env(source.get(_ENV_VAR))


@contextmanager
def override(*, enable: Iterable[str] | None = None, disable: Iterable[str] | None = None):
    """Temporarily override flag state within the context.

    Overrides are stacked, so nested contexts behave predictably.
    """

    enabled = {_normalise(flag) for flag in (enable or ())}
    disabled = {_normalise(flag) for flag in (disable or ())}
    _OVERRIDE_STACK.append((enabled, disabled))
    try:
        yield
    finally:
        _OVERRIDE_STACK.pop()


def set_env_flags(flags: Iterable[str]) -> None:
    os.environ[_ENV_VAR] = ",".join(sorted({_normalise(flag) for flag in flags}))
