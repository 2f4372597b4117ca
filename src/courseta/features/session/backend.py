"""Grounded-answer backend.

A :class:`GroundedQuery` names exactly one knowledge scope, so a request can
never search more than one course's files.  :class:`OpenAIBackend` turns the
query into a Responses API call with the ``file_search`` tool.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from openai import OpenAI, OpenAIError

from ...core.errors import BackendError
from .concurrency import run_blocking

__all__ = ["GroundedBackend", "GroundedQuery", "OpenAIBackend"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroundedQuery:
    model: str
    instructions: str
    question: str
    scope_id: str

    def messages(self) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self.instructions},
            {"role": "user", "content": self.question},
        ]

    def tools(self) -> list[dict[str, Any]]:
        return [{"type": "file_search", "vector_store_ids": [self.scope_id]}]


class GroundedBackend(Protocol):
    async def generate(self, query: GroundedQuery) -> str:
        """Return the raw answer text or raise :class:`BackendError`."""
        ...


class OpenAIBackend:
    def __init__(
        self,
        api_key: str | None = None,
        *,
        timeout: float = 60.0,
        client: Any | None = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ValueError("an API key is required when no client is supplied")
            # Retries are the caller's decision; a failed call surfaces immediately.
            client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._client = client

    def _create(self, query: GroundedQuery) -> str:
        try:
            response = self._client.responses.create(
                model=query.model,
                input=query.messages(),
                tools=query.tools(),
            )
        except OpenAIError as exc:
            raise BackendError(f"{type(exc).__name__}: {exc}") from exc
        text = getattr(response, "output_text", None)
        if not isinstance(text, str):
            raise BackendError(f"response carried no output text ({type(text).__name__})")
        return text

    async def generate(self, query: GroundedQuery) -> str:
        logger.debug("grounded query", extra={"model": query.model, "scope_id": query.scope_id})
        return await run_blocking(self._create, query)
