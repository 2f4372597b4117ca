from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any

import openai
import pytest

from courseta.core.errors import BackendError
from courseta.features.session import GroundedQuery, OpenAIBackend


class _FakeResponses:
    def __init__(self, outcome: Any) -> None:
        self.outcome = outcome
        self.requests: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.requests.append(kwargs)
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


def _backend(outcome: Any) -> tuple[OpenAIBackend, _FakeResponses]:
    responses = _FakeResponses(outcome)
    return OpenAIBackend(client=SimpleNamespace(responses=responses)), responses


_QUERY = GroundedQuery(model="gpt-4.1-mini", instructions="Be grounded.", question="What is a core loop?", scope_id="vs_bonus")


def test_generate_sends_single_scope_file_search_request() -> None:
    backend, responses = _backend(SimpleNamespace(output_text="  answer  "))

    text = asyncio.run(backend.generate(_QUERY))

    assert text == "  answer  "
    (request,) = responses.requests
    assert request["model"] == "gpt-4.1-mini"
    assert request["input"] == [
        {"role": "system", "content": "Be grounded."},
        {"role": "user", "content": "What is a core loop?"},
    ]
    assert request["tools"] == [{"type": "file_search", "vector_store_ids": ["vs_bonus"]}]


def test_openai_errors_become_backend_errors() -> None:
    backend, _ = _backend(openai.OpenAIError("connection reset by peer"))
    with pytest.raises(BackendError, match="connection reset"):
        asyncio.run(backend.generate(_QUERY))


@pytest.mark.parametrize("response", [SimpleNamespace(), SimpleNamespace(output_text=None), SimpleNamespace(output_text=3)])
def test_malformed_response_is_a_backend_error(response: Any) -> None:
    backend, _ = _backend(response)
    with pytest.raises(BackendError):
        asyncio.run(backend.generate(_QUERY))


def test_api_key_required_without_client() -> None:
    with pytest.raises(ValueError):
        OpenAIBackend()
