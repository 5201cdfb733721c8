"""Shared test fixtures and configuration for chunk engine tests."""

import threading
from typing import Dict, List, Optional, Sequence
from unittest.mock import Mock

import pytest

from chunk_engine.exceptions import ProviderUnavailableError, MalformedProviderResponseError
from chunk_engine.providers import EmbeddingProvider, LLMProvider


class FakeEmbeddingProvider(EmbeddingProvider):
    """
    Deterministic embedding provider.

    Texts listed in ``vectors`` get their vector; everything else gets
    ``default``. Texts in ``failing`` raise ``ProviderUnavailableError``, as a
    connection failure unless ``status_code`` is set.
    """

    def __init__(
        self,
        vectors: Optional[Dict[str, List[float]]] = None,
        default: Optional[List[float]] = None,
        failing: Sequence[str] = (),
        fail_all: bool = False,
        dimension: int = 3,
        status_code: Optional[int] = None
    ) -> None:
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0, 0.0]
        self.failing = set(failing)
        self.fail_all = fail_all
        self._dimension = dimension
        self.status_code = status_code
        self.calls: List[str] = []
        self._lock = threading.Lock()

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return "fake-embed"

    def embed(self, text: str) -> List[float]:
        with self._lock:
            self.calls.append(text)
        if self.fail_all or text in self.failing:
            raise ProviderUnavailableError(
                "connection refused" if self.status_code is None else "server error",
                status_code=self.status_code,
                url="http://fake/api/embeddings"
            )
        return list(self.vectors.get(text, self.default))


class FakeLLMProvider(LLMProvider):
    """LLM provider returning a canned response and recording prompts."""

    def __init__(self, response: str = "", error: Optional[Exception] = None, model: str = "fake-llm") -> None:
        self.response = response
        self.error = error
        self._model = model
        self.prompts: List[str] = []

    @property
    def model_name(self) -> str:
        return self._model

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_embeddings():
    """Provide a fake embedding provider factory."""
    return FakeEmbeddingProvider


@pytest.fixture
def fake_llm():
    """Provide a fake LLM provider factory."""
    return FakeLLMProvider


@pytest.fixture
def unavailable_error():
    return ProviderUnavailableError("connection refused", url="http://fake")


@pytest.fixture
def malformed_error():
    return MalformedProviderResponseError("not json", body_preview="<html>")


@pytest.fixture
def mock_response():
    """Build mock ``requests`` responses."""
    def _build(status_code: int = 200, json_data=None, text: str = ""):
        response = Mock()
        response.status_code = status_code
        response.text = text
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
        else:
            response.json.return_value = json_data
        return response
    return _build


@pytest.fixture
def markdown_document():
    """Provide a small Markdown document with nested headings."""
    return (
        "Intro text before any heading.\n"
        "\n"
        "# Title\n"
        "Opening paragraph.\n"
        "\n"
        "## Details\n"
        "Some details here.\n"
        "\n"
        "```python\n"
        "# not a heading\n"
        "```\n"
        "\n"
        "### Deep\n"
        "Deep content.\n"
    )


@pytest.fixture
def transcript():
    """Provide a short dialogue transcript."""
    return (
        "Recorded on Monday.\n"
        "Alice: Hello there.\n"
        "Alice: How are you?\n"
        "Bob: Fine, thanks.\n"
        "Alice: Great.\n"
    )
