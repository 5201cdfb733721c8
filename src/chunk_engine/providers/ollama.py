"""
Ollama-compatible embedding and LLM providers.

Request/response shapes:
    POST /api/embeddings  {"model", "prompt"}                    -> {"embedding": [float, ...]}
    POST /api/generate    {"model", "prompt", "stream": false}   -> {"response": "..."}
"""

import logging
from numbers import Real
from typing import List, Optional

from ..exceptions import MalformedProviderResponseError
from .base import EmbeddingProvider, LLMProvider
from .client import OllamaClient
from .config import ProviderConfiguration

logger = logging.getLogger(__name__)

EMBEDDINGS_PATH = "/api/embeddings"
GENERATE_PATH = "/api/generate"


class OllamaEmbeddingProvider(EmbeddingProvider):
    """
    Embedding provider backed by an Ollama ``/api/embeddings`` endpoint.

    Example:
        >>> provider = OllamaEmbeddingProvider(ProviderConfiguration(model_name="nomic-embed-text"))
        >>> vector = provider.embed("Hello world")
        >>> len(vector) == provider.dimension
        True
    """

    def __init__(self, config: ProviderConfiguration, client: Optional[OllamaClient] = None) -> None:
        self.config = config
        self.client = client or OllamaClient(config)

    @property
    def dimension(self) -> int:
        return self.config.embedding_dimension

    @property
    def model_name(self) -> str:
        return self.config.model_name

    def embed(self, text: str) -> List[float]:
        data = self.client.post_json(EMBEDDINGS_PATH, {"model": self.config.model_name, "prompt": text})

        embedding = data.get("embedding")
        if not isinstance(embedding, list) or not all(
            isinstance(value, Real) and not isinstance(value, bool) for value in embedding
        ):
            raise MalformedProviderResponseError(
                "Embedding response is missing a numeric 'embedding' array",
                body_preview=str(data)[:200]
            )

        if len(embedding) != self.dimension:
            logger.debug(
                f"Model {self.model_name} returned {len(embedding)} dimensions, "
                f"configured dimension is {self.dimension}"
            )
        return [float(value) for value in embedding]

    def close(self) -> None:
        """Release the HTTP session held by the client."""
        self.client.close()


class OllamaLLMProvider(LLMProvider):
    """LLM provider backed by a non-streaming Ollama ``/api/generate`` endpoint."""

    def __init__(self, config: ProviderConfiguration, client: Optional[OllamaClient] = None) -> None:
        self.config = config
        self.client = client or OllamaClient(config)

    @property
    def model_name(self) -> str:
        return self.config.model_name

    def generate(self, prompt: str) -> str:
        data = self.client.post_json(
            GENERATE_PATH,
            {"model": self.config.model_name, "prompt": prompt, "stream": False}
        )

        response = data.get("response")
        if not isinstance(response, str):
            raise MalformedProviderResponseError(
                "Generate response is missing a 'response' string",
                body_preview=str(data)[:200]
            )
        return response

    def close(self) -> None:
        self.client.close()
