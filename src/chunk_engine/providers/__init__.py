"""
Provider package.

This package defines the embedding and LLM collaborator interfaces used by the
semantic, smart and LLM-boundary strategies, together with an
Ollama-compatible HTTP implementation and the embedding failure policies.

Example Usage:
    >>> config = ProviderConfiguration(model_name="nomic-embed-text")
    >>> embeddings = OllamaEmbeddingProvider(config)
    >>> llm = OllamaLLMProvider(ProviderConfiguration(model_name="llama3.2"))
"""

from .base import EmbeddingProvider, LLMProvider
from .config import ProviderConfiguration
from .client import OllamaClient
from .ollama import OllamaEmbeddingProvider, OllamaLLMProvider
from .fallback import (
    EmbeddingOutcome,
    EmbeddingFallbackPolicy,
    ZeroVectorFallback,
    OmitEmbeddingOnFailure,
    StrictEmbeddingPolicy,
)

__all__ = [
    "EmbeddingProvider",
    "LLMProvider",
    "ProviderConfiguration",
    "OllamaClient",
    "OllamaEmbeddingProvider",
    "OllamaLLMProvider",
    "EmbeddingOutcome",
    "EmbeddingFallbackPolicy",
    "ZeroVectorFallback",
    "OmitEmbeddingOnFailure",
    "StrictEmbeddingPolicy",
]
