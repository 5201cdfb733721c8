"""
Embedding failure policies.

A policy decides what a segmenter gets back when the embedding provider fails
for one piece of text. Segmenters receive a policy instead of catching
provider errors inline, so both the happy path and the fallback path can be
exercised deterministically.

Policies:
    ZeroVectorFallback      substitute a zero vector of the provider's dimension
    OmitEmbeddingOnFailure  leave the embedding absent
    StrictEmbeddingPolicy   propagate the provider error
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..exceptions import ProviderError
from .base import EmbeddingProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmbeddingOutcome:
    """Result of one policy-guarded embedding request."""

    vector: Optional[List[float]]
    error: Optional[ProviderError] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class EmbeddingFallbackPolicy(ABC):
    """Strategy for turning an embedding request into an outcome."""

    @abstractmethod
    def resolve(self, provider: EmbeddingProvider, text: str) -> EmbeddingOutcome:
        pass


class ZeroVectorFallback(EmbeddingFallbackPolicy):
    """Substitute ``[0.0] * provider.dimension`` when the provider fails."""

    def resolve(self, provider: EmbeddingProvider, text: str) -> EmbeddingOutcome:
        try:
            return EmbeddingOutcome(provider.embed(text))
        except ProviderError as e:
            logger.warning(f"Embedding failed, substituting zero vector: {e.message}")
            return EmbeddingOutcome([0.0] * provider.dimension, error=e)


class OmitEmbeddingOnFailure(EmbeddingFallbackPolicy):
    """Return no vector when the provider fails."""

    def resolve(self, provider: EmbeddingProvider, text: str) -> EmbeddingOutcome:
        try:
            return EmbeddingOutcome(provider.embed(text))
        except ProviderError as e:
            logger.warning(f"Embedding failed, leaving chunk without embedding: {e.message}")
            return EmbeddingOutcome(None, error=e)


class StrictEmbeddingPolicy(EmbeddingFallbackPolicy):
    """Propagate provider errors unchanged."""

    def resolve(self, provider: EmbeddingProvider, text: str) -> EmbeddingOutcome:
        return EmbeddingOutcome(provider.embed(text))
