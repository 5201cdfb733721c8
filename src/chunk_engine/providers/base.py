"""
Abstract base classes for embedding and LLM providers.

This module defines the interfaces the embedding-backed segmenters depend on,
so the segmentation core never sees HTTP details and tests can substitute
deterministic fakes.
"""

from abc import ABC, abstractmethod
from typing import List


class EmbeddingProvider(ABC):
    """
    Abstract base class for embedding providers.

    Implementations return one fixed-length vector per text. Failures are
    reported as ``ProviderUnavailableError`` (transport / non-2xx) or
    ``MalformedProviderResponseError`` (undecodable response).
    """

    @abstractmethod
    def embed(self, text: str) -> List[float]:
        """
        Generate embedding for a single text string.

        Args:
            text: Input text to embed

        Returns:
            List of float values of length ``dimension``

        Raises:
            ProviderUnavailableError: If the provider cannot be reached
            MalformedProviderResponseError: If the response cannot be decoded
        """
        pass

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Declared dimensionality of the vectors produced by this provider."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of the embedding model."""
        pass


class LLMProvider(ABC):
    """Abstract base class for single-shot, non-streaming text generation."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """
        Generate a completion for the prompt.

        Raises:
            ProviderUnavailableError: If the provider cannot be reached
            MalformedProviderResponseError: If the response cannot be decoded
        """
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of the generation model."""
        pass
