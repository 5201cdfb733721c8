"""
Provider configuration.

This module provides the configuration dataclass shared by the Ollama
embedding and LLM providers, with validation and construction from
``EngineSettings``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..utils.settings import EngineSettings, DEFAULT_OLLAMA_URL, DEFAULT_EMBEDDING_DIMENSION

logger = logging.getLogger(__name__)


@dataclass
class ProviderConfiguration:
    """
    Configuration for an Ollama-compatible provider endpoint.

    Attributes:
        model_name: Model identifier sent with every request
        base_url: Base URL of the service (``/api/...`` paths are appended)
        embedding_dimension: Declared vector size, used for zero-vector fallbacks
        max_retries: Retry attempts for connection errors and 5xx responses
        retry_delay: Base delay in seconds between attempts (exponential backoff)
        timeout: HTTP request timeout in seconds

    Example:
        >>> config = ProviderConfiguration(model_name="nomic-embed-text")
        >>> config.base_url
        'http://localhost:11434'
    """

    model_name: str
    base_url: str = DEFAULT_OLLAMA_URL
    embedding_dimension: int = DEFAULT_EMBEDDING_DIMENSION
    max_retries: int = 2
    retry_delay: float = 0.5
    timeout: float = 60.0

    def __post_init__(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ValueError: If any parameter is invalid
        """
        if not self.model_name:
            raise ValueError("model_name must be specified")
        if not self.base_url:
            raise ValueError("base_url must be specified")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got: {self.base_url}")
        self.base_url = self.base_url.rstrip("/")

        if self.embedding_dimension <= 0:
            raise ValueError("embedding_dimension must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be non-negative")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings,
        model_name: Optional[str] = None,
        base_url: Optional[str] = None
    ) -> 'ProviderConfiguration':
        """
        Build a provider configuration from engine settings.

        Args:
            settings: Engine-wide settings
            model_name: Model override (defaults to ``settings.embedding_model``)
            base_url: Endpoint override (defaults to ``settings.ollama_url``)
        """
        return cls(
            model_name=model_name or settings.embedding_model,
            base_url=base_url or settings.ollama_url,
            embedding_dimension=settings.embedding_dimension,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay,
            timeout=settings.timeout,
        )
