"""
Environment-driven settings for the chunk engine.

Settings cover the provider endpoints and models used by the embedding-backed
strategies. Values come from explicit arguments, ``CHUNK_ENGINE_*``
environment variables, or an optional ``.env`` file.

Environment variables:
    CHUNK_ENGINE_OLLAMA_URL          Base URL of the Ollama-compatible service
    CHUNK_ENGINE_EMBEDDING_MODEL     Embedding model identifier
    CHUNK_ENGINE_EMBEDDING_DIMENSION Declared embedding dimensionality
    CHUNK_ENGINE_LLM_MODEL           Model used by the LLM boundary strategy
    CHUNK_ENGINE_TIMEOUT             HTTP timeout in seconds
    CHUNK_ENGINE_MAX_RETRIES         Retry attempts for transient failures
    CHUNK_ENGINE_RETRY_DELAY         Base backoff delay in seconds
    CHUNK_ENGINE_EMBEDDING_WORKERS   Worker threads for semantic embeddings
    CHUNK_ENGINE_LOG_LEVEL           Log level name
"""

import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv

from .logging_config import LogLevel

logger = logging.getLogger(__name__)

ENV_PREFIX = "CHUNK_ENGINE_"

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_EMBEDDING_MODEL = "nomic-embed-text"
DEFAULT_EMBEDDING_DIMENSION = 768
DEFAULT_LLM_MODEL = "llama3.2"


def convert_env_value(name: str, value: str, target_type: type) -> Any:
    """
    Convert an environment variable string to the target type.

    Raises:
        ValueError: If the value cannot be converted
    """
    try:
        if target_type is bool:
            return value.strip().lower() in ('true', '1', 'yes', 'on', 'enabled')
        return target_type(value)
    except ValueError as e:
        raise ValueError(
            f"Failed to convert environment variable {name}='{value}' to {target_type.__name__}: {e}"
        ) from e


@dataclass
class EngineSettings:
    """
    Provider and runtime settings shared by engine instances.

    Attributes:
        ollama_url: Base URL of the embedding / LLM service
        embedding_model: Default embedding model identifier
        embedding_dimension: Dimensionality of the embedding vectors (zero-vector fallback size)
        llm_model: Default model for the LLM boundary strategy
        timeout: HTTP request timeout in seconds
        max_retries: Retry attempts for connection errors and 5xx responses
        retry_delay: Base delay for exponential backoff in seconds
        embedding_workers: Bounded worker pool size for semantic embeddings (1 = sequential)
        log_level: Log level name, applied by ``configure_logging(settings=...)``
    """

    ollama_url: str = DEFAULT_OLLAMA_URL
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_dimension: int = DEFAULT_EMBEDDING_DIMENSION
    llm_model: str = DEFAULT_LLM_MODEL
    timeout: float = 60.0
    max_retries: int = 2
    retry_delay: float = 0.5
    embedding_workers: int = 1
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not self.ollama_url:
            raise ValueError("ollama_url must be a non-empty URL")
        self.ollama_url = self.ollama_url.rstrip("/")

        if self.embedding_dimension <= 0:
            raise ValueError(f"embedding_dimension must be positive, got: {self.embedding_dimension}")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be non-negative")
        if self.embedding_workers < 1:
            raise ValueError(f"embedding_workers must be at least 1, got: {self.embedding_workers}")

        LogLevel.from_name(self.log_level)

    @classmethod
    def from_environment(cls, env_file: Optional[Union[str, Path]] = None, **overrides) -> 'EngineSettings':
        """
        Create settings from ``CHUNK_ENGINE_*`` environment variables.

        Args:
            env_file: Optional ``.env`` file loaded before reading the environment
            **overrides: Explicit values taking precedence over the environment

        Returns:
            EngineSettings instance
        """
        if env_file is not None:
            env_path = Path(env_file)
            if env_path.exists():
                load_dotenv(env_path)
                logger.debug(f"Loaded environment variables from {env_path}")
            else:
                logger.debug(f"Environment file not found at {env_path}, skipping")

        values: Dict[str, Any] = {}
        for field_name, field_type in cls._field_types().items():
            env_name = f"{ENV_PREFIX}{field_name.upper()}"
            raw = os.getenv(env_name)
            if raw is not None and raw != "":
                values[field_name] = convert_env_value(env_name, raw, field_type)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @staticmethod
    def _field_types() -> Dict[str, type]:
        return {
            "ollama_url": str,
            "embedding_model": str,
            "embedding_dimension": int,
            "llm_model": str,
            "timeout": float,
            "max_retries": int,
            "retry_delay": float,
            "embedding_workers": int,
            "log_level": str,
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
