"""
Chunk Engine - Multi-strategy text segmentation.

Splits documents into ordered chunks for retrieval and embedding pipelines,
using fixed windows, natural-language units, document structure, token
budgets, embedding similarity or LLM-chosen boundaries.
"""

__version__ = "0.1.0"

from .core.chunking import (
    Chunk,
    ChunkingEngine,
    ChunkingOptions,
    ChunkingParameters,
    ChunkingResult,
    ChunkStrategy,
    ProcessingMetadata,
    chunk_text,
)
from .exceptions import (
    ChunkEngineError,
    ProviderError,
    ProviderUnavailableError,
    MalformedProviderResponseError,
    PatternError,
    ConfigurationError,
)
from .utils import EngineSettings, configure_logging

__all__ = [
    "Chunk",
    "ChunkingEngine",
    "ChunkingOptions",
    "ChunkingParameters",
    "ChunkingResult",
    "ChunkStrategy",
    "ProcessingMetadata",
    "chunk_text",
    "ChunkEngineError",
    "ProviderError",
    "ProviderUnavailableError",
    "MalformedProviderResponseError",
    "PatternError",
    "ConfigurationError",
    "EngineSettings",
    "configure_logging",
]
