"""
Exceptions package for the chunk engine.

This package contains custom exception classes for the error scenarios of
text segmentation.
"""

from .chunking_exceptions import (
    ChunkEngineError,
    ProviderError,
    ProviderUnavailableError,
    MalformedProviderResponseError,
    PatternError,
    ConfigurationError,
)

__all__ = [
    "ChunkEngineError",
    "ProviderError",
    "ProviderUnavailableError",
    "MalformedProviderResponseError",
    "PatternError",
    "ConfigurationError",
]
