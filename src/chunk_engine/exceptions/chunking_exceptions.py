"""
Chunking-related exceptions for the chunk engine.

Custom exception classes covering the failure modes of text segmentation:
unreachable or misbehaving providers, invalid caller-supplied patterns and
unusable strategy parameters.

Exception Hierarchy:
    ChunkEngineError
    ├── ProviderError
    │   ├── ProviderUnavailableError
    │   └── MalformedProviderResponseError
    ├── PatternError
    └── ConfigurationError

Provider errors are recovered locally wherever a fallback value exists.
PatternError and ConfigurationError never reach the caller from a segmenter;
they degrade to a single whole-document chunk.
"""

from typing import Any, Dict, List, Optional


class ChunkEngineError(Exception):
    """Base exception for chunk engine errors."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None
    ) -> None:
        """
        Initialize chunk engine error.

        Args:
            message: Error description
            context: Additional structured context for diagnostics
            suggestions: List of suggested fixes
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []

    def __str__(self) -> str:
        """Return formatted error message with suggestions."""
        msg = super().__str__()

        if self.suggestions:
            msg += "\n\nSuggestions:"
            for i, suggestion in enumerate(self.suggestions, 1):
                msg += f"\n  {i}. {suggestion}"

        return msg


class ProviderError(ChunkEngineError):
    """Base exception for embedding and LLM provider failures."""
    pass


class ProviderUnavailableError(ProviderError):
    """
    Exception raised when a provider cannot be reached or answers with a non-2xx status.

    Attributes:
        status_code: HTTP status code if a response was received
        url: Endpoint that was called
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None
    ) -> None:
        suggestions = []
        if status_code is None:
            suggestions.append("Check that the provider service is running and reachable")
        elif status_code == 404:
            suggestions.append("Check that the requested model has been pulled on the provider")

        super().__init__(
            message,
            context={"status_code": status_code, "url": url},
            suggestions=suggestions
        )
        self.status_code = status_code
        self.url = url


class MalformedProviderResponseError(ProviderError):
    """
    Exception raised when a provider response cannot be decoded.

    Attributes:
        body_preview: First characters of the offending response body
    """

    def __init__(self, message: str, body_preview: Optional[str] = None) -> None:
        super().__init__(message, context={"body_preview": body_preview})
        self.body_preview = body_preview


class PatternError(ChunkEngineError):
    """Exception raised when a caller-supplied regular expression is unusable."""

    def __init__(self, message: str, pattern: Optional[str] = None) -> None:
        super().__init__(
            message,
            context={"pattern": pattern},
            suggestions=["Provide a valid regular expression with one capture group for the speaker name"]
        )
        self.pattern = pattern


class ConfigurationError(ChunkEngineError):
    """Exception raised when no valid strategy-specific parameters were supplied."""

    def __init__(self, message: str, parameter: Optional[str] = None) -> None:
        super().__init__(message, context={"parameter": parameter})
        self.parameter = parameter
