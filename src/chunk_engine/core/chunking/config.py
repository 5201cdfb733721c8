"""
Chunking Configuration Module

Contains the strategy enumeration, the validated caller configuration and the
per-strategy parameter variants.

Components:
- ChunkStrategy: Enumeration of the thirteen segmentation strategies
- ChunkingOptions: Caller configuration with validation and serialization
- *Params: One frozen dataclass per strategy carrying only what it reads
"""

import json
import logging
from dataclasses import dataclass, asdict, fields
from enum import Enum
from typing import Any, Dict, Optional, Union

from .result import ChunkingParameters

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 500
DEFAULT_OVERLAP = 50
DEFAULT_MODEL = "nomic-embed-text"
DEFAULT_THRESHOLD = 0.8
DEFAULT_HEADING_LEVELS = "1,2,3,4,5,6"
DEFAULT_TOKEN_LIMIT = 512
DEFAULT_TOKENIZER = "word"
DEFAULT_MAX_CHUNK_SIZE = 1000
DEFAULT_MIN_CHUNK_SIZE = 100


class ChunkStrategy(Enum):
    """
    Enumeration of available segmentation strategies.

    The value is the tag written into ``Chunk.strategy`` and
    ``ChunkingResult.strategy``.
    """
    FIXED = "fixed"  # Fixed character windows with overlap
    SENTENCE = "sentence"  # Greedy sentence accumulation
    PARAGRAPH = "paragraph"  # Greedy blank-line paragraph accumulation
    CODE = "code"  # Flush only at function/class boundaries
    HEADING = "heading"  # Markdown ATX heading sections
    DIALOGUE = "dialogue"  # Speaker turns
    LIST = "list"  # Keeps list runs intact
    TABLE = "table"  # Keeps table runs intact
    TOKEN = "token"  # Token-budgeted sentence accumulation
    RECURSIVE = "recursive"  # Cascading boundary search with size bounds
    SEMANTIC = "semantic"  # Embedding similarity breaks
    SMART = "smart"  # Semantic with sentence re-segmentation of oversized chunks
    LLM = "llm"  # LLM-tagged logical sections

    @property
    def uses_embeddings(self) -> bool:
        return self in (ChunkStrategy.SEMANTIC, ChunkStrategy.SMART, ChunkStrategy.LLM)

    @classmethod
    def parse(cls, value: Union[str, 'ChunkStrategy']) -> 'ChunkStrategy':
        """
        Resolve a strategy from an enum member or its case-insensitive tag.

        Raises:
            ValueError: If the tag is unknown
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown chunking strategy '{value}', expected one of: {valid}")


@dataclass(frozen=True)
class FixedWindowParams:
    size: int
    overlap: int


@dataclass(frozen=True)
class SentenceParams:
    target_size: int


@dataclass(frozen=True)
class ParagraphParams:
    target_size: int


@dataclass(frozen=True)
class CodeParams:
    target_size: int


@dataclass(frozen=True)
class HeadingParams:
    heading_levels: str


@dataclass(frozen=True)
class DialogueParams:
    speaker_pattern: Optional[str] = None


@dataclass(frozen=True)
class ListParams:
    target_size: int


@dataclass(frozen=True)
class TableParams:
    target_size: int


@dataclass(frozen=True)
class TokenParams:
    token_limit: int
    tokenizer: str


@dataclass(frozen=True)
class RecursiveParams:
    max_chunk_size: int
    min_chunk_size: int


@dataclass(frozen=True)
class SemanticParams:
    model: str
    threshold: float


@dataclass(frozen=True)
class SmartParams:
    target_size: int
    model: str
    threshold: float


@dataclass(frozen=True)
class LLMParams:
    llm_model: Optional[str]
    model: str
    llm_url: Optional[str] = None
    chunk_prompt: Optional[str] = None


StrategyParams = Union[
    FixedWindowParams, SentenceParams, ParagraphParams, CodeParams,
    HeadingParams, DialogueParams, ListParams, TableParams, TokenParams,
    RecursiveParams, SemanticParams, SmartParams, LLMParams,
]


@dataclass
class ChunkingOptions:
    """
    Caller configuration for one chunking call.

    Every option of the engine entry point lives here; each strategy reads
    only its own subset through ``parameters_for``.

    Attributes:
        size: Target / window size in characters
        overlap: Characters shared between fixed windows
        model: Embedding model identifier
        threshold: Similarity cutoff for semantic and smart strategies (0.0-1.0)
        source: Optional provenance recorded as ``metadata.source_file``
        llm_model: Model for the LLM boundary strategy
        llm_url: Endpoint for the LLM boundary strategy
        chunk_prompt: Prompt override for the LLM boundary strategy
        heading_levels: Comma-separated heading levels (1-6)
        speaker_pattern: Regex with one capture group naming the speaker
        token_limit: Token budget per chunk
        tokenizer: Tokenizer name ("word" or "gpt", or a registered custom name)
        max_chunk_size: Upper bound for recursive chunks
        min_chunk_size: Lower bound for recursive chunks; when unset it is
            a tenth of ``max_chunk_size``, at most ``DEFAULT_MIN_CHUNK_SIZE``

    Example:
        >>> options = ChunkingOptions(size=200, overlap=20)
        >>> options.parameters_for(ChunkStrategy.FIXED)
        FixedWindowParams(size=200, overlap=20)
    """

    size: int = DEFAULT_SIZE
    overlap: int = DEFAULT_OVERLAP
    model: str = DEFAULT_MODEL
    threshold: float = DEFAULT_THRESHOLD
    source: Optional[str] = None
    llm_model: Optional[str] = None
    llm_url: Optional[str] = None
    chunk_prompt: Optional[str] = None
    heading_levels: Optional[str] = None
    speaker_pattern: Optional[str] = None
    token_limit: int = DEFAULT_TOKEN_LIMIT
    tokenizer: str = DEFAULT_TOKENIZER
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    min_chunk_size: Optional[int] = None

    def __post_init__(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ValueError: If any parameter is out of range
            TypeError: If parameter types are incorrect
        """
        for name in ("size", "overlap", "token_limit", "max_chunk_size", "min_chunk_size"):
            value = getattr(self, name)
            if name == "min_chunk_size" and value is None:
                continue
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{name} must be an integer, got: {type(value)}")

        if self.size <= 0:
            raise ValueError(f"size must be positive integer, got: {self.size}")

        if self.overlap < 0:
            raise ValueError(f"overlap must be non-negative integer, got: {self.overlap}")

        if self.overlap >= self.size:
            logger.warning(
                f"overlap ({self.overlap}) is not smaller than size ({self.size}), "
                f"fixed windows will advance one character at a time"
            )

        if not isinstance(self.threshold, (int, float)) or not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be between 0.0 and 1.0, got: {self.threshold}")

        if not self.model:
            raise ValueError("model must be a non-empty embedding model identifier")

        if self.token_limit <= 0:
            raise ValueError(f"token_limit must be positive, got: {self.token_limit}")

        if not isinstance(self.tokenizer, str) or not self.tokenizer.strip():
            raise TypeError(f"tokenizer must be a non-empty string, got: {self.tokenizer!r}")

        if self.max_chunk_size <= 0:
            raise ValueError(f"max_chunk_size must be positive, got: {self.max_chunk_size}")

        if self.min_chunk_size is not None and self.min_chunk_size <= 0:
            raise ValueError(f"min_chunk_size must be positive, got: {self.min_chunk_size}")

        if self.min_chunk_size is not None and self.min_chunk_size > self.max_chunk_size:
            raise ValueError(
                f"min_chunk_size ({self.min_chunk_size}) cannot exceed max_chunk_size ({self.max_chunk_size})"
            )

    @property
    def effective_min_chunk_size(self) -> int:
        """Recursive lower bound; unset, it is a tenth of ``max_chunk_size`` capped at the default."""
        if self.min_chunk_size is None:
            return max(1, min(DEFAULT_MIN_CHUNK_SIZE, self.max_chunk_size // 10))
        return self.min_chunk_size

    def parameters_for(self, strategy: ChunkStrategy) -> StrategyParams:
        """
        Build the parameter variant a strategy reads.

        Args:
            strategy: Strategy to build parameters for

        Returns:
            Frozen parameter dataclass for the strategy
        """
        if strategy == ChunkStrategy.FIXED:
            return FixedWindowParams(size=self.size, overlap=self.overlap)
        if strategy == ChunkStrategy.SENTENCE:
            return SentenceParams(target_size=self.size)
        if strategy == ChunkStrategy.PARAGRAPH:
            return ParagraphParams(target_size=self.size)
        if strategy == ChunkStrategy.CODE:
            return CodeParams(target_size=self.size)
        if strategy == ChunkStrategy.HEADING:
            levels = DEFAULT_HEADING_LEVELS if self.heading_levels is None else self.heading_levels
            return HeadingParams(heading_levels=levels)
        if strategy == ChunkStrategy.DIALOGUE:
            return DialogueParams(speaker_pattern=self.speaker_pattern)
        if strategy == ChunkStrategy.LIST:
            return ListParams(target_size=self.size)
        if strategy == ChunkStrategy.TABLE:
            return TableParams(target_size=self.size)
        if strategy == ChunkStrategy.TOKEN:
            return TokenParams(token_limit=self.token_limit, tokenizer=self.tokenizer.strip().lower())
        if strategy == ChunkStrategy.RECURSIVE:
            return RecursiveParams(max_chunk_size=self.max_chunk_size, min_chunk_size=self.effective_min_chunk_size)
        if strategy == ChunkStrategy.SEMANTIC:
            return SemanticParams(model=self.model, threshold=float(self.threshold))
        if strategy == ChunkStrategy.SMART:
            return SmartParams(target_size=self.size, model=self.model, threshold=float(self.threshold))
        if strategy == ChunkStrategy.LLM:
            return LLMParams(
                llm_model=self.llm_model,
                model=self.model,
                llm_url=self.llm_url,
                chunk_prompt=self.chunk_prompt
            )
        raise ValueError(f"Unsupported strategy: {strategy}")

    def snapshot(self, strategy: ChunkStrategy) -> ChunkingParameters:
        """
        Build the parameter echo stored on a result.

        Embedding options are only echoed for strategies that use embeddings.
        """
        params = self.parameters_for(strategy)
        parameters = ChunkingParameters(chunk_size=self.size, overlap=self.overlap)

        if strategy.uses_embeddings:
            parameters.threshold = float(self.threshold)
            parameters.model = self.model

        if isinstance(params, HeadingParams):
            parameters.heading_levels = params.heading_levels
        elif isinstance(params, DialogueParams):
            parameters.speaker_pattern = params.speaker_pattern
        elif isinstance(params, TokenParams):
            parameters.token_limit = params.token_limit
            parameters.tokenizer = params.tokenizer
        elif isinstance(params, RecursiveParams):
            parameters.max_chunk_size = params.max_chunk_size
            parameters.min_chunk_size = params.min_chunk_size
        elif isinstance(params, LLMParams):
            parameters.llm_model = params.llm_model

        return parameters

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary for serialization.

        Returns:
            Dictionary representation with all configuration parameters
        """
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChunkingOptions':
        """
        Create options from a dictionary, ignoring ``None`` values.

        Raises:
            ValueError: If unknown keys are present or values are invalid
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown chunking options: {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in data.items() if v is not None})

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'ChunkingOptions':
        return cls.from_dict(json.loads(json_str))

    def copy(self, **overrides) -> 'ChunkingOptions':
        """
        Create a copy of these options with overrides applied.

        Example:
            >>> options = ChunkingOptions(size=1000)
            >>> smaller = options.copy(size=500, overlap=25)
        """
        data = self.to_dict()
        data.update(overrides)
        return self.from_dict(data)
