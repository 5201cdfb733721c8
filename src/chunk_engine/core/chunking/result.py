"""
Chunk Result Module

Contains the data types produced by a chunking call.

Components:
- Chunk: One immutable span of text with boundary metadata
- ChunkingParameters: Echo of the caller's configuration
- ProcessingMetadata: Aggregate statistics about the call
- ChunkingResult: Ordered chunks plus parameters and metadata
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Chunk:
    """
    One segment produced by a segmenter.

    Attributes:
        content: Text of the chunk (a trimmed slice of, or derived from, the input)
        start: Codepoint offset in the original input where the chunk begins
        end: Codepoint offset in the original input where the chunk ends (exclusive)
        index: Zero-based position within the result
        size: Length of ``content`` (characters; UTF-8 bytes for token-aware chunks)
        overlap: Characters shared with the previous chunk (fixed-window only)
        strategy: Tag of the producing algorithm
        similarity: Cosine similarity that closed the chunk (semantic only)
        embedding: Embedding vector attached to the chunk (semantic / llm only)
        source: Free-form provenance such as a line range or speaker name

    Example:
        >>> chunk = Chunk(content="abcd", start=0, end=4, index=0, size=4, strategy="fixed")
        >>> chunk.to_dict()["size"]
        4
    """

    content: str
    start: int
    end: int
    index: int
    size: int
    strategy: str
    overlap: int = 0
    similarity: Optional[float] = None
    embedding: Optional[List[float]] = None
    source: Optional[str] = None

    def __post_init__(self) -> None:
        """
        Validate positional data.

        Raises:
            ValueError: If chunk data is invalid
        """
        if not isinstance(self.content, str):
            raise ValueError(f"Content must be string, got: {type(self.content)}")

        if self.start < 0:
            raise ValueError(f"start cannot be negative: {self.start}")

        if self.end < self.start:
            raise ValueError(f"end ({self.end}) cannot be less than start ({self.start})")

        if self.index < 0:
            raise ValueError(f"index cannot be negative: {self.index}")

        if self.size < 0 or self.overlap < 0:
            raise ValueError("size and overlap cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "start": self.start,
            "end": self.end,
            "index": self.index,
            "size": self.size,
            "overlap": self.overlap,
            "strategy": self.strategy,
            "similarity": self.similarity,
            "embedding": list(self.embedding) if self.embedding is not None else None,
            "source": self.source,
        }

    def get_preview(self, max_length: int = 60) -> str:
        """Get a single-line preview of the chunk content."""
        preview = " ".join(self.content.split())
        if len(preview) <= max_length:
            return preview
        return preview[:max_length - 3] + "..."


@dataclass
class ChunkingParameters:
    """
    Snapshot of the configuration a result was produced with.

    ``threshold`` and ``model`` are only set when the strategy used embeddings.
    Strategy-specific extras are only set for the strategy that reads them.
    """

    chunk_size: int
    overlap: int
    threshold: Optional[float] = None
    model: Optional[str] = None
    llm_model: Optional[str] = None
    heading_levels: Optional[str] = None
    speaker_pattern: Optional[str] = None
    token_limit: Optional[int] = None
    tokenizer: Optional[str] = None
    max_chunk_size: Optional[int] = None
    min_chunk_size: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        always = {"chunk_size", "overlap", "threshold", "model"}
        return {k: v for k, v in data.items() if k in always or v is not None}


@dataclass
class ProcessingMetadata:
    """Aggregate statistics about one chunking call."""

    processing_time_ms: int
    total_size: int
    average_chunk_size: float
    embeddings_used: bool
    source_file: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ChunkingResult:
    """
    Ordered chunks with parameters and aggregate metadata.

    Attributes:
        chunks: Chunks in document order, indexed from 0
        total_chunks: Number of chunks
        original_length: Length of the input in codepoints
        strategy: Name of the strategy the caller selected
        parameters: Configuration snapshot
        metadata: Processing statistics
    """

    chunks: List[Chunk]
    total_chunks: int
    original_length: int
    strategy: str
    parameters: ChunkingParameters
    metadata: ProcessingMetadata = field(default=None)

    def __post_init__(self) -> None:
        if self.total_chunks != len(self.chunks):
            raise ValueError(
                f"total_chunks ({self.total_chunks}) does not match number of chunks ({len(self.chunks)})"
            )

        for position, chunk in enumerate(self.chunks):
            if chunk.index != position:
                raise ValueError(f"Chunk at position {position} has index {chunk.index}")

    @property
    def contents(self) -> List[str]:
        """Chunk contents in order."""
        return [chunk.content for chunk in self.chunks]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chunks": [chunk.to_dict() for chunk in self.chunks],
            "total_chunks": self.total_chunks,
            "original_length": self.original_length,
            "strategy": self.strategy,
            "parameters": self.parameters.to_dict(),
            "metadata": self.metadata.to_dict() if self.metadata else None,
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        """
        Convert the result to a JSON string.

        Args:
            indent: Optional indentation for pretty printing
        """
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
