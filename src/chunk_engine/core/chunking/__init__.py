"""
Chunking package for the chunk engine.

This package contains the segmentation strategies, their configuration and
result types, and the engine that dispatches between them.

Example Usage:
    >>> from chunk_engine.core.chunking import ChunkingEngine, ChunkingOptions
    >>> engine = ChunkingEngine()
    >>> result = engine.chunk_text(text, "paragraph", ChunkingOptions(size=800))
    >>> for chunk in result.chunks:
    ...     print(chunk.index, chunk.get_preview())
"""

from .config import (
    ChunkStrategy,
    ChunkingOptions,
    FixedWindowParams,
    SentenceParams,
    ParagraphParams,
    CodeParams,
    HeadingParams,
    DialogueParams,
    ListParams,
    TableParams,
    TokenParams,
    RecursiveParams,
    SemanticParams,
    SmartParams,
    LLMParams,
)
from .result import Chunk, ChunkingParameters, ProcessingMetadata, ChunkingResult
from .boundary import TextSpan, split_sentences, split_paragraphs, cosine_similarity, TOKENIZERS
from .engine import ChunkingEngine, chunk_text

__all__ = [
    "ChunkStrategy",
    "ChunkingOptions",
    "FixedWindowParams",
    "SentenceParams",
    "ParagraphParams",
    "CodeParams",
    "HeadingParams",
    "DialogueParams",
    "ListParams",
    "TableParams",
    "TokenParams",
    "RecursiveParams",
    "SemanticParams",
    "SmartParams",
    "LLMParams",
    "Chunk",
    "ChunkingParameters",
    "ProcessingMetadata",
    "ChunkingResult",
    "TextSpan",
    "split_sentences",
    "split_paragraphs",
    "cosine_similarity",
    "TOKENIZERS",
    "ChunkingEngine",
    "chunk_text",
]
