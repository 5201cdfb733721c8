"""
Segmentation algorithms.

Each segmenter is a pure function of the input text and its parameters
(plus providers for the embedding-backed ones) returning chunks indexed from 0.
"""

from .base import ChunkCollector, whole_document
from .primitive import chunk_fixed, chunk_sentence, chunk_paragraph, chunk_code, accumulate_sentences
from .structure import (
    chunk_heading,
    chunk_dialogue,
    chunk_list,
    chunk_table,
    parse_heading_levels,
    compile_speaker_pattern,
    DEFAULT_SPEAKER_PATTERN,
)
from .token_aware import chunk_token_aware, resolve_tokenizer, TokenBudgetChunker
from .recursive import chunk_recursive, RecursiveSplitter
from .semantic import chunk_semantic, chunk_smart, SemanticChunker, embed_texts
from .llm_boundary import chunk_llm, LLMBoundaryChunker, DEFAULT_CHUNK_PROMPT

__all__ = [
    "ChunkCollector",
    "whole_document",
    "chunk_fixed",
    "chunk_sentence",
    "chunk_paragraph",
    "chunk_code",
    "accumulate_sentences",
    "chunk_heading",
    "chunk_dialogue",
    "chunk_list",
    "chunk_table",
    "parse_heading_levels",
    "compile_speaker_pattern",
    "DEFAULT_SPEAKER_PATTERN",
    "chunk_token_aware",
    "resolve_tokenizer",
    "TokenBudgetChunker",
    "chunk_recursive",
    "RecursiveSplitter",
    "chunk_semantic",
    "chunk_smart",
    "SemanticChunker",
    "embed_texts",
    "chunk_llm",
    "LLMBoundaryChunker",
    "DEFAULT_CHUNK_PROMPT",
]
