"""
Core modules for the chunk engine.

This package contains the segmentation logic: text boundaries, the thirteen
chunking strategies and the engine that runs them.
"""

from .chunking import ChunkingEngine, ChunkingOptions, ChunkingResult, ChunkStrategy, Chunk, chunk_text

__all__ = [
    "ChunkingEngine",
    "ChunkingOptions",
    "ChunkingResult",
    "ChunkStrategy",
    "Chunk",
    "chunk_text",
]
