"""
Shared segmenter helpers.

Segmenters produce chunks through a ``ChunkCollector`` so that indices stay
contiguous even when candidate chunks are skipped for being blank.
"""

import logging
from typing import Any, List, Optional

from ..boundary import TextSpan, trim_span
from ..result import Chunk

logger = logging.getLogger(__name__)


class ChunkCollector:
    """
    Collects chunks for one strategy, assigning indices in emission order.

    Example:
        >>> collector = ChunkCollector("sentence")
        >>> _ = collector.add_slice("  hi  ", 0, 6)
        >>> collector.chunks[0].content
        'hi'
    """

    def __init__(self, strategy: str) -> None:
        self.strategy = strategy
        self._chunks: List[Chunk] = []

    @property
    def chunks(self) -> List[Chunk]:
        return self._chunks

    def __len__(self) -> int:
        return len(self._chunks)

    def add(
        self,
        content: str,
        start: int,
        end: int,
        size: Optional[int] = None,
        **extra: Any
    ) -> Chunk:
        """Append a chunk; ``size`` defaults to the content length in characters."""
        chunk = Chunk(
            content=content,
            start=start,
            end=end,
            index=len(self._chunks),
            size=len(content) if size is None else size,
            strategy=self.strategy,
            **extra
        )
        self._chunks.append(chunk)
        logger.debug(f"{self.strategy} chunk {chunk.index}: [{start}, {end}) {chunk.size} units")
        return chunk

    def add_span(self, span: TextSpan, size: Optional[int] = None, **extra: Any) -> Chunk:
        return self.add(span.text, span.start, span.end, size=size, **extra)

    def add_slice(self, text: str, start: int, end: int, **extra: Any) -> Optional[Chunk]:
        """Append the trimmed slice ``text[start:end]``; blank slices are skipped."""
        span = trim_span(text, start, end)
        if span is None:
            return None
        return self.add_span(span, **extra)


def whole_document(text: str, strategy: str, reason: str) -> List[Chunk]:
    """
    Degrade to a single chunk holding the trimmed input.

    Used when a structural strategy finds nothing to split on or cannot use
    its parameters. Blank input still yields no chunks.
    """
    logger.info(f"{strategy}: {reason}")
    collector = ChunkCollector(strategy)
    collector.add_slice(text, 0, len(text), source=reason)
    return collector.chunks
