"""
Recursive boundary splitting.

Oversized text is cut at the best boundary that keeps the left part within
``max_chunk_size``, trying in order: the last sentence end, the last
paragraph break, the last whitespace, and finally a hard character cut. The
remainder is processed the same way until it fits.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from ..boundary import PARAGRAPH_SEPARATOR_PATTERN, SENTENCE_END_PATTERN, trim_span
from ..result import Chunk
from .base import ChunkCollector

logger = logging.getLogger(__name__)

# (segment, limit) -> split position p with 0 < p <= limit, or None
BoundaryFinder = Callable[[str, int], Optional[int]]


def find_sentence_boundary(segment: str, limit: int) -> Optional[int]:
    position = None
    for match in SENTENCE_END_PATTERN.finditer(segment, 0, limit):
        position = match.end()
    return position or None


def find_paragraph_boundary(segment: str, limit: int) -> Optional[int]:
    position = None
    for match in PARAGRAPH_SEPARATOR_PATTERN.finditer(segment, 0, limit):
        position = match.end()
    return position or None


def find_word_boundary(segment: str, limit: int) -> Optional[int]:
    for position in range(min(limit, len(segment) - 1), 0, -1):
        if segment[position].isspace():
            return position
    return None


def find_character_cut(segment: str, limit: int) -> Optional[int]:
    return limit


BOUNDARY_FINDERS: Sequence[BoundaryFinder] = (
    find_sentence_boundary,
    find_paragraph_boundary,
    find_word_boundary,
    find_character_cut,
)


class RecursiveSplitter:
    """
    Splits text into pieces no longer than ``max_chunk_size``.

    Pieces shorter than ``min_chunk_size`` are merged into the previous chunk,
    else into the next piece, when the merged span still fits; otherwise they
    are dropped unless they would be the only chunk.
    """

    def __init__(
        self,
        max_chunk_size: int,
        min_chunk_size: int,
        finders: Sequence[BoundaryFinder] = BOUNDARY_FINDERS
    ) -> None:
        if min_chunk_size > max_chunk_size:
            raise ValueError(
                f"min_chunk_size ({min_chunk_size}) cannot exceed max_chunk_size ({max_chunk_size})"
            )
        self.max_chunk_size = max_chunk_size
        self.min_chunk_size = min_chunk_size
        self.finders = finders

    def _find_split(self, segment: str) -> int:
        for finder in self.finders:
            position = finder(segment, self.max_chunk_size)
            if position:
                return position
        return self.max_chunk_size

    def split(self, text: str) -> List[Tuple[int, int]]:
        """Return trimmed ``(start, end)`` spans, each within ``max_chunk_size``."""
        pieces = []
        position = 0
        while True:
            span = trim_span(text, position, len(text))
            if span is None:
                break
            if len(span) <= self.max_chunk_size:
                pieces.append((span.start, span.end))
                break

            cut = span.start + self._find_split(span.text)
            left = trim_span(text, span.start, cut)
            if left is not None:
                pieces.append((left.start, left.end))
            position = cut

        return pieces

    def enforce_minimum(self, pieces: List[Tuple[int, int]]) -> List[Tuple[int, int]]:
        merged: List[Tuple[int, int]] = []
        pending: Optional[Tuple[int, int]] = None

        for start, end in pieces:
            if pending is not None:
                if end - pending[0] <= self.max_chunk_size:
                    start = pending[0]
                else:
                    logger.debug(f"Dropping undersized piece [{pending[0]}, {pending[1]})")
                pending = None

            if end - start >= self.min_chunk_size:
                merged.append((start, end))
            elif merged and end - merged[-1][0] <= self.max_chunk_size:
                merged[-1] = (merged[-1][0], end)
            else:
                pending = (start, end)

        if pending is not None:
            if merged:
                logger.debug(f"Dropping undersized piece [{pending[0]}, {pending[1]})")
            else:
                merged.append(pending)

        return merged

    def chunk(self, text: str) -> List[Chunk]:
        collector = ChunkCollector("recursive")
        for start, end in self.enforce_minimum(self.split(text)):
            collector.add(text[start:end], start, end)
        return collector.chunks


def chunk_recursive(text: str, max_chunk_size: int, min_chunk_size: int) -> List[Chunk]:
    return RecursiveSplitter(max_chunk_size, min_chunk_size).chunk(text)
