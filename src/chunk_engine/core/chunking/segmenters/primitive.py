"""
Primitive segmenters: fixed windows, sentences, paragraphs and code blocks.
"""

import logging
import re
from typing import List, Optional

from ..boundary import TextSpan, line_number, split_lines, split_paragraphs, split_sentences
from ..result import Chunk
from .base import ChunkCollector

logger = logging.getLogger(__name__)

CODE_BOUNDARY_KEYWORDS = (
    "fn", "pub fn", "async fn",
    "function", "async function", "export function", "export class",
    "class", "def", "async def",
    "impl", "struct", "pub struct", "interface", "trait", "enum",
)

CODE_BOUNDARY_PATTERN = re.compile(
    r"^\s*(?:"
    + "|".join(keyword.replace(" ", r"\s+") for keyword in
               sorted(CODE_BOUNDARY_KEYWORDS, key=len, reverse=True))
    + r")\b"
)
LEADING_BLANK_LINES = re.compile(r"(?:[ \t]*\r?\n)+")


def chunk_fixed(text: str, size: int, overlap: int) -> List[Chunk]:
    """
    Cut the input into windows of ``size`` characters.

    Each window starts ``size - overlap`` characters after the previous one
    (one character when ``overlap >= size``). Content is not trimmed.

    Example:
        >>> [c.content for c in chunk_fixed("abcdefghij", 4, 1)]
        ['abcd', 'defg', 'ghij']
    """
    collector = ChunkCollector("fixed")
    total = len(text)
    if total == 0:
        return collector.chunks

    step = size - overlap if size > overlap else 1
    start = 0
    while True:
        end = min(start + size, total)
        shared = min(overlap, end - start) if len(collector) > 0 else 0
        collector.add(text[start:end], start, end, overlap=shared)
        if end >= total:
            break
        start += step

    return collector.chunks


def accumulate_sentences(
    text: str,
    sentences: List[TextSpan],
    target_size: int,
    strategy: str = "sentence"
) -> List[Chunk]:
    """
    Greedily group sentence spans until the next one would exceed ``target_size``.

    The running length is measured on the untrimmed group; the emitted chunk
    is trimmed. A single sentence longer than the target becomes its own chunk.
    """
    collector = ChunkCollector(strategy)
    group_start: Optional[int] = None
    group_end = 0

    for sentence in sentences:
        if group_start is not None and (group_end - group_start) + len(sentence) > target_size:
            collector.add_slice(text, group_start, group_end)
            group_start = None

        if group_start is None:
            group_start = sentence.start
        group_end = sentence.end

    if group_start is not None:
        collector.add_slice(text, group_start, group_end)

    return collector.chunks


def chunk_sentence(text: str, target_size: int) -> List[Chunk]:
    return accumulate_sentences(text, split_sentences(text), target_size)


def chunk_paragraph(text: str, target_size: int) -> List[Chunk]:
    """
    Greedily group blank-line delimited paragraphs.

    Paragraphs in one chunk are joined with a blank line; offsets run from the
    first paragraph's first non-blank character to the last one's final
    non-blank character.
    """
    collector = ChunkCollector("paragraph")
    group: List[TextSpan] = []
    group_length = 0

    def flush() -> None:
        content = "\n\n".join(p.text for p in group)
        stripped = content.strip()
        if not stripped:
            return
        leading = len(content) - len(content.lstrip())
        trailing = len(content) - len(content.rstrip())
        collector.add(stripped, group[0].start + leading, group[-1].end - trailing)

    for paragraph in split_paragraphs(text):
        if group and group_length + len(paragraph) > target_size:
            flush()
            group = []
            group_length = 0

        if group:
            group_length += 2
        group.append(paragraph)
        group_length += len(paragraph)

    if group:
        flush()

    return collector.chunks


def is_code_boundary(line: str) -> bool:
    """Whether a line opens a function, class or type definition."""
    return bool(CODE_BOUNDARY_PATTERN.match(line))


def chunk_code(text: str, target_size: int) -> List[Chunk]:
    """
    Accumulate lines, flushing only before a definition line that would overflow.

    Blocks may exceed ``target_size`` when no definition line comes along.
    Leading blank lines are dropped and indentation of the first line kept.
    """
    collector = ChunkCollector("code")
    block_start: Optional[int] = None
    block_end = 0

    def flush(start: int, end: int) -> None:
        blank = LEADING_BLANK_LINES.match(text, start, end)
        if blank:
            start = blank.end()
        content = text[start:end].rstrip()
        if not content.strip():
            return
        end = start + len(content)
        source = f"lines {line_number(text, start)}-{line_number(text, end - 1)}"
        collector.add(content, start, end, source=source)

    for line in split_lines(text):
        if (
            block_start is not None
            and (block_end - block_start) + len(line) > target_size
            and text[block_start:block_end].strip()
            and is_code_boundary(line.text)
        ):
            flush(block_start, block_end)
            block_start = None

        if block_start is None:
            block_start = line.start
        block_end = line.end

    if block_start is not None:
        flush(block_start, block_end)

    return collector.chunks
