"""
Text Boundary Module

Splits text into the units the segmenters accumulate (sentences, paragraphs,
lines), each as a ``TextSpan`` carrying codepoint offsets into the original
input, plus the token counters and the similarity measure shared by the
strategies.
"""

import math
import re
import string
import unicodedata
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)

# Terminal punctuation, optional closing quotes/brackets, then whitespace.
SENTENCE_END_PATTERN = re.compile(r"[.!?…]+[\"'”’)\]]*\s+|[。！？]+\s*")
# Sentence ends plus line breaks, which always close a sentence.
SENTENCE_BREAK_PATTERN = re.compile(
    r"[.!?…]+[\"'”’)\]]*\s+|[。！？]+\s*|\r?\n\s*"
)
PARAGRAPH_SEPARATOR_PATTERN = re.compile(r"\r?\n[ \t]*\r?\n(?:[ \t]*\r?\n)*")
WORD_PATTERN = re.compile(r"\S+")

TokenCounter = Callable[[str], int]


@dataclass(frozen=True)
class TextSpan:
    """A slice of the original input with its offsets."""

    text: str
    start: int
    end: int

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    def __len__(self) -> int:
        return self.end - self.start


def trim_span(text: str, start: int, end: int) -> Optional[TextSpan]:
    """
    Trim surrounding whitespace from ``text[start:end]``.

    Returns:
        The trimmed span with adjusted offsets, or None if the slice is blank
    """
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    if start >= end:
        return None
    return TextSpan(text[start:end], start, end)


def _split_on(pattern: re.Pattern, text: str, start: int, end: int) -> List[TextSpan]:
    """Split ``text[start:end]`` after every match, keeping separators with the left unit."""
    spans = []
    position = start
    for match in pattern.finditer(text, start, end):
        if match.end() <= position:
            continue
        spans.append(TextSpan(text[position:match.end()], position, match.end()))
        position = match.end()
    if position < end:
        spans.append(TextSpan(text[position:end], position, end))
    return spans


def split_sentences(text: str, start: int = 0, end: Optional[int] = None) -> List[TextSpan]:
    """
    Split text into sentences.

    A sentence ends after terminal punctuation followed by whitespace, after
    CJK terminal punctuation, or after a line break. Trailing whitespace stays
    with its sentence, so the spans tile the input exactly.

    Args:
        text: Original input
        start: Offset where the region to split begins
        end: Offset where the region ends (defaults to the end of the text)

    Returns:
        Sentence spans with offsets into ``text``

    Example:
        >>> [s.text for s in split_sentences("A. B. C.")]
        ['A. ', 'B. ', 'C.']
    """
    end = len(text) if end is None else end
    return _split_on(SENTENCE_BREAK_PATTERN, text, start, end)


def split_paragraphs(text: str) -> List[TextSpan]:
    """
    Split text into blank-line delimited paragraphs.

    Separators are excluded from the spans and whitespace-only paragraphs are
    dropped.
    """
    paragraphs = []
    position = 0
    for match in PARAGRAPH_SEPARATOR_PATTERN.finditer(text):
        paragraphs.append(TextSpan(text[position:match.start()], position, match.start()))
        position = match.end()
    paragraphs.append(TextSpan(text[position:], position, len(text)))
    return [p for p in paragraphs if not p.is_blank]


def split_lines(text: str) -> List[TextSpan]:
    """Split text into lines, keeping line endings with each line."""
    lines = []
    position = 0
    for line in text.splitlines(keepends=True):
        lines.append(TextSpan(line, position, position + len(line)))
        position += len(line)
    return lines


def line_body(span: TextSpan) -> str:
    """Line text without its line ending."""
    return span.text.rstrip("\r\n")


def line_number(text: str, offset: int) -> int:
    """1-based line number of the character at ``offset``."""
    return text.count("\n", 0, offset) + 1


def is_punctuation(char: str) -> bool:
    return char in string.punctuation or unicodedata.category(char).startswith("P")


def count_word_tokens(text: str) -> int:
    """Whitespace-delimited words plus one token per punctuation mark."""
    words = len(text.split())
    punctuation = sum(1 for char in text if is_punctuation(char))
    return words + punctuation


def count_gpt_tokens(text: str) -> int:
    """Approximate GPT-style token count: one token per four characters, rounded up."""
    return math.ceil(len(text) / 4)


TOKENIZERS: Dict[str, TokenCounter] = {
    "word": count_word_tokens,
    "gpt": count_gpt_tokens,
}


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Vectors of different length or with zero magnitude have similarity 0.0.
    """
    if len(a) != len(b) or len(a) == 0:
        return 0.0

    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)
    magnitude = np.linalg.norm(vec_a) * np.linalg.norm(vec_b)
    if magnitude == 0.0:
        return 0.0
    return float(np.dot(vec_a, vec_b) / magnitude)
