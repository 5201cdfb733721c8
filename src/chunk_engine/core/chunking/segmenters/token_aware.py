"""
Token-budgeted sentence accumulation.
"""

import logging
from typing import Dict, List, Optional

from ..boundary import TOKENIZERS, WORD_PATTERN, TokenCounter, split_sentences, trim_span
from ..result import Chunk
from .base import ChunkCollector

logger = logging.getLogger(__name__)


def resolve_tokenizer(name: str, registry: Optional[Dict[str, TokenCounter]] = None) -> TokenCounter:
    """
    Look up a token counter by name.

    Args:
        name: Tokenizer name ("word", "gpt" or a custom registered name)
        registry: Additional tokenizers consulted before the built-in ones

    Raises:
        ValueError: If the name is not registered
    """
    key = name.strip().lower()
    if registry and key in registry:
        return registry[key]
    if key in TOKENIZERS:
        return TOKENIZERS[key]
    known = sorted(set(TOKENIZERS) | set(registry or {}))
    raise ValueError(f"Unknown tokenizer '{name}', expected one of: {', '.join(known)}")


class TokenBudgetChunker:
    """
    Accumulates sentences while the trimmed candidate stays within ``token_limit``.

    A sentence that alone exceeds the limit is split at word boundaries; a
    single word larger than the limit is emitted on its own.

    Chunk ``size`` is the UTF-8 byte length of the content.
    """

    def __init__(self, token_limit: int, tokenizer: TokenCounter) -> None:
        self.token_limit = token_limit
        self.count_tokens = tokenizer

    def _emit(self, collector: ChunkCollector, text: str, start: int, end: int, suffix: str = "") -> None:
        span = trim_span(text, start, end)
        if span is None:
            return
        tokens = self.count_tokens(span.text)
        collector.add_span(span, size=len(span.text.encode("utf-8")), source=f"{tokens} tokens{suffix}")

    def _fits(self, text: str, start: int, end: int) -> bool:
        return self.count_tokens(text[start:end].strip()) <= self.token_limit

    def _split_words(self, collector: ChunkCollector, text: str, start: int, end: int) -> None:
        piece_start: Optional[int] = None
        piece_end = start
        for word in WORD_PATTERN.finditer(text, start, end):
            if piece_start is not None and not self._fits(text, piece_start, word.end()):
                self._emit(collector, text, piece_start, piece_end, " (split sentence)")
                piece_start = None
            if piece_start is None:
                piece_start = word.start()
            piece_end = word.end()

        if piece_start is not None:
            self._emit(collector, text, piece_start, piece_end, " (split sentence)")

    def chunk(self, text: str) -> List[Chunk]:
        collector = ChunkCollector("token")
        group_start: Optional[int] = None
        group_end = 0

        for sentence in split_sentences(text):
            span = trim_span(text, sentence.start, sentence.end)
            if span is None:
                continue

            if self.count_tokens(span.text) > self.token_limit:
                if group_start is not None:
                    self._emit(collector, text, group_start, group_end)
                    group_start = None
                logger.debug(f"Sentence at {span.start} exceeds {self.token_limit} tokens, splitting by words")
                self._split_words(collector, text, span.start, span.end)
                continue

            if group_start is not None and not self._fits(text, group_start, span.end):
                self._emit(collector, text, group_start, group_end)
                group_start = None

            if group_start is None:
                group_start = span.start
            group_end = span.end

        if group_start is not None:
            self._emit(collector, text, group_start, group_end)

        return collector.chunks


def chunk_token_aware(text: str, token_limit: int, tokenizer: TokenCounter) -> List[Chunk]:
    return TokenBudgetChunker(token_limit, tokenizer).chunk(text)
