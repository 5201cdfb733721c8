"""
Embedding-driven segmenters.

Semantic chunking embeds every sentence and starts a new chunk wherever the
cosine similarity of consecutive sentences drops below the threshold. Smart
chunking runs semantic chunking first and re-segments chunks that grew past
twice the target size with the sentence accumulator.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import List, Optional

from ....exceptions import ProviderError, ProviderUnavailableError
from ....providers import EmbeddingFallbackPolicy, EmbeddingOutcome, EmbeddingProvider, ZeroVectorFallback
from ..boundary import TextSpan, cosine_similarity, split_sentences, trim_span
from ..result import Chunk
from .base import ChunkCollector
from .primitive import accumulate_sentences, chunk_sentence

logger = logging.getLogger(__name__)


def embed_texts(
    texts: List[str],
    provider: EmbeddingProvider,
    policy: EmbeddingFallbackPolicy,
    workers: int = 1
) -> List[EmbeddingOutcome]:
    """
    Embed texts through the fallback policy, preserving input order.

    Args:
        texts: Texts to embed
        provider: Embedding provider
        policy: Policy applied to each request
        workers: Maximum concurrent requests; 1 embeds sequentially
    """
    if workers <= 1 or len(texts) <= 1:
        return [policy.resolve(provider, text) for text in texts]

    with ThreadPoolExecutor(max_workers=min(workers, len(texts))) as executor:
        return list(executor.map(lambda text: policy.resolve(provider, text), texts))


def is_unreachable(error: Optional[ProviderError]) -> bool:
    """True for transport failures where no HTTP response was received."""
    return isinstance(error, ProviderUnavailableError) and error.status_code is None


class SemanticChunker:
    """
    Groups consecutive sentences while they stay similar.

    When the similarity between sentence ``i-1`` and sentence ``i`` falls
    below ``threshold`` the current group is closed with that similarity and
    the embedding of sentence ``i-1``. The last group has no similarity and
    carries the embedding of the final sentence.

    Raises ``ProviderUnavailableError`` when no provider is configured, the
    first request gets no response at all, or every sentence embedding failed.
    """

    def __init__(
        self,
        provider: Optional[EmbeddingProvider],
        threshold: float,
        policy: Optional[EmbeddingFallbackPolicy] = None,
        workers: int = 1
    ) -> None:
        self.provider = provider
        self.threshold = threshold
        self.policy = policy or ZeroVectorFallback()
        self.workers = workers

    def _embed_sentences(self, sentences: List[TextSpan]) -> List[EmbeddingOutcome]:
        if self.provider is None:
            raise ProviderUnavailableError("No embedding provider configured for semantic chunking")

        # The first request runs alone so an unreachable provider fails fast
        first = self.policy.resolve(self.provider, sentences[0].text)
        if first.failed and is_unreachable(first.error):
            raise ProviderUnavailableError(
                f"Embedding provider unreachable: {first.error.message}",
                url=getattr(first.error, "url", None)
            ) from first.error

        rest = embed_texts([s.text for s in sentences[1:]], self.provider, self.policy, self.workers)
        outcomes = [first] + rest
        failures = [outcome for outcome in outcomes if outcome.failed]
        if failures and len(failures) == len(outcomes):
            last_error = failures[-1].error
            raise ProviderUnavailableError(
                f"Embedding provider unusable: all {len(outcomes)} requests failed ({last_error.message})",
                status_code=getattr(last_error, "status_code", None),
                url=getattr(last_error, "url", None)
            ) from last_error
        if failures:
            logger.warning(f"{len(failures)} of {len(outcomes)} sentence embeddings failed")
        return outcomes

    def chunk(self, text: str, strategy: str = "semantic") -> List[Chunk]:
        sentences = [
            span for span in (trim_span(text, s.start, s.end) for s in split_sentences(text))
            if span is not None
        ]
        collector = ChunkCollector(strategy)
        if not sentences:
            return collector.chunks

        embeddings = [outcome.vector for outcome in self._embed_sentences(sentences)]

        group: List[TextSpan] = [sentences[0]]
        for i in range(1, len(sentences)):
            similarity = cosine_similarity(embeddings[i - 1] or [], embeddings[i] or [])
            if similarity < self.threshold:
                self._close(collector, group, similarity, embeddings[i - 1])
                group = []
            group.append(sentences[i])

        self._close(collector, group, None, embeddings[-1])
        return collector.chunks

    @staticmethod
    def _close(
        collector: ChunkCollector,
        group: List[TextSpan],
        similarity: Optional[float],
        embedding: Optional[List[float]]
    ) -> None:
        content = " ".join(span.text for span in group)
        collector.add(
            content,
            group[0].start,
            group[-1].end,
            similarity=similarity,
            embedding=list(embedding) if embedding is not None else None
        )


def chunk_semantic(
    text: str,
    threshold: float,
    provider: Optional[EmbeddingProvider],
    policy: Optional[EmbeddingFallbackPolicy] = None,
    workers: int = 1
) -> List[Chunk]:
    return SemanticChunker(provider, threshold, policy, workers).chunk(text)


def chunk_smart(
    text: str,
    target_size: int,
    threshold: float,
    provider: Optional[EmbeddingProvider],
    policy: Optional[EmbeddingFallbackPolicy] = None,
    workers: int = 1
) -> List[Chunk]:
    """
    Semantic chunking with size control.

    Semantic chunks up to twice ``target_size`` are kept; larger ones are
    re-segmented with the sentence accumulator over their span of the input
    and relabelled ``smart``. All chunks are re-indexed in order. If the
    embedding provider is unusable, the whole input is chunked by sentences.
    """
    try:
        semantic_chunks = chunk_semantic(text, threshold, provider, policy, workers)
    except ProviderError as e:
        logger.warning(f"Smart chunking falling back to sentence chunking: {e.message}")
        return chunk_sentence(text, target_size)

    chunks: List[Chunk] = []
    for chunk in semantic_chunks:
        if chunk.size <= target_size * 2:
            chunks.append(replace(chunk, index=len(chunks)))
            continue

        logger.debug(f"Re-segmenting semantic chunk {chunk.index} of {chunk.size} characters")
        pieces = accumulate_sentences(text, split_sentences(text, chunk.start, chunk.end), target_size, "smart")
        for piece in pieces:
            chunks.append(replace(piece, index=len(chunks)))

    return chunks
