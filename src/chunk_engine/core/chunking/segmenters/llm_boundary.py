"""
LLM-tagged boundaries.

The model is asked to wrap each logical section of the input in
``<CHUNK_START>``/``<CHUNK_END>`` tags. Each tagged span becomes a chunk,
located in the original input where possible, and is embedded best-effort.
"""

import logging
import re
from typing import List, Optional

from ....exceptions import ProviderUnavailableError
from ....providers import EmbeddingFallbackPolicy, EmbeddingProvider, LLMProvider, OmitEmbeddingOnFailure
from ..result import Chunk
from .base import ChunkCollector

logger = logging.getLogger(__name__)

CHUNK_TAG_PATTERN = re.compile(r"<CHUNK_START>(.*?)<CHUNK_END>", re.DOTALL)

DEFAULT_CHUNK_PROMPT = (
    "Split the following text into logical, self-contained sections. "
    "Wrap every section in <CHUNK_START> and <CHUNK_END> tags. "
    "Copy the text exactly as written: do not summarise, rephrase, reorder or omit anything, "
    "and do not add commentary outside the tags.\n\n"
    "Text:\n"
)


def build_prompt(text: str, chunk_prompt: Optional[str] = None) -> str:
    if chunk_prompt:
        return f"{chunk_prompt}\n\n{text}"
    return f"{DEFAULT_CHUNK_PROMPT}{text}"


def extract_tagged_spans(response: str) -> List[str]:
    """
    Extract stripped, non-empty tagged spans from an LLM response.

    A response without any tags is treated as a single span.
    """
    spans = [match.strip() for match in CHUNK_TAG_PATTERN.findall(response)]
    spans = [span for span in spans if span]
    if spans:
        return spans

    if CHUNK_TAG_PATTERN.search(response) is None and response.strip():
        logger.warning("LLM response contained no chunk tags, using the whole response as one chunk")
        return [response.strip()]
    return []


class LLMBoundaryChunker:
    """
    Chunks text along boundaries chosen by an LLM.

    Offsets: each span is searched for in the input after the previous
    match; a span that cannot be found (the model altered the text) gets an
    approximate range starting at the current position.
    """

    def __init__(
        self,
        llm_provider: Optional[LLMProvider],
        embedding_provider: Optional[EmbeddingProvider] = None,
        policy: Optional[EmbeddingFallbackPolicy] = None,
        chunk_prompt: Optional[str] = None
    ) -> None:
        self.llm_provider = llm_provider
        self.embedding_provider = embedding_provider
        self.policy = policy or OmitEmbeddingOnFailure()
        self.chunk_prompt = chunk_prompt

    def _embed(self, content: str) -> Optional[List[float]]:
        if self.embedding_provider is None:
            return None
        return self.policy.resolve(self.embedding_provider, content).vector

    def chunk(self, text: str) -> List[Chunk]:
        collector = ChunkCollector("llm")
        if not text.strip():
            return collector.chunks

        if self.llm_provider is None:
            raise ProviderUnavailableError("No LLM provider configured for LLM boundary chunking")

        model = self.llm_provider.model_name
        response = self.llm_provider.generate(build_prompt(text, self.chunk_prompt))

        cursor = 0
        for content in extract_tagged_spans(response):
            position = text.find(content, cursor)
            if position >= 0:
                start, end = position, position + len(content)
            else:
                logger.debug(f"LLM span not found verbatim in input, approximating offsets at {cursor}")
                start = min(cursor, len(text))
                end = min(len(text), start + len(content))
            cursor = end

            collector.add(content, start, end, embedding=self._embed(content), source=f"llm:{model}")

        return collector.chunks


def chunk_llm(
    text: str,
    llm_provider: Optional[LLMProvider],
    embedding_provider: Optional[EmbeddingProvider] = None,
    policy: Optional[EmbeddingFallbackPolicy] = None,
    chunk_prompt: Optional[str] = None
) -> List[Chunk]:
    return LLMBoundaryChunker(llm_provider, embedding_provider, policy, chunk_prompt).chunk(text)
