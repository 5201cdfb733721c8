"""
Chunking Engine Module

Dispatches a chunking call to the selected segmenter and assembles the
result with parameters and processing metadata.

Components:
- ChunkingEngine: Holds providers, settings and policies; one ``chunk_text``
  call per document
- chunk_text: Convenience entry point mirroring the engine options as
  keyword arguments
"""

import logging
import threading
from typing import Callable, Dict, List, Optional, Tuple, Union

from ...providers import (
    EmbeddingFallbackPolicy,
    EmbeddingProvider,
    LLMProvider,
    OllamaEmbeddingProvider,
    OllamaLLMProvider,
    OmitEmbeddingOnFailure,
    ProviderConfiguration,
    ZeroVectorFallback,
)
from ...utils.logging_config import OperationTimer
from ...utils.settings import EngineSettings
from .boundary import TokenCounter
from .config import (
    ChunkStrategy,
    ChunkingOptions,
    CodeParams,
    DialogueParams,
    FixedWindowParams,
    HeadingParams,
    LLMParams,
    ListParams,
    ParagraphParams,
    RecursiveParams,
    SemanticParams,
    SentenceParams,
    SmartParams,
    StrategyParams,
    TableParams,
    TokenParams,
)
from .result import Chunk, ChunkingResult, ProcessingMetadata
from .segmenters import (
    chunk_code,
    chunk_dialogue,
    chunk_fixed,
    chunk_heading,
    chunk_list,
    chunk_llm,
    chunk_paragraph,
    chunk_recursive,
    chunk_semantic,
    chunk_sentence,
    chunk_smart,
    chunk_table,
    chunk_token_aware,
    resolve_tokenizer,
)

logger = logging.getLogger(__name__)


class ChunkingEngine:
    """
    Text segmentation engine.

    The engine holds only configuration and provider handles; every call
    builds its own accumulators, so one engine can serve concurrent calls.
    When no provider is injected, embedding-backed strategies build
    Ollama-compatible providers from ``settings``. Built providers are cached
    per model and endpoint and released by ``close()``; injected providers
    stay owned by the caller.

    Example:
        >>> engine = ChunkingEngine()
        >>> result = engine.chunk_text("abcdefghij", "fixed", size=4, overlap=1)
        >>> result.contents
        ['abcd', 'defg', 'ghij']
        >>> engine.close()
    """

    def __init__(
        self,
        embedding_provider: Optional[EmbeddingProvider] = None,
        llm_provider: Optional[LLMProvider] = None,
        fallback_policy: Optional[EmbeddingFallbackPolicy] = None,
        settings: Optional[EngineSettings] = None,
        tokenizers: Optional[Dict[str, TokenCounter]] = None,
        embedding_workers: Optional[int] = None
    ) -> None:
        """
        Initialize the engine.

        Args:
            embedding_provider: Provider for semantic, smart and LLM embeddings
            llm_provider: Provider for the LLM boundary strategy
            fallback_policy: Policy for failed semantic embeddings (zero vector by default)
            settings: Engine settings (defaults read nothing from the environment)
            tokenizers: Custom token counters by name, consulted before "word" and "gpt"
            embedding_workers: Concurrent embedding requests (defaults to ``settings.embedding_workers``)
        """
        self.settings = settings or EngineSettings()
        self.embedding_provider = embedding_provider
        self.llm_provider = llm_provider
        self.fallback_policy = fallback_policy or ZeroVectorFallback()
        self.tokenizers = {name.strip().lower(): counter for name, counter in (tokenizers or {}).items()}
        self.embedding_workers = (
            self.settings.embedding_workers if embedding_workers is None else embedding_workers
        )

        if self.embedding_workers < 1:
            raise ValueError(f"embedding_workers must be at least 1, got: {self.embedding_workers}")

        self._owned_providers: Dict[Tuple[str, str, str], Union[OllamaEmbeddingProvider, OllamaLLMProvider]] = {}
        self._providers_lock = threading.Lock()

        self._dispatch: Dict[type, Callable[[str, StrategyParams], List[Chunk]]] = {
            FixedWindowParams: lambda text, p: chunk_fixed(text, p.size, p.overlap),
            SentenceParams: lambda text, p: chunk_sentence(text, p.target_size),
            ParagraphParams: lambda text, p: chunk_paragraph(text, p.target_size),
            CodeParams: lambda text, p: chunk_code(text, p.target_size),
            HeadingParams: lambda text, p: chunk_heading(text, p.heading_levels),
            DialogueParams: lambda text, p: chunk_dialogue(text, p.speaker_pattern),
            ListParams: lambda text, p: chunk_list(text, p.target_size),
            TableParams: lambda text, p: chunk_table(text, p.target_size),
            TokenParams: self._run_token,
            RecursiveParams: lambda text, p: chunk_recursive(text, p.max_chunk_size, p.min_chunk_size),
            SemanticParams: self._run_semantic,
            SmartParams: self._run_smart,
            LLMParams: self._run_llm,
        }

    def _owned_provider(self, kind: str, config: ProviderConfiguration, factory):
        key = (kind, config.model_name, config.base_url)
        with self._providers_lock:
            provider = self._owned_providers.get(key)
            if provider is None:
                logger.debug(f"Creating {kind} provider for {config.model_name} at {config.base_url}")
                provider = factory(config)
                self._owned_providers[key] = provider
            return provider

    def _embedding_provider_for(self, model: str) -> EmbeddingProvider:
        if self.embedding_provider is not None:
            return self.embedding_provider
        config = ProviderConfiguration.from_settings(self.settings, model_name=model)
        return self._owned_provider("embedding", config, OllamaEmbeddingProvider)

    def _llm_provider_for(self, params: LLMParams) -> LLMProvider:
        if self.llm_provider is not None:
            return self.llm_provider
        config = ProviderConfiguration.from_settings(
            self.settings,
            model_name=params.llm_model or self.settings.llm_model,
            base_url=params.llm_url
        )
        return self._owned_provider("llm", config, OllamaLLMProvider)

    def close(self) -> None:
        """Close the HTTP sessions of providers built by this engine."""
        with self._providers_lock:
            providers = list(self._owned_providers.values())
            self._owned_providers.clear()
        for provider in providers:
            provider.close()
        if providers:
            logger.debug(f"Closed {len(providers)} engine-owned providers")

    def __enter__(self) -> 'ChunkingEngine':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _run_token(self, text: str, params: TokenParams) -> List[Chunk]:
        tokenizer = resolve_tokenizer(params.tokenizer, self.tokenizers)
        return chunk_token_aware(text, params.token_limit, tokenizer)

    def _run_semantic(self, text: str, params: SemanticParams) -> List[Chunk]:
        provider = self._embedding_provider_for(params.model)
        return chunk_semantic(text, params.threshold, provider, self.fallback_policy, self.embedding_workers)

    def _run_smart(self, text: str, params: SmartParams) -> List[Chunk]:
        provider = self._embedding_provider_for(params.model)
        return chunk_smart(
            text, params.target_size, params.threshold, provider,
            self.fallback_policy, self.embedding_workers
        )

    def _run_llm(self, text: str, params: LLMParams) -> List[Chunk]:
        return chunk_llm(
            text,
            self._llm_provider_for(params),
            embedding_provider=self._embedding_provider_for(params.model),
            policy=OmitEmbeddingOnFailure(),
            chunk_prompt=params.chunk_prompt
        )

    def chunk_text(
        self,
        text: str,
        strategy: Union[str, ChunkStrategy] = ChunkStrategy.FIXED,
        options: Optional[ChunkingOptions] = None,
        **overrides
    ) -> ChunkingResult:
        """
        Segment text with the selected strategy.

        Args:
            text: Input text
            strategy: Strategy tag or enum member
            options: Base options (defaults when omitted)
            **overrides: Option fields overriding ``options``; None values are ignored

        Returns:
            ChunkingResult with chunks, parameter echo and metadata

        Raises:
            TypeError: If text is not a string
            ValueError: If the strategy, tokenizer or an option value is invalid
            ProviderError: If a semantic or LLM provider is unusable and no fallback applies
        """
        if not isinstance(text, str):
            raise TypeError(f"text must be a string, got: {type(text)}")

        chunk_strategy = ChunkStrategy.parse(strategy)
        options = options or ChunkingOptions()
        if overrides:
            options = options.copy(**overrides)

        params = options.parameters_for(chunk_strategy)
        segment = self._dispatch[type(params)]

        with OperationTimer("chunk_text", logger, strategy=chunk_strategy.value, input_length=len(text)) as timer:
            chunks = segment(text, params)

        result = self._assemble(chunks, text, chunk_strategy, options, timer.elapsed_ms)
        logger.info(
            f"Chunked {len(text)} characters into {result.total_chunks} {chunk_strategy.value} chunks "
            f"in {timer.elapsed_ms}ms"
        )
        return result

    @staticmethod
    def _assemble(
        chunks: List[Chunk],
        text: str,
        strategy: ChunkStrategy,
        options: ChunkingOptions,
        elapsed_ms: int
    ) -> ChunkingResult:
        average = sum(chunk.size for chunk in chunks) / len(chunks) if chunks else 0.0
        metadata = ProcessingMetadata(
            processing_time_ms=elapsed_ms,
            total_size=len(text),
            average_chunk_size=average,
            embeddings_used=strategy.uses_embeddings,
            source_file=options.source,
        )
        return ChunkingResult(
            chunks=chunks,
            total_chunks=len(chunks),
            original_length=len(text),
            strategy=strategy.value,
            parameters=options.snapshot(strategy),
            metadata=metadata,
        )


def chunk_text(
    text: str,
    strategy: Union[str, ChunkStrategy] = "fixed",
    size: int = 500,
    overlap: int = 50,
    model: str = "nomic-embed-text",
    threshold: float = 0.8,
    source: Optional[str] = None,
    llm_model: Optional[str] = None,
    llm_url: Optional[str] = None,
    chunk_prompt: Optional[str] = None,
    heading_levels: Optional[str] = None,
    speaker_pattern: Optional[str] = None,
    token_limit: Optional[int] = None,
    tokenizer: Optional[str] = None,
    max_chunk_size: Optional[int] = None,
    min_chunk_size: Optional[int] = None,
    ollama_url: Optional[str] = None,
    embedding_provider: Optional[EmbeddingProvider] = None,
    llm_provider: Optional[LLMProvider] = None,
    settings: Optional[EngineSettings] = None
) -> ChunkingResult:
    """
    Segment text in one call.

    Builds a ``ChunkingEngine`` for the call; unset optional arguments take
    their defaults from ``ChunkingOptions``.

    Example:
        >>> result = chunk_text("A. B. C.", "sentence", size=3)
        >>> result.contents
        ['A.', 'B.', 'C.']
    """
    if ollama_url:
        base = settings.to_dict() if settings else {}
        base["ollama_url"] = ollama_url
        settings = EngineSettings(**base)

    options = ChunkingOptions.from_dict({
        "size": size,
        "overlap": overlap,
        "model": model,
        "threshold": threshold,
        "source": source,
        "llm_model": llm_model,
        "llm_url": llm_url,
        "chunk_prompt": chunk_prompt,
        "heading_levels": heading_levels,
        "speaker_pattern": speaker_pattern,
        "token_limit": token_limit,
        "tokenizer": tokenizer,
        "max_chunk_size": max_chunk_size,
        "min_chunk_size": min_chunk_size,
    })

    with ChunkingEngine(
        embedding_provider=embedding_provider,
        llm_provider=llm_provider,
        settings=settings,
    ) as engine:
        return engine.chunk_text(text, strategy, options)
