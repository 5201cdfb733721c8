"""Tests for ChunkingEngine and the chunk_text entry point."""

from unittest.mock import Mock, patch

import pytest

from chunk_engine import chunk_text, ChunkingEngine, ChunkingOptions, ChunkStrategy, EngineSettings
from chunk_engine.exceptions import ProviderUnavailableError


class TestChunkingEngine:
    """Tests for ChunkingEngine dispatch and result assembly."""

    def test_fixed_strategy_result(self):
        """Test the assembled result for fixed windows."""
        result = ChunkingEngine().chunk_text("abcdefghij", "fixed", size=4, overlap=1)

        assert result.contents == ["abcd", "defg", "ghij"]
        assert result.total_chunks == 3
        assert result.original_length == 10
        assert result.strategy == "fixed"
        assert result.metadata.total_size == 10
        assert result.metadata.average_chunk_size == 4.0
        assert result.metadata.embeddings_used is False
        assert result.metadata.processing_time_ms >= 0
        assert result.parameters.chunk_size == 4
        assert result.parameters.overlap == 1
        assert result.parameters.threshold is None
        assert result.parameters.model is None

    def test_options_object_and_overrides(self):
        options = ChunkingOptions(size=100)
        result = ChunkingEngine().chunk_text("A. B. C.", ChunkStrategy.SENTENCE, options, size=3)
        assert result.contents == ["A.", "B.", "C."]
        assert options.size == 100

    def test_source_recorded(self):
        result = ChunkingEngine().chunk_text("Some text.", "sentence", source="notes.md")
        assert result.metadata.source_file == "notes.md"

    def test_empty_input(self):
        result = ChunkingEngine().chunk_text("", "paragraph")
        assert result.chunks == []
        assert result.total_chunks == 0
        assert result.metadata.average_chunk_size == 0.0

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown chunking strategy"):
            ChunkingEngine().chunk_text("text", "magic")

    def test_text_must_be_string(self):
        with pytest.raises(TypeError):
            ChunkingEngine().chunk_text(b"bytes", "fixed")

    def test_invalid_option_values(self):
        with pytest.raises(ValueError):
            ChunkingEngine().chunk_text("text", "fixed", size=0)

    def test_semantic_reports_embedding_parameters(self, fake_embeddings):
        engine = ChunkingEngine(embedding_provider=fake_embeddings())
        result = engine.chunk_text("The cat sat. The dog ran.", "semantic", threshold=0.7)

        assert result.metadata.embeddings_used is True
        assert result.parameters.threshold == 0.7
        assert result.parameters.model == "nomic-embed-text"
        assert result.chunks[0].embedding == [1.0, 0.0, 0.0]

    def test_semantic_without_usable_provider_raises(self, fake_embeddings):
        engine = ChunkingEngine(embedding_provider=fake_embeddings(fail_all=True))
        with pytest.raises(ProviderUnavailableError):
            engine.chunk_text("One. Two.", "semantic")

    def test_smart_fallback_keeps_requested_strategy(self, fake_embeddings):
        """Test that the result names smart while chunks record the sentence fallback."""
        engine = ChunkingEngine(embedding_provider=fake_embeddings(fail_all=True))
        result = engine.chunk_text("A. B. C.", "smart", size=3)
        assert result.strategy == "smart"
        assert [c.strategy for c in result.chunks] == ["sentence"] * 3

    def test_token_strategy_with_custom_tokenizer(self):
        engine = ChunkingEngine(tokenizers={"Chars": len})
        result = engine.chunk_text("Aaaa. Bbbb. Cccc.", "token", token_limit=11, tokenizer="chars")
        assert result.contents == ["Aaaa. Bbbb.", "Cccc."]
        assert result.parameters.tokenizer == "chars"
        assert result.parameters.token_limit == 11

    def test_unknown_tokenizer(self):
        with pytest.raises(ValueError, match="Unknown tokenizer"):
            ChunkingEngine().chunk_text("text", "token", tokenizer="bpe")

    def test_structural_degradation_never_raises(self):
        result = ChunkingEngine().chunk_text("# Title\nbody", "heading", heading_levels="9")
        assert result.total_chunks == 1
        assert result.chunks[0].source == "no valid heading levels - treated as single chunk"
        assert result.parameters.heading_levels == "9"

    def test_llm_strategy_with_injected_providers(self, fake_llm, fake_embeddings):
        engine = ChunkingEngine(
            embedding_provider=fake_embeddings(),
            llm_provider=fake_llm("<CHUNK_START>Part one.<CHUNK_END><CHUNK_START>Part two.<CHUNK_END>"),
        )
        result = engine.chunk_text("Part one. Part two.", "llm", llm_model="fake-llm")
        assert result.contents == ["Part one.", "Part two."]
        assert result.metadata.embeddings_used is True
        assert result.parameters.llm_model == "fake-llm"

    def test_engine_builds_ollama_providers_from_settings(self):
        """Test that embedding providers are built from settings when none is injected."""
        settings = EngineSettings(ollama_url="http://embeddings.local:11434", embedding_dimension=3)
        provider = Mock()
        provider.embed.return_value = [1.0, 0.0, 0.0]
        provider.dimension = 3

        with patch("chunk_engine.core.chunking.engine.OllamaEmbeddingProvider", return_value=provider) as factory:
            result = ChunkingEngine(settings=settings).chunk_text("One. Two.", "semantic", model="custom-model")

        config = factory.call_args[0][0]
        assert config.model_name == "custom-model"
        assert config.base_url == "http://embeddings.local:11434"
        assert config.embedding_dimension == 3
        assert result.total_chunks == 1

    def test_llm_provider_uses_llm_url_and_default_model(self):
        settings = EngineSettings(llm_model="llama3.2")
        llm = Mock()
        llm.generate.return_value = "<CHUNK_START>Body.<CHUNK_END>"
        llm.model_name = "llama3.2"
        embeddings = Mock()
        embeddings.embed.return_value = [0.5]

        with patch("chunk_engine.core.chunking.engine.OllamaLLMProvider", return_value=llm) as llm_factory, \
                patch("chunk_engine.core.chunking.engine.OllamaEmbeddingProvider", return_value=embeddings):
            result = ChunkingEngine(settings=settings).chunk_text("Body.", "llm", llm_url="http://llm.local:8080")

        config = llm_factory.call_args[0][0]
        assert config.model_name == "llama3.2"
        assert config.base_url == "http://llm.local:8080"
        assert result.chunks[0].source == "llm:llama3.2"

    def test_engine_is_reusable(self):
        engine = ChunkingEngine()
        first = engine.chunk_text("abcdef", "fixed", size=3, overlap=0)
        second = engine.chunk_text("xyz", "fixed", size=3, overlap=0)
        assert first.contents == ["abc", "def"]
        assert second.contents == ["xyz"]

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            ChunkingEngine(embedding_workers=0)

    def test_small_max_chunk_size_without_minimum(self):
        """Test that recursive chunking accepts a maximum below the default minimum."""
        result = ChunkingEngine().chunk_text("word " * 40, "recursive", max_chunk_size=50)

        assert result.contents == [" ".join(["word"] * 10)] * 4
        assert result.parameters.max_chunk_size == 50
        assert result.parameters.min_chunk_size == 5

    def test_small_max_chunk_size_ignored_by_other_strategies(self):
        result = ChunkingEngine().chunk_text("abcdef", "fixed", size=3, overlap=0, max_chunk_size=50)
        assert result.contents == ["abc", "def"]

    def test_explicit_minimum_above_maximum_rejected(self):
        with pytest.raises(ValueError, match="cannot exceed"):
            ChunkingEngine().chunk_text("text", "recursive", max_chunk_size=50, min_chunk_size=60)

    def test_empty_heading_levels_degrade(self, markdown_document):
        """Test that an empty heading level list degrades instead of using all levels."""
        result = ChunkingEngine().chunk_text(markdown_document, "heading", heading_levels="")
        assert result.total_chunks == 1
        assert result.chunks[0].source == "no valid heading levels - treated as single chunk"
        assert result.parameters.heading_levels == ""


class TestEngineProviderLifecycle:
    """Tests for providers built and released by the engine."""

    @patch("chunk_engine.providers.client.requests.Session")
    def test_built_provider_reused_across_calls(self, session_class, mock_response):
        """Test that repeated calls share one HTTP session until the engine is closed."""
        session = session_class.return_value
        session.post.return_value = mock_response(200, {"embedding": [1.0, 0.0, 0.0]})
        engine = ChunkingEngine(settings=EngineSettings(embedding_dimension=3))

        for _ in range(3):
            engine.chunk_text("One. Two.", "smart")

        assert session_class.call_count == 1
        session.close.assert_not_called()

        engine.close()
        session.close.assert_called_once()

    @patch("chunk_engine.providers.client.requests.Session")
    def test_providers_cached_per_model(self, session_class, mock_response):
        session_class.return_value.post.return_value = mock_response(200, {"embedding": [1.0]})
        with ChunkingEngine() as engine:
            engine.chunk_text("One.", "semantic", model="model-a")
            engine.chunk_text("One.", "semantic", model="model-b")
            engine.chunk_text("One.", "semantic", model="model-a")

        assert session_class.call_count == 2
        assert session_class.return_value.close.call_count == 2

    @patch("chunk_engine.providers.client.requests.Session")
    def test_chunk_text_function_closes_sessions(self, session_class, mock_response):
        """Test that the one-shot entry point releases both LLM and embedding sessions."""
        session = session_class.return_value
        session.post.return_value = mock_response(200, {
            "response": "<CHUNK_START>One. Two.<CHUNK_END>",
            "embedding": [1.0, 0.0, 0.0],
        })

        result = chunk_text("One. Two.", "llm")

        assert result.contents == ["One. Two."]
        assert session_class.call_count == 2
        assert session.close.call_count == 2

    def test_injected_providers_left_open(self, fake_embeddings):
        provider = fake_embeddings()
        provider.close = Mock()
        with ChunkingEngine(embedding_provider=provider) as engine:
            engine.chunk_text("One. Two.", "semantic")
        provider.close.assert_not_called()


class TestChunkTextFunction:
    """Tests for the module-level chunk_text entry point."""

    def test_defaults_are_fixed_windows(self):
        result = chunk_text("x" * 1200)
        assert result.strategy == "fixed"
        assert [c.size for c in result.chunks] == [500, 500, 300]
        assert [c.start for c in result.chunks] == [0, 450, 900]

    def test_keyword_options(self):
        result = chunk_text("aaaa bbbb cccc dddd", "recursive", max_chunk_size=10, min_chunk_size=1)
        assert result.contents == ["aaaa bbbb", "cccc dddd"]
        assert result.parameters.max_chunk_size == 10

    def test_ollama_url_overrides_settings(self):
        provider = Mock()
        provider.embed.return_value = [1.0]
        provider.dimension = 1

        with patch("chunk_engine.core.chunking.engine.OllamaEmbeddingProvider", return_value=provider) as factory:
            chunk_text("One. Two.", "semantic", ollama_url="http://other:1234/")

        assert factory.call_args[0][0].base_url == "http://other:1234"

    def test_injected_provider(self, fake_embeddings):
        provider = fake_embeddings()
        result = chunk_text("One. Two.", "semantic", embedding_provider=provider)
        assert provider.calls == ["One.", "Two."]
        assert result.total_chunks == 1
