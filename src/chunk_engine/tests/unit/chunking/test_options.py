"""Tests for ChunkStrategy and ChunkingOptions - validation, parameter variants and serialization."""

import json

import pytest

from chunk_engine.core.chunking.config import (
    ChunkStrategy,
    ChunkingOptions,
    FixedWindowParams,
    SentenceParams,
    HeadingParams,
    DialogueParams,
    TokenParams,
    RecursiveParams,
    SemanticParams,
    SmartParams,
    LLMParams,
)


class TestChunkStrategy:
    """Tests for the strategy enumeration."""

    def test_thirteen_strategies(self):
        """Test that every strategy tag is available."""
        assert {s.value for s in ChunkStrategy} == {
            "fixed", "sentence", "paragraph", "code", "heading", "dialogue", "list",
            "table", "token", "recursive", "semantic", "smart", "llm",
        }

    def test_parse_is_case_insensitive(self):
        """Test parsing tags regardless of case and surrounding whitespace."""
        assert ChunkStrategy.parse(" Semantic ") is ChunkStrategy.SEMANTIC
        assert ChunkStrategy.parse(ChunkStrategy.LLM) is ChunkStrategy.LLM

    def test_parse_unknown_strategy(self):
        """Test that unknown tags raise ValueError listing valid ones."""
        with pytest.raises(ValueError, match="Unknown chunking strategy 'magic'"):
            ChunkStrategy.parse("magic")

    def test_uses_embeddings(self):
        """Test which strategies report embedding use."""
        users = {s for s in ChunkStrategy if s.uses_embeddings}
        assert users == {ChunkStrategy.SEMANTIC, ChunkStrategy.SMART, ChunkStrategy.LLM}


class TestChunkingOptions:
    """Tests for ChunkingOptions validation and helpers."""

    def test_defaults(self):
        """Test default option values."""
        options = ChunkingOptions()
        assert options.size == 500
        assert options.overlap == 50
        assert options.model == "nomic-embed-text"
        assert options.threshold == 0.8
        assert options.token_limit == 512
        assert options.tokenizer == "word"
        assert options.max_chunk_size == 1000
        assert options.min_chunk_size is None
        assert options.effective_min_chunk_size == 100

    @pytest.mark.parametrize("kwargs", [
        {"size": 0},
        {"size": -5},
        {"overlap": -1},
        {"threshold": 1.5},
        {"threshold": -0.1},
        {"token_limit": 0},
        {"max_chunk_size": 0},
        {"min_chunk_size": 200, "max_chunk_size": 100},
        {"model": ""},
    ])
    def test_invalid_values_raise_value_error(self, kwargs):
        """Test that out-of-range values are rejected."""
        with pytest.raises(ValueError):
            ChunkingOptions(**kwargs)

    def test_non_integer_size_raises_type_error(self):
        """Test that sizes must be integers."""
        with pytest.raises(TypeError):
            ChunkingOptions(size="500")

    def test_overlap_not_smaller_than_size_is_allowed(self):
        """Test that overlap >= size only warns."""
        options = ChunkingOptions(size=4, overlap=10)
        assert options.overlap == 10

    def test_parameters_for_fixed_and_sentence(self):
        """Test that variants carry only the options their strategy reads."""
        options = ChunkingOptions(size=200, overlap=20)
        assert options.parameters_for(ChunkStrategy.FIXED) == FixedWindowParams(size=200, overlap=20)
        assert options.parameters_for(ChunkStrategy.SENTENCE) == SentenceParams(target_size=200)

    def test_parameters_for_heading_uses_all_levels_by_default(self):
        """Test the default heading level list."""
        params = ChunkingOptions().parameters_for(ChunkStrategy.HEADING)
        assert params == HeadingParams(heading_levels="1,2,3,4,5,6")

    def test_unset_minimum_follows_maximum(self):
        """Test that a small max_chunk_size does not collide with the default minimum."""
        options = ChunkingOptions(max_chunk_size=50)
        assert options.parameters_for(ChunkStrategy.RECURSIVE) == RecursiveParams(50, 5)
        assert ChunkingOptions(max_chunk_size=5).effective_min_chunk_size == 1
        assert ChunkingOptions(max_chunk_size=5000).effective_min_chunk_size == 100

    def test_explicit_minimum_is_kept(self):
        options = ChunkingOptions(max_chunk_size=50, min_chunk_size=50)
        assert options.parameters_for(ChunkStrategy.RECURSIVE) == RecursiveParams(50, 50)

    def test_copy_keeps_minimum_unset(self):
        """Test that copying with a smaller maximum re-derives the minimum."""
        options = ChunkingOptions().copy(max_chunk_size=40)
        assert options.min_chunk_size is None
        assert options.effective_min_chunk_size == 4

    def test_empty_heading_levels_are_not_replaced(self):
        """Test that an empty level list reaches the segmenter instead of the default."""
        params = ChunkingOptions(heading_levels="").parameters_for(ChunkStrategy.HEADING)
        assert params == HeadingParams(heading_levels="")

    def test_parameters_for_remaining_strategies(self):
        """Test the structural, token, recursive and embedding variants."""
        options = ChunkingOptions(
            speaker_pattern=r"^(\w+):",
            token_limit=64,
            tokenizer="GPT",
            max_chunk_size=300,
            min_chunk_size=50,
            threshold=0.5,
            llm_model="llama3.2",
            chunk_prompt="Split this",
        )
        assert options.parameters_for(ChunkStrategy.DIALOGUE) == DialogueParams(speaker_pattern=r"^(\w+):")
        assert options.parameters_for(ChunkStrategy.TOKEN) == TokenParams(token_limit=64, tokenizer="gpt")
        assert options.parameters_for(ChunkStrategy.RECURSIVE) == RecursiveParams(300, 50)
        assert options.parameters_for(ChunkStrategy.SEMANTIC) == SemanticParams("nomic-embed-text", 0.5)
        assert options.parameters_for(ChunkStrategy.SMART) == SmartParams(500, "nomic-embed-text", 0.5)
        llm = options.parameters_for(ChunkStrategy.LLM)
        assert isinstance(llm, LLMParams)
        assert llm.llm_model == "llama3.2"
        assert llm.chunk_prompt == "Split this"

    def test_snapshot_echoes_embedding_options_only_when_used(self):
        """Test that threshold and model are echoed only for embedding strategies."""
        options = ChunkingOptions(threshold=0.6)

        fixed = options.snapshot(ChunkStrategy.FIXED)
        assert fixed.threshold is None
        assert fixed.model is None

        semantic = options.snapshot(ChunkStrategy.SEMANTIC)
        assert semantic.threshold == 0.6
        assert semantic.model == "nomic-embed-text"

    def test_snapshot_records_strategy_extras(self):
        """Test that strategy-specific extras appear in the parameter echo."""
        snapshot = ChunkingOptions(token_limit=32).snapshot(ChunkStrategy.TOKEN)
        data = snapshot.to_dict()
        assert data["token_limit"] == 32
        assert data["tokenizer"] == "word"
        assert "max_chunk_size" not in data

    def test_from_dict_ignores_none_and_rejects_unknown(self):
        """Test dictionary construction."""
        options = ChunkingOptions.from_dict({"size": 100, "overlap": None})
        assert options.size == 100
        assert options.overlap == 50

        with pytest.raises(ValueError, match="Unknown chunking options"):
            ChunkingOptions.from_dict({"chunk_size": 100})

    def test_json_round_trip(self):
        """Test JSON serialization preserves values."""
        options = ChunkingOptions(size=123, source="notes.md")
        restored = ChunkingOptions.from_json(options.to_json())
        assert restored == options
        assert json.loads(options.to_json())["source"] == "notes.md"

    def test_copy_applies_overrides(self):
        """Test copying with overrides leaves the original untouched."""
        options = ChunkingOptions(size=1000)
        smaller = options.copy(size=500, overlap=25)
        assert smaller.size == 500
        assert smaller.overlap == 25
        assert options.size == 1000

    def test_copy_validates_overrides(self):
        """Test that copied options are validated."""
        with pytest.raises(ValueError):
            ChunkingOptions().copy(size=0)
