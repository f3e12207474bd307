# tests/test_settings.py
"""Tests for behavioral settings.

Settings is a plain BaseModel (no env var reading).
The library is programmatic-first - env vars are read by the CLI application layer.
"""

import pytest
from pydantic import ValidationError

from ubumuntu.settings import Settings


class TestSettings:
    def test_default_settings(self):
        """Test Settings has correct defaults."""
        settings = Settings()
        assert settings.chunk_size == 1000
        assert settings.chunk_overlap == 200
        assert settings.embedding_dimensions == 768
        assert settings.max_concurrent_embeddings == 5
        assert settings.default_k == 5
        assert settings.min_score is None
        assert settings.clarify_queries is True
        assert settings.clarification_history == 10
        assert settings.clarification_timeout == 10.0
        assert settings.chain_step_timeout == 60.0
        assert settings.visualization_max_vectors == 500
        assert settings.synthesis_prompt is None
        assert settings.num_retries == 5

    def test_settings_with_custom_values(self):
        """Test Settings accepts custom values."""
        settings = Settings(
            chunk_size=500,
            chunk_overlap=50,
            default_k=10,
            min_score=0.3,
            synthesis_prompt="synthesis prompt",
        )
        assert settings.chunk_size == 500
        assert settings.chunk_overlap == 50
        assert settings.default_k == 10
        assert settings.min_score == 0.3
        assert settings.synthesis_prompt == "synthesis prompt"

    def test_overlap_must_be_smaller_than_chunk_size(self):
        """Test the overlap invariant is enforced."""
        with pytest.raises(ValidationError, match="chunk_overlap"):
            Settings(chunk_size=100, chunk_overlap=100)

    def test_non_positive_values_rejected(self):
        """Test counts and timeouts must be positive."""
        with pytest.raises(ValidationError):
            Settings(default_k=0)
        with pytest.raises(ValidationError):
            Settings(clarification_timeout=0)
        with pytest.raises(ValidationError):
            Settings(embedding_dimensions=-1)

    def test_with_profile_conservative(self):
        """Test Settings.with_profile('conservative') applies correct values."""
        settings = Settings.with_profile("conservative")
        assert settings.max_concurrent_embeddings == 2
        assert settings.num_retries == 5

    def test_with_profile_aggressive(self):
        """Test Settings.with_profile('aggressive') applies correct values."""
        settings = Settings.with_profile("aggressive")
        assert settings.max_concurrent_embeddings == 10
        assert settings.num_retries == 5

    def test_with_profile_with_overrides(self):
        """Test Settings.with_profile() accepts overrides."""
        settings = Settings.with_profile("conservative", default_k=20)
        assert settings.max_concurrent_embeddings == 2  # from profile
        assert settings.default_k == 20  # from override

    def test_with_profile_invalid_raises(self):
        """Test Settings.with_profile() raises on invalid profile."""
        with pytest.raises(ValueError, match="Unknown profile"):
            Settings.with_profile("invalid")  # type: ignore[arg-type]
