# src/ubumuntu/settings.py
"""Behavioral settings for Ubumuntu.

Settings apply regardless of which LLM/embedding provider is used and are
passed programmatically - the library does not read environment variables.
The CLI reads ``UBUMUNTU_*`` variables at the application layer (see
``ubumuntu.config``) and passes values explicitly.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

# Rate limit profile definitions
RATE_LIMIT_PROFILES: dict[str, dict[str, int]] = {
    "aggressive": {
        "max_concurrent_embeddings": 10,
        "num_retries": 5,
    },
    "conservative": {
        "max_concurrent_embeddings": 2,
        "num_retries": 5,
    },
}


class Settings(BaseModel):
    """Behavioral settings for Ubumuntu.

    Example:
        settings = Settings(chunk_size=800, default_k=8)

        # Or use a rate limit profile for free API tiers
        settings = Settings.with_profile("conservative")
    """

    # Chunking
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)
    sentence_language: str = "en"

    # Embedding
    embedding_dimensions: int = Field(default=768, gt=0)
    max_concurrent_embeddings: int = Field(default=5, gt=0)
    embed_retries: int = Field(default=2, ge=0)

    # Retrieval
    default_k: int = Field(default=5, gt=0)
    min_score: float | None = None
    retrieval_overfetch: int = Field(default=2, ge=1)

    # Clarification
    clarify_queries: bool = True
    clarification_history: int = Field(default=10, ge=0)
    clarification_max_tokens: int = 256
    clarification_temperature: float = 0.1
    clarification_timeout: float = Field(default=10.0, gt=0)

    # Answer synthesis
    synthesis_prompt: str | None = None
    synthesis_temperature: float | None = 0.2
    synthesis_max_tokens: int | None = 2048

    # Agent chains
    chain_step_timeout: float = Field(default=60.0, gt=0)
    chain_default_input: str = "What tasks can you help me with?"

    # Visualization
    visualization_batch_size: int = Field(default=100, gt=0)
    visualization_max_vectors: int = Field(default=500, gt=0)
    visualization_scale: float = Field(default=10.0, gt=0)

    # Retry configuration (LiteLLM handles exponential backoff for RateLimitError)
    num_retries: int = 5

    @model_validator(mode="after")
    def _check_overlap(self) -> Settings:
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be less than "
                f"chunk_size ({self.chunk_size})"
            )
        return self

    @classmethod
    def with_profile(
        cls,
        profile: Literal["aggressive", "conservative"],
        **overrides: Any,
    ) -> Settings:
        """Create Settings with a rate limit profile.

        Profiles bundle settings optimized for different API tier limits:
        - "aggressive": For paid API tiers with high rate limits
        - "conservative": For free tiers or APIs with strict rate limits

        Args:
            profile: The rate limit profile to use.
            **overrides: Additional settings to override profile defaults.
        """
        if profile not in RATE_LIMIT_PROFILES:
            raise ValueError(
                f"Unknown profile '{profile}'. "
                f"Available profiles: {list(RATE_LIMIT_PROFILES.keys())}"
            )

        profile_settings: dict[str, Any] = RATE_LIMIT_PROFILES[profile].copy()
        profile_settings.update(overrides)
        return cls(**profile_settings)
