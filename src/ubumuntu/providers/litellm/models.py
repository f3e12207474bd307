# src/ubumuntu/providers/litellm/models.py
"""Curated model constants for the LiteLLM provider.

Convenience constants for IDE autocomplete. Any valid LiteLLM model string
can be passed directly instead.
"""


class ChatModels:
    """Chat/completion models for clarification, synthesis and agent execution."""

    # Google Gemini
    GEMINI_2_FLASH = "gemini/gemini-2.0-flash"
    GEMINI_25_FLASH = "gemini/gemini-2.5-flash"
    GEMINI_25_PRO = "gemini/gemini-2.5-pro"

    # OpenAI
    GPT_5_MINI = "openai/gpt-5-mini"
    GPT_4O_MINI = "openai/gpt-4o-mini"

    # Anthropic
    CLAUDE_SONNET_45 = "anthropic/claude-sonnet-4-5-20250929"
    CLAUDE_HAIKU_45 = "anthropic/claude-haiku-4-5-20251001"


class EmbeddingModels:
    """Embedding models for LiteLLMEmbeddingClient.

    The default store dimensionality (768) matches the Gemini models.
    """

    # Google Gemini (768 dimensions)
    GEMINI_004 = "gemini/text-embedding-004"

    # OpenAI (1536 / 3072 dimensions; 3-small accepts dimensions=768)
    TEXT_3_SMALL = "openai/text-embedding-3-small"
    TEXT_3_LARGE = "openai/text-embedding-3-large"
