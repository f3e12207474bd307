# src/ubumuntu/configuration/providers/litellm.py
"""LiteLLM provider configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ubumuntu.embedder import Embedder
    from ubumuntu.providers import LLMClient
    from ubumuntu.settings import Settings


@dataclass(frozen=True)
class LiteLLMProvider:
    """Provider configuration using LiteLLM for LLM and embedding calls.

    LiteLLM provides a unified interface to 100+ LLM providers including
    Gemini, OpenAI, Anthropic, Azure, Bedrock, and more.

    Args:
        llm: LiteLLM model identifier for clarification, synthesis and agents.
             Examples: "gemini/gemini-2.0-flash", "openai/gpt-5-mini"
        embedding: LiteLLM model identifier for embeddings.
                   Examples: "gemini/text-embedding-004", "openai/text-embedding-3-small"
        api_key: Optional key passed to every call; otherwise provider env vars apply.
        request_dimensions: Ask the embedding model for settings.embedding_dimensions
                            (for models such as text-embedding-3-* that can shorten output).

    Example:
        provider = LiteLLMProvider(
            llm="gemini/gemini-2.0-flash",
            embedding="gemini/text-embedding-004",
        )
    """

    llm: str
    embedding: str
    api_key: str | None = None
    request_dimensions: bool = False

    def build_embedder(self, settings: Settings) -> Embedder:
        """Build a ClientEmbedder using LiteLLM embedding client.

        Args:
            settings: Settings containing num_retries and embedding_dimensions.
        """
        from ubumuntu.embedder import ClientEmbedder
        from ubumuntu.providers.litellm import LiteLLMEmbeddingClient

        embedding_client = LiteLLMEmbeddingClient(
            model=self.embedding,
            num_retries=settings.num_retries,
            api_key=self.api_key,
            dimensions=settings.embedding_dimensions if self.request_dimensions else None,
        )
        return ClientEmbedder(
            embedding_client=embedding_client,
            dimensions=settings.embedding_dimensions,
        )

    def build_llm_client(self, settings: Settings | None = None) -> LLMClient:
        """Build a LiteLLMClient for general-purpose LLM calls.

        Args:
            settings: Optional settings containing num_retries. If None,
                     uses default retry value.
        """
        from ubumuntu.providers.litellm import LiteLLMClient

        num_retries = settings.num_retries if settings else 3
        return LiteLLMClient(model=self.llm, num_retries=num_retries, api_key=self.api_key)
