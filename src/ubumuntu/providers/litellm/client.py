# src/ubumuntu/providers/litellm/client.py
"""LiteLLM client implementations for LLM and embedding APIs."""

from collections.abc import Iterator
from typing import Any

import litellm

from ubumuntu.exceptions import EmbeddingError, GenerationError
from ubumuntu.providers.base import END_OF_STREAM, EmbeddingClient, LLMClient, StreamChunk
from ubumuntu.providers.litellm.models import ChatModels, EmbeddingModels


class LiteLLMClient(LLMClient):
    """LiteLLM-based LLM client for text generation.

    Supports any model available through LiteLLM (OpenAI, Anthropic, Gemini,
    Bedrock, etc.).

    Example:
        from ubumuntu.providers.litellm import LiteLLMClient, ChatModels

        client = LiteLLMClient(model=ChatModels.GEMINI_2_FLASH)
        response = client.complete([{"role": "user", "content": "Hello"}])
    """

    def __init__(
        self,
        model: str = ChatModels.GEMINI_2_FLASH,
        num_retries: int = 3,
        api_key: str | None = None,
    ) -> None:
        """Initialize the LiteLLM client.

        Args:
            model: LiteLLM model identifier.
            num_retries: Number of retries on rate limit errors. LiteLLM handles
                        exponential backoff automatically. Default: 3.
            api_key: Optional API key; LiteLLM falls back to provider env vars.
        """
        self.model = model
        self.num_retries = num_retries
        self.api_key = api_key

    def _completion_kwargs(
        self,
        messages: list[dict],
        temperature: float | None,
        max_tokens: int | None,
    ) -> dict[str, Any]:
        completion_kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "drop_params": True,
            "num_retries": self.num_retries,
        }
        if temperature is not None:
            completion_kwargs["temperature"] = temperature
        if max_tokens is not None:
            completion_kwargs["max_tokens"] = max_tokens
        if self.api_key:
            completion_kwargs["api_key"] = self.api_key
        return completion_kwargs

    def _extract_content(self, response: Any) -> str:
        if not response.choices:
            raise GenerationError(f"LLM returned no choices for model {self.model}")
        content = response.choices[0].message.content
        if content is None:
            raise GenerationError(f"LLM returned None content for model {self.model}")
        return str(content)

    def complete(
        self,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a completion using LiteLLM."""
        try:
            response = litellm.completion(
                **self._completion_kwargs(messages, temperature, max_tokens)
            )
        except Exception as e:
            raise GenerationError(f"Completion failed for model {self.model}: {e}") from e
        return self._extract_content(response)

    async def acomplete(
        self,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a completion using LiteLLM (async)."""
        try:
            response = await litellm.acompletion(
                **self._completion_kwargs(messages, temperature, max_tokens)
            )
        except Exception as e:
            raise GenerationError(f"Completion failed for model {self.model}: {e}") from e
        return self._extract_content(response)

    def stream(
        self,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> Iterator[StreamChunk]:
        """Stream a completion using LiteLLM, ending with END_OF_STREAM."""
        try:
            response = litellm.completion(
                stream=True, **self._completion_kwargs(messages, temperature, max_tokens)
            )
            for part in response:
                if not part.choices:
                    continue
                delta = part.choices[0].delta.content
                if delta:
                    yield StreamChunk(text=str(delta))
        except Exception as e:
            raise GenerationError(f"Streaming failed for model {self.model}: {e}") from e
        yield END_OF_STREAM


class LiteLLMEmbeddingClient(EmbeddingClient):
    """LiteLLM-based embedding client.

    Example:
        from ubumuntu.providers.litellm import LiteLLMEmbeddingClient, EmbeddingModels

        client = LiteLLMEmbeddingClient(model=EmbeddingModels.GEMINI_004)
        embeddings = client.embed(["Hello world", "How are you?"])
    """

    def __init__(
        self,
        model: str = EmbeddingModels.GEMINI_004,
        num_retries: int = 3,
        api_key: str | None = None,
        dimensions: int | None = None,
    ) -> None:
        """Initialize the LiteLLM embedding client.

        Args:
            model: LiteLLM embedding model identifier.
            num_retries: Number of retries on rate limit errors. Default: 3.
            api_key: Optional API key; LiteLLM falls back to provider env vars.
            dimensions: Optional output dimensionality for models that support it.
        """
        self.model = model
        self.num_retries = num_retries
        self.api_key = api_key
        self.dimensions = dimensions

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings using LiteLLM."""
        if not texts:
            return []

        embedding_kwargs: dict[str, Any] = {
            "model": self.model,
            "input": texts,
            "num_retries": self.num_retries,
        }
        if self.api_key:
            embedding_kwargs["api_key"] = self.api_key
        if self.dimensions is not None:
            embedding_kwargs["dimensions"] = self.dimensions

        try:
            response = litellm.embedding(**embedding_kwargs)
        except Exception as e:
            raise EmbeddingError(f"Embedding failed for model {self.model}: {e}") from e

        # Sort by index to maintain order
        sorted_data = sorted(response.data, key=lambda x: x["index"])
        return [item["embedding"] for item in sorted_data]
