# src/ubumuntu/providers/base.py
"""Abstract base classes for LLM and embedding providers."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class StreamChunk:
    """An incremental piece of streamed text.

    The final chunk of every stream has ``done=True`` (and usually empty
    text); consumers stop reading there.
    """

    text: str
    done: bool = False


END_OF_STREAM = StreamChunk(text="", done=True)


class LLMClient(ABC):
    """Abstract base class for generative text providers.

    Example:
        class MyLLMClient(LLMClient):
            def complete(self, messages, temperature=None, max_tokens=None):
                return my_api.chat(messages, temp=temperature, limit=max_tokens)
    """

    @abstractmethod
    def complete(
        self,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a completion for the given messages.

        Args:
            messages: List of message dicts with 'role' and 'content' keys.
                      Example: [{"role": "user", "content": "Hello"}]
            temperature: Optional temperature (0.0-1.0). None uses the provider default.
            max_tokens: Optional bound on the output length.

        Returns:
            The generated text response.
        """
        ...

    async def acomplete(
        self,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a completion (async).

        Default implementation runs the sync complete() in a worker thread.
        Override in subclasses for true async behavior.
        """
        return await asyncio.to_thread(self.complete, messages, temperature, max_tokens)

    def stream(
        self,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> Iterator[StreamChunk]:
        """Stream a completion as ordered chunks, ending with END_OF_STREAM.

        Default implementation emits the whole completion as one chunk.
        """
        text = self.complete(messages, temperature, max_tokens)
        if text:
            yield StreamChunk(text=text)
        yield END_OF_STREAM


class EmbeddingClient(ABC):
    """Abstract base class for embedding providers.

    Example:
        class MyEmbeddingClient(EmbeddingClient):
            def embed(self, texts):
                return my_api.embed_batch(texts)
    """

    @abstractmethod
    def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts.

        Args:
            texts: List of texts to embed.

        Returns:
            List of embedding vectors, one per input text.
            Order is preserved (result[i] corresponds to texts[i]).
        """
        ...
