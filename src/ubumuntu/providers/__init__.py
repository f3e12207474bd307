# src/ubumuntu/providers/__init__.py
"""Provider implementations for Ubumuntu.

- LLMClient: Abstract base class for generative text providers
- EmbeddingClient: Abstract base class for embedding providers
- LiteLLM implementations of both

The core never names a concrete provider; components receive clients at
construction.
"""

from ubumuntu.providers.base import END_OF_STREAM, EmbeddingClient, LLMClient, StreamChunk
from ubumuntu.providers.litellm import (
    ChatModels,
    EmbeddingModels,
    LiteLLMClient,
    LiteLLMEmbeddingClient,
)

__all__ = [
    # ABCs
    "LLMClient",
    "EmbeddingClient",
    # Streaming
    "StreamChunk",
    "END_OF_STREAM",
    # Model constants
    "ChatModels",
    "EmbeddingModels",
    # LiteLLM clients
    "LiteLLMClient",
    "LiteLLMEmbeddingClient",
]
