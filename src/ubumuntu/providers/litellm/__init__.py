# src/ubumuntu/providers/litellm/__init__.py
"""LiteLLM provider clients for Ubumuntu.

Usage:
    from ubumuntu.providers.litellm import LiteLLMClient, ChatModels

    client = LiteLLMClient(model=ChatModels.GEMINI_2_FLASH)
"""

from ubumuntu.providers.litellm.client import LiteLLMClient, LiteLLMEmbeddingClient
from ubumuntu.providers.litellm.models import ChatModels, EmbeddingModels

__all__ = [
    # Model constants
    "ChatModels",
    "EmbeddingModels",
    # Clients
    "LiteLLMClient",
    "LiteLLMEmbeddingClient",
]
