# src/ubumuntu/configuration/providers/__init__.py
"""Provider configurations for Ubumuntu."""

from ubumuntu.configuration.providers.litellm import LiteLLMProvider

__all__ = ["LiteLLMProvider"]
