# src/ubumuntu/configuration/__init__.py
"""Configuration objects for Ubumuntu.

Instead of factory methods, you pass configuration objects that know how to
build their components.

Provider configurations (build model-backed components):
- LiteLLMProvider: Uses LiteLLM for LLM and embedding calls

Storage configurations (build data stores):
- LocalStorage: Chroma + SQLite for local use

Example:
    from ubumuntu import Ubumuntu, LiteLLMProvider, LocalStorage

    ubu = Ubumuntu(
        provider=LiteLLMProvider(
            llm="gemini/gemini-2.0-flash", embedding="gemini/text-embedding-004"
        ),
        storage=LocalStorage("./data"),
    )
"""

from ubumuntu.configuration.base import ProviderConfig, StorageConfig
from ubumuntu.configuration.providers import LiteLLMProvider
from ubumuntu.configuration.storage import LocalStorage

__all__ = [
    "ProviderConfig",
    "StorageConfig",
    "LiteLLMProvider",
    "LocalStorage",
]
