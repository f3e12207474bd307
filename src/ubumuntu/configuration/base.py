# src/ubumuntu/configuration/base.py
"""Protocol definitions for configuration objects.

These protocols define the interfaces for provider and storage configurations.
Implementations can use @dataclass(frozen=True) for immutability.

Protocols are used here (structural typing for configuration factories) while
stores/base.py uses ABCs (nominal typing for storage implementations that
share behaviour through inheritance).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ubumuntu.embedder import Embedder
    from ubumuntu.providers import LLMClient
    from ubumuntu.settings import Settings
    from ubumuntu.stores import AgentStore, VectorStore


@runtime_checkable
class ProviderConfig(Protocol):
    """Protocol for provider configurations.

    Provider configurations build the model-backed components:
    - Embedder: Creates vector embeddings for ingestion and search
    - LLMClient: Clarification, answer synthesis and agent execution

    Example implementation:
        @dataclass(frozen=True)
        class LiteLLMProvider:
            llm: str
            embedding: str

            def build_embedder(self, settings: Settings) -> Embedder: ...
            def build_llm_client(self, settings: Settings) -> LLMClient: ...
    """

    def build_embedder(self, settings: Settings) -> Embedder:
        """Build an embedder producing settings.embedding_dimensions vectors."""
        ...

    def build_llm_client(self, settings: Settings) -> LLMClient:
        """Build an LLM client for general-purpose completions."""
        ...


@runtime_checkable
class StorageConfig(Protocol):
    """Protocol for storage configurations.

    Storage configurations build the data stores:
    - VectorStore: Chunk vectors with their metadata
    - AgentStore: Agent configurations

    Example implementation:
        @dataclass(frozen=True)
        class LocalStorage:
            data_dir: str

            def build_stores(self, settings: Settings) -> tuple[VectorStore, AgentStore]: ...
    """

    def build_stores(self, settings: Settings) -> tuple[VectorStore, AgentStore]:
        """Build both storage components.

        Returns:
            Tuple of (vector_store, agent_store)
        """
        ...
