# src/ubumuntu/configuration/storage/local.py
"""Local filesystem storage configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ubumuntu.settings import Settings
    from ubumuntu.stores import AgentStore, VectorStore


@dataclass(frozen=True)
class LocalStorage:
    """Local filesystem storage using Chroma and SQLite.

    All data is persisted to the specified directory:
    - chroma/: Chunk vectors and metadata (ChromaDB)
    - agents.db: Agent configurations (SQLite)

    Args:
        data_dir: Base directory for all storage files.
                  Created if it doesn't exist.
        collection_name: Chroma collection holding the vectors.

    Example:
        storage = LocalStorage("./my_data")

        # In combination with a provider:
        ubu = Ubumuntu(
            provider=LiteLLMProvider(
                llm="gemini/gemini-2.0-flash", embedding="gemini/text-embedding-004"
            ),
            storage=LocalStorage("./my_data"),
        )
    """

    data_dir: str
    collection_name: str = "ubumuntu"

    def build_stores(self, settings: Settings) -> tuple[VectorStore, AgentStore]:
        """Build the vector store and the agent store.

        Creates the data directory if it doesn't exist.

        Returns:
            Tuple of (vector_store, agent_store)
        """
        from ubumuntu.stores import ChromaVectorStore, SQLiteAgentStore

        # Ensure directory exists
        Path(self.data_dir).mkdir(parents=True, exist_ok=True)

        vector_store = ChromaVectorStore(
            os.path.join(self.data_dir, "chroma"),
            collection_name=self.collection_name,
            dimensions=settings.embedding_dimensions,
        )
        agent_store = SQLiteAgentStore(os.path.join(self.data_dir, "agents.db"))

        return vector_store, agent_store
