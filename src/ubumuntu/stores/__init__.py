# src/ubumuntu/stores/__init__.py
"""Storage abstractions for Ubumuntu."""

from ubumuntu.stores.base import AgentStore, VectorStore
from ubumuntu.stores.chroma import ChromaVectorStore
from ubumuntu.stores.filters import (
    AccessScope,
    Filter,
    access_filter,
    all_of,
    category_filter,
    matches,
    owned_parent_filter,
    parent_filter,
    validate_filter,
)
from ubumuntu.stores.memory import InMemoryVectorStore
from ubumuntu.stores.sqlite_agent import SQLiteAgentStore

__all__ = [
    "AccessScope",
    "AgentStore",
    "ChromaVectorStore",
    "Filter",
    "InMemoryVectorStore",
    "SQLiteAgentStore",
    "VectorStore",
    "access_filter",
    "all_of",
    "category_filter",
    "matches",
    "owned_parent_filter",
    "parent_filter",
    "validate_filter",
]
