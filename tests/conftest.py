"""Shared pytest fixtures."""

import contextlib
import hashlib
import os
import re
import tempfile
import time
from dataclasses import dataclass
from typing import Any

import pytest

from ubumuntu.embedder import Embedder
from ubumuntu.models import AgentConfig, Capability
from ubumuntu.providers.base import LLMClient
from ubumuntu.settings import Settings
from ubumuntu.stores import InMemoryVectorStore, SQLiteAgentStore

TEST_DIMENSIONS = 8


@pytest.fixture
def temp_dir():
    """Create a temporary directory for stores."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir

        # Cleanup ChromaDB's shared system cache to release file handles
        # This is necessary to avoid "too many open files" errors in test suites
        # See: https://github.com/chroma-core/chroma/issues/5868
        try:
            from chromadb.api.shared_system_client import SharedSystemClient

            # Guard against ChromaDB internal API changes
            if hasattr(SharedSystemClient, "_identifier_to_system"):
                # Find and stop all systems that were created in this temp directory
                identifiers_to_remove = [
                    identifier
                    for identifier in list(SharedSystemClient._identifier_to_system.keys())
                    if tmpdir in str(identifier)
                ]
                for identifier in identifiers_to_remove:
                    if identifier in SharedSystemClient._identifier_to_system:
                        system = SharedSystemClient._identifier_to_system.pop(identifier)
                        with contextlib.suppress(Exception):
                            system.stop()
        except Exception:
            pass  # Best effort cleanup - ChromaDB internals may change


def word_vector(text: str, dimensions: int = TEST_DIMENSIONS) -> list[float]:
    """Bag-of-words vector: every word bumps one hashed component."""
    vector = [0.0] * dimensions
    for word in re.findall(r"[a-z0-9]+", text.lower()):
        slot = int(hashlib.md5(word.encode()).hexdigest(), 16) % dimensions
        vector[slot] += 1.0
    if not any(vector):
        vector[0] = 1.0
    return vector


class FakeEmbedder(Embedder):
    """Deterministic embedder; can be told to fail its first calls."""

    def __init__(self, dimensions: int = TEST_DIMENSIONS, fail_times: int = 0) -> None:
        self.dimensions = dimensions
        self.fail_times = fail_times
        self.calls: list[str] = []

    def embed_text(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail_times > 0:
            self.fail_times -= 1
            raise ConnectionError("embedding provider unreachable")
        return word_vector(text, self.dimensions)

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        return [self.embed_text(t) for t in texts]


class FakeLLMClient(LLMClient):
    """Scripted LLM client that records every call."""

    def __init__(
        self,
        reply: str | list[str] = "",
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.replies = list(reply) if isinstance(reply, list) else [reply]
        self.error = error
        self.delay = delay
        self.calls: list[dict[str, Any]] = []

    def complete(
        self,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        self.calls.append(
            {"messages": messages, "temperature": temperature, "max_tokens": max_tokens}
        )
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0]

    @property
    def last_prompt(self) -> str:
        return self.calls[-1]["messages"][-1]["content"]


@dataclass(frozen=True)
class FakeProvider:
    """Provider that hands out pre-built fakes."""

    embedder: Any
    llm_client: Any

    def build_embedder(self, settings: Any) -> Any:
        return self.embedder

    def build_llm_client(self, settings: Any) -> Any:
        return self.llm_client


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run in an empty directory with no UBUMUNTU_* variables set."""
    for key in list(os.environ):
        if key.startswith("UBUMUNTU_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def make_embedder():
    return FakeEmbedder


@pytest.fixture
def make_llm():
    return FakeLLMClient


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def llm():
    return FakeLLMClient(reply="A synthesized answer.")


@pytest.fixture
def memory_store():
    return InMemoryVectorStore(dimensions=TEST_DIMENSIONS)


@pytest.fixture
def agent_store(temp_dir):
    return SQLiteAgentStore(os.path.join(temp_dir, "agents.db"))


@pytest.fixture
def test_settings():
    """Small windows and no query clarification, to keep tests predictable."""
    return Settings(
        embedding_dimensions=TEST_DIMENSIONS,
        chunk_size=200,
        chunk_overlap=20,
        clarify_queries=False,
    )


@pytest.fixture
def ubu(embedder, llm, memory_store, agent_store, test_settings):
    """Ubumuntu instance wired to in-memory fakes."""
    from ubumuntu import Ubumuntu

    return Ubumuntu.from_stores(
        provider=FakeProvider(embedder=embedder, llm_client=llm),
        vector_store=memory_store,
        agent_store=agent_store,
        settings=test_settings,
    )


@pytest.fixture
def make_agent():
    """Factory for AgentConfig objects with sensible defaults."""

    def _make(name: str = "Agent", owner_id: str = "alice", **overrides: Any) -> AgentConfig:
        fields: dict[str, Any] = {
            "name": name,
            "owner_id": owner_id,
            "category": "research",
            "capabilities": [Capability(name="search", proficiency_level=0.5)],
        }
        fields.update(overrides)
        return AgentConfig(**fields)

    return _make
