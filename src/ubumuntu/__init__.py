"""Ubumuntu - personal retrieval over documents, notes and activity.

Content is split into overlapping windows, embedded and stored with
per-user access metadata. Queries are clarified against chat history,
searched within the user's scope and answered by an LLM. Agents built on
top of that retrieval can be remixed into composites and run in chains.

Quick Start (LiteLLM + Local Storage):
    from ubumuntu import Ubumuntu, LiteLLMProvider, LocalStorage

    ubu = Ubumuntu(
        provider=LiteLLMProvider(
            llm="gemini/gemini-2.0-flash", embedding="gemini/text-embedding-004"
        ),
        storage=LocalStorage("./data"),
    )

    # Ingest content
    ubu.ingest("meeting-notes", text, owner_id="alice", categories=["work"])

    # Query
    response = ubu.retriever().get_answer("What did we decide?", "alice")

Explicit Stores:
    from ubumuntu import LiteLLMProvider, Settings, Ubumuntu
    from ubumuntu.stores import ChromaVectorStore, SQLiteAgentStore

    ubu = Ubumuntu.from_stores(
        provider=LiteLLMProvider(llm="openai/gpt-5-mini", embedding="text-embedding-3-small"),
        vector_store=ChromaVectorStore("./data/chroma", dimensions=1536),
        agent_store=SQLiteAgentStore("./data/agents.db"),
        settings=Settings(embedding_dimensions=1536),
    )
"""

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("ubumuntu")
except PackageNotFoundError:
    # Running from a source tree without an installed distribution
    __version__ = "unknown"

# Agents
from ubumuntu.agents import AgentComposer, AgentExecutor, ChainLauncher, RetrievalAgentExecutor

# Query clarification
from ubumuntu.clarifier import QueryClarifier

# Configuration objects
from ubumuntu.configuration import (
    LiteLLMProvider,
    LocalStorage,
    ProviderConfig,
    StorageConfig,
)

# Embedding ABC
from ubumuntu.embedder import ClientEmbedder, Embedder

# Errors
from ubumuntu.exceptions import (
    AuthorizationError,
    ChainError,
    CompositionError,
    DimensionMismatchError,
    IngestionError,
    RetrievalError,
    UbumuntuError,
)

# Identity boundary
from ubumuntu.identity import (
    EnvIdentityProvider,
    IdentityProvider,
    StaticIdentityProvider,
    require_user_id,
)

# Pipelines
from ubumuntu.ingestor import Ingestor

# Models
from ubumuntu.models import (
    AgentConfig,
    Capability,
    ChainRun,
    ContentRecord,
    IngestResult,
    PerformanceMetrics,
    QueryResponse,
    RetrievalResult,
    RunStatus,
    ScoredRecord,
    StepResult,
    StepStatus,
    VisualizationPoint,
)

# Provider ABCs
from ubumuntu.providers import EmbeddingClient, LLMClient
from ubumuntu.retriever import Retriever

# Configuration
from ubumuntu.settings import Settings
from ubumuntu.splitter import TextSplitter

# Storage
from ubumuntu.stores import (
    AgentStore,
    ChromaVectorStore,
    InMemoryVectorStore,
    SQLiteAgentStore,
    VectorStore,
)

# Central configuration
from ubumuntu.ubumuntu import Ubumuntu
from ubumuntu.visualization import VisualizationReducer, reduce_vectors

__all__ = [
    # Version
    "__version__",
    # Models
    "AgentConfig",
    "Capability",
    "ChainRun",
    "ContentRecord",
    "IngestResult",
    "PerformanceMetrics",
    "QueryResponse",
    "RetrievalResult",
    "RunStatus",
    "ScoredRecord",
    "StepResult",
    "StepStatus",
    "VisualizationPoint",
    # Config
    "Settings",
    # Configuration objects
    "ProviderConfig",
    "StorageConfig",
    "LiteLLMProvider",
    "LocalStorage",
    # Identity
    "IdentityProvider",
    "StaticIdentityProvider",
    "EnvIdentityProvider",
    "require_user_id",
    # Errors
    "UbumuntuError",
    "AuthorizationError",
    "ChainError",
    "CompositionError",
    "DimensionMismatchError",
    "IngestionError",
    "RetrievalError",
    # Storage
    "AgentStore",
    "ChromaVectorStore",
    "InMemoryVectorStore",
    "SQLiteAgentStore",
    "VectorStore",
    # Embedding
    "ClientEmbedder",
    "Embedder",
    # Provider ABCs
    "LLMClient",
    "EmbeddingClient",
    # Pipelines
    "TextSplitter",
    "Ingestor",
    "QueryClarifier",
    "Retriever",
    # Agents
    "AgentComposer",
    "AgentExecutor",
    "ChainLauncher",
    "RetrievalAgentExecutor",
    # Visualization
    "VisualizationReducer",
    "reduce_vectors",
    # Central configuration
    "Ubumuntu",
]
