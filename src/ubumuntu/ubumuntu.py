# src/ubumuntu/ubumuntu.py
"""Central configuration class for Ubumuntu."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ubumuntu.agents import AgentComposer, AgentExecutor, ChainLauncher
    from ubumuntu.clarifier import QueryClarifier
    from ubumuntu.configuration import ProviderConfig, StorageConfig
    from ubumuntu.ingestor import Ingestor, ProgressCallback
    from ubumuntu.models import AccessLevel, AgentConfig, IngestResult, SourceType
    from ubumuntu.providers import LLMClient
    from ubumuntu.retriever import Retriever
    from ubumuntu.stores import AgentStore, VectorStore
    from ubumuntu.visualization import VisualizationReducer

from ubumuntu.ingestor import ParentLocks
from ubumuntu.logging_config import get_logger, log_with_context
from ubumuntu.settings import Settings

logger = get_logger(__name__)


class Ubumuntu:
    """Central configuration for Ubumuntu stores and components.

    Ubumuntu bundles the stores and model-backed components together so you
    configure once and create ingestors, retrievers, composers and chain
    launchers from it.

    There are two ways to create an Ubumuntu instance:

    1. With a storage bundle:

        from ubumuntu import Ubumuntu, LiteLLMProvider, LocalStorage

        ubu = Ubumuntu(
            provider=LiteLLMProvider(
                llm="gemini/gemini-2.0-flash",
                embedding="gemini/text-embedding-004",
            ),
            storage=LocalStorage("./data"),
        )
        ubu.ingest("doc-1", text, owner_id="alice")

    2. With explicit stores:

        from ubumuntu.stores import ChromaVectorStore, SQLiteAgentStore

        ubu = Ubumuntu.from_stores(
            provider=LiteLLMProvider(...),
            vector_store=ChromaVectorStore("./data/chroma"),
            agent_store=SQLiteAgentStore("./data/agents.db"),
        )
    """

    def __init__(
        self,
        *,
        provider: ProviderConfig,
        # EITHER storage bundle...
        storage: StorageConfig | None = None,
        # ...OR explicit stores
        vector_store: VectorStore | None = None,
        agent_store: AgentStore | None = None,
        # Common
        settings: Settings | None = None,
    ) -> None:
        """Create an Ubumuntu instance.

        Args:
            provider: Provider configuration (builds the embedder and LLM client).
            storage: Storage bundle. Mutually exclusive with explicit stores.
            vector_store: Explicit vector store. Use together with agent_store.
            agent_store: Explicit agent store.
            settings: Behavioral settings (chunk sizes, default_k, timeouts, ...)

        Raises:
            ValueError: If neither the storage bundle nor both explicit stores
                are provided, or if both are provided.
        """
        self._settings = settings if settings is not None else Settings()

        if storage is not None:
            if vector_store is not None or agent_store is not None:
                raise ValueError("Cannot mix 'storage' bundle with explicit stores")
            self.vector_store, self.agent_store = storage.build_stores(self._settings)
        elif vector_store is not None and agent_store is not None:
            self.vector_store = vector_store
            self.agent_store = agent_store
        else:
            raise ValueError(
                "Must provide either 'storage' bundle or both explicit stores "
                "(vector_store, agent_store)"
            )

        self.embedder = provider.build_embedder(self._settings)
        self._provider = provider
        self._llm_client: LLMClient | None = None
        # Shared by every ingestor so re-ingestion of a parent is serialized
        self._parent_locks = ParentLocks()

    @classmethod
    def from_stores(
        cls,
        *,
        provider: ProviderConfig,
        vector_store: VectorStore,
        agent_store: AgentStore,
        settings: Settings | None = None,
    ) -> Ubumuntu:
        """Create Ubumuntu with explicit stores instead of a StorageConfig bundle."""
        return cls(
            provider=provider,
            vector_store=vector_store,
            agent_store=agent_store,
            settings=settings,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def llm_client(self) -> LLMClient:
        """LLM client built from the provider on first use."""
        if self._llm_client is None:
            self._llm_client = self._provider.build_llm_client(self._settings)
        return self._llm_client

    def ingestor(self) -> Ingestor:
        """Create an Ingestor using this instance's vector store and embedder."""
        from ubumuntu.ingestor import Ingestor
        from ubumuntu.splitter import TextSplitter

        return Ingestor(
            vector_store=self.vector_store,
            embedder=self.embedder,
            splitter=TextSplitter(
                chunk_size=self._settings.chunk_size,
                chunk_overlap=self._settings.chunk_overlap,
                language=self._settings.sentence_language,
            ),
            max_concurrent_embeddings=self._settings.max_concurrent_embeddings,
            embed_retries=self._settings.embed_retries,
            locks=self._parent_locks,
        )

    def clarifier(self, llm_client: LLMClient | None = None) -> QueryClarifier:
        """Create a QueryClarifier from the clarification settings."""
        from ubumuntu.clarifier import QueryClarifier

        return QueryClarifier(
            llm_client or self.llm_client,
            timeout=self._settings.clarification_timeout,
            history_limit=self._settings.clarification_history,
            temperature=self._settings.clarification_temperature,
            max_tokens=self._settings.clarification_max_tokens,
        )

    def retriever(
        self,
        *,
        llm_client: LLMClient | None = None,
        synthesize: bool = True,
        clarify: bool | None = None,
        default_k: int | None = None,
    ) -> Retriever:
        """Create a Retriever using this instance's stores.

        Args:
            llm_client: LLM client for synthesis and clarification. If None,
                the provider's client is used.
            synthesize: Set False for retrieval without answer synthesis.
            clarify: Rewrite queries before searching. If None, uses settings.
            default_k: Number of results to return. If None, uses settings default.
        """
        from ubumuntu.retriever import Retriever

        clarify = self._settings.clarify_queries if clarify is None else clarify
        needs_llm = synthesize or clarify
        client = llm_client or (self.llm_client if needs_llm else None)

        clarifier = self.clarifier(client) if clarify and client is not None else None

        return Retriever(
            vector_store=self.vector_store,
            embedder=self.embedder,
            default_k=default_k if default_k is not None else self._settings.default_k,
            clarifier=clarifier,
            llm_client=client if synthesize else None,
            synthesis_prompt=self._settings.synthesis_prompt,
            synthesis_temperature=self._settings.synthesis_temperature,
            synthesis_max_tokens=self._settings.synthesis_max_tokens,
            min_score=self._settings.min_score,
            overfetch=self._settings.retrieval_overfetch,
        )

    def composer(self) -> AgentComposer:
        """Create an AgentComposer that follows ancestry through the agent store."""
        from ubumuntu.agents import AgentComposer

        return AgentComposer(resolve_agent=self.agent_store.get)

    def executor(self, *, llm_client: LLMClient | None = None) -> AgentExecutor:
        """Create the default retrieval-backed agent executor."""
        from ubumuntu.agents import RetrievalAgentExecutor

        client = llm_client or self.llm_client
        return RetrievalAgentExecutor(
            retriever=self.retriever(llm_client=client, synthesize=False, clarify=False),
            llm_client=client,
        )

    def chain_launcher(self, executor: AgentExecutor | None = None) -> ChainLauncher:
        """Create a ChainLauncher. Uses executor() unless one is given."""
        from ubumuntu.agents import ChainLauncher

        return ChainLauncher(
            executor or self.executor(),
            step_timeout=self._settings.chain_step_timeout,
            default_input=self._settings.chain_default_input,
        )

    def visualizer(self) -> VisualizationReducer:
        """Create a VisualizationReducer over this instance's vector store."""
        from ubumuntu.visualization import VisualizationReducer

        return VisualizationReducer(
            self.vector_store,
            max_vectors=self._settings.visualization_max_vectors,
            batch_size=self._settings.visualization_batch_size,
            scale=self._settings.visualization_scale,
        )

    def ingest(
        self,
        parent_id: str,
        raw_text: str,
        owner_id: str,
        categories: Iterable[str] | str | None = None,
        access: AccessLevel = "personal",
        source_type: SourceType = "document",
        title: str = "",
        on_progress: ProgressCallback | None = None,
    ) -> IngestResult:
        """Index one parent document. See Ingestor.ingest()."""
        return self.ingestor().ingest(
            parent_id,
            raw_text,
            owner_id,
            categories=categories,
            access=access,
            source_type=source_type,
            title=title,
            on_progress=on_progress,
        )

    def delete_content(self, parent_id: str, owner_id: str) -> IngestResult:
        """Remove every chunk of a parent document owned by owner_id."""
        return self.ingestor().delete(parent_id, owner_id)

    def remix(
        self,
        agent_ids: Sequence[str],
        requested_by: str,
        *,
        is_public: bool = False,
    ) -> AgentConfig:
        """Compose visible agents into a new composite and save it.

        Raises:
            AgentNotFoundError, PermissionDeniedError: A source cannot be used.
            CompositionError: The sources cannot be composed.
        """
        sources = [self.agent_store.get_visible(agent_id, requested_by) for agent_id in agent_ids]
        composite = self.composer().compose(sources, requested_by, is_public=is_public)
        self.agent_store.put(composite, requested_by)
        log_with_context(
            logger,
            logging.INFO,
            "Saved composite agent",
            agent_id=composite.agent_id,
            parents=",".join(agent_ids),
        )
        return composite

    def close(self) -> None:
        """Release store resources."""
        self.vector_store.close()
