# src/ubumuntu/retriever.py
"""Retrieval pipeline for Ubumuntu."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Iterator

from pydantic import ValidationError

from ubumuntu.clarifier import History, QueryClarifier, format_history
from ubumuntu.embedder import Embedder
from ubumuntu.exceptions import (
    DimensionMismatchError,
    InvalidFilterError,
    RetrievalError,
)
from ubumuntu.logging_config import get_logger
from ubumuntu.models import ContentRecord, QueryResponse, RetrievalResult, ScoredRecord
from ubumuntu.providers.base import END_OF_STREAM, LLMClient, StreamChunk
from ubumuntu.stores import (
    AccessScope,
    Filter,
    VectorStore,
    access_filter,
    all_of,
    category_filter,
    parent_filter,
    validate_filter,
)

logger = get_logger(__name__)

SYNTHESIS_PROMPT = """You are Ubumuntu AI, a personal AI assistant. \
You have access to a knowledge base of documents and information.

Instructions:
1. Use ONLY the provided context to answer the question
2. If the context doesn't contain relevant information, say "I don't have any information about that in my knowledge base"
3. Do not make up or infer information not present in the context
4. If the context is irrelevant to the question, ignore it and say you don't have relevant information

Context from knowledge base:
{context}

Chat History:
{chat_history}

Current Question: {question}
Assistant: Let me check the provided context and answer your question."""

NO_CONTEXT = "No relevant context found. Please provide more information or rephrase your query."


def _entry_label(record: ContentRecord) -> str:
    if record.source_type == "note":
        return f"NOTE [{record.title or 'Untitled'}]"
    if record.source_type == "activity":
        category = ", ".join(sorted(record.categories)) or "Uncategorized"
        return f"ACTIVITY LOG [{category}]"
    return f"DOCUMENT [{record.title or 'Untitled'}]"


def format_context(results: list[ScoredRecord]) -> str:
    """Render retrieved records grouped by source, best match first."""
    if not results:
        return NO_CONTEXT

    groups: dict[str, list[ScoredRecord]] = {}
    for result in results:
        source = result.record.title or result.record.parent_id
        groups.setdefault(source, []).append(result)

    sections = []
    for source, items in groups.items():
        items = sorted(items, key=lambda r: r.score, reverse=True)
        entries = "\n\n".join(
            f"[Entry {i}] (Relevance: {round(item.score * 100)}%)\n"
            f"{_entry_label(item.record)}:\n{item.record.text}"
            for i, item in enumerate(items, 1)
        )
        sections.append(f"=== {source} ===\n{entries}\n---")
    return "\n\n".join(sections)


class Retriever:
    """Orchestrates the retrieval pipeline.

    Every query is scoped to one user: the access filter admits the user's
    own records and, unless the scope says otherwise, public records. Another
    user's personal records are never returned.
    """

    def __init__(
        self,
        vector_store: VectorStore,
        embedder: Embedder,
        default_k: int = 5,
        clarifier: QueryClarifier | None = None,
        llm_client: LLMClient | None = None,
        synthesis_prompt: str | None = None,
        synthesis_temperature: float | None = 0.2,
        synthesis_max_tokens: int | None = 2048,
        min_score: float | None = None,
        overfetch: int = 2,
    ) -> None:
        """Initialize the retriever.

        Args:
            vector_store: Store to search
            embedder: Embedder for query embedding
            default_k: Default number of results to return
            clarifier: Optional query clarifier used by search()
            llm_client: LLM client for answer synthesis (optional)
            synthesis_prompt: Custom prompt with {context}, {chat_history}, {question}
            synthesis_temperature: Temperature for synthesis LLM calls
            synthesis_max_tokens: Output bound for synthesis LLM calls
            min_score: Drop matches scoring below this similarity
            overfetch: Query this many times top_k so ties can be reordered
        """
        self.vector_store = vector_store
        self.embedder = embedder
        self.default_k = default_k
        self.clarifier = clarifier
        self._llm_client = llm_client
        self.synthesis_prompt = synthesis_prompt or SYNTHESIS_PROMPT
        self.synthesis_temperature = synthesis_temperature
        self.synthesis_max_tokens = synthesis_max_tokens
        self.min_score = min_score
        self.overfetch = max(1, overfetch)

    def build_filter(
        self,
        owner_id: str,
        access_scope: AccessScope = "all",
        categories: Iterable[str] | str | None = None,
        context_ids: Iterable[str] | None = None,
    ) -> Filter:
        """Combine the access, category and context restrictions into one filter."""
        try:
            access = access_filter(owner_id, access_scope)
            where = all_of(
                access,
                category_filter(categories),
                parent_filter(context_ids),
            ) or access
            validate_filter(where)
        except InvalidFilterError as e:
            raise RetrievalError("invalid_filter", e.message) from e
        return where

    def _embed_query(self, query: str) -> list[float]:
        try:
            return self.embedder.embed_text(query)
        except DimensionMismatchError:
            raise
        except Exception as e:
            raise RetrievalError("provider_unreachable", f"Query embedding failed: {e}") from e

    def retrieve_scored(
        self,
        query: str,
        owner_id: str,
        access_scope: AccessScope = "all",
        category_filter: Iterable[str] | str | None = None,
        top_k: int | None = None,
        context_ids: Iterable[str] | None = None,
    ) -> list[ScoredRecord]:
        """Like retrieve(), but keeps each record's similarity score."""
        k = self.default_k if top_k is None else top_k
        if k <= 0:
            return []

        where = self.build_filter(owner_id, access_scope, category_filter, context_ids)
        vector = self._embed_query(query)

        try:
            matches = self.vector_store.query(vector, top_k=k * self.overfetch, filter=where)
        except DimensionMismatchError:
            raise
        except InvalidFilterError as e:
            raise RetrievalError("invalid_filter", e.message) from e
        except Exception as e:
            raise RetrievalError("provider_unreachable", f"Vector store query failed: {e}") from e

        results = []
        for match in matches:
            if self.min_score is not None and match.score < self.min_score:
                continue
            try:
                record = ContentRecord.from_metadata(match.id, match.metadata)
            except ValidationError as e:
                logger.warning("Skipping malformed record %s: %s", match.id, e)
                continue
            results.append(ScoredRecord(record=record, score=match.score))

        results.sort(key=lambda r: (-r.score, -r.record.updated_at.timestamp()))
        return results[:k]

    def retrieve(
        self,
        query: str,
        owner_id: str,
        access_scope: AccessScope = "all",
        category_filter: Iterable[str] | str | None = None,
        top_k: int | None = None,
        context_ids: Iterable[str] | None = None,
    ) -> list[ContentRecord]:
        """Return the records most similar to the query that the user may see.

        Args:
            query: Search text
            owner_id: Requesting user
            access_scope: "all" (own + public), "personal" (own) or "public"
            category_filter: Keep records sharing at least one of these categories
            top_k: Number of records (default: self.default_k)
            context_ids: Restrict to these parent ids

        Returns:
            Records ordered by descending score, ties broken by most recent update.

        Raises:
            DimensionMismatchError: The query embedding has the wrong length.
            RetrievalError: "provider_unreachable" or "invalid_filter".
        """
        scored = self.retrieve_scored(
            query, owner_id, access_scope, category_filter, top_k, context_ids
        )
        return [r.record for r in scored]

    def _second_phase(
        self,
        query: str,
        clarified: str,
        owner_id: str,
        scope: dict,
    ) -> RetrievalResult:
        results = self.retrieve_scored(clarified, owner_id, **scope)
        used = clarified
        if not results and clarified != query:
            logger.info("Clarified query found nothing, retrying with the original")
            results = self.retrieve_scored(query, owner_id, **scope)
            used = query
        return RetrievalResult(
            original_query=query,
            clarified_query=clarified,
            query_used=used,
            results=results,
        )

    def search(
        self,
        query: str,
        owner_id: str,
        history: History | None = None,
        access_scope: AccessScope = "all",
        category_filter: Iterable[str] | str | None = None,
        top_k: int | None = None,
        context_ids: Iterable[str] | None = None,
    ) -> RetrievalResult:
        """Clarify the query, retrieve, and fall back to the original query if empty."""
        clarified = self.clarifier.clarify(query, history) if self.clarifier else query
        scope = {
            "access_scope": access_scope,
            "category_filter": category_filter,
            "top_k": top_k,
            "context_ids": context_ids,
        }
        return self._second_phase(query, clarified, owner_id, scope)

    async def asearch(
        self,
        query: str,
        owner_id: str,
        history: History | None = None,
        access_scope: AccessScope = "all",
        category_filter: Iterable[str] | str | None = None,
        top_k: int | None = None,
        context_ids: Iterable[str] | None = None,
    ) -> RetrievalResult:
        """Async search()."""
        clarified = await self.clarifier.aclarify(query, history) if self.clarifier else query
        scope = {
            "access_scope": access_scope,
            "category_filter": category_filter,
            "top_k": top_k,
            "context_ids": context_ids,
        }
        return await asyncio.to_thread(self._second_phase, query, clarified, owner_id, scope)

    def _synthesis_messages(
        self, query: str, results: list[ScoredRecord], history: History | None
    ) -> list[dict]:
        prompt = self.synthesis_prompt.format(
            context=format_context(results),
            chat_history=format_history(history, limit=len(history or [])),
            question=query,
        )
        return [{"role": "user", "content": prompt}]

    def get_answer(
        self,
        query: str,
        owner_id: str,
        history: History | None = None,
        access_scope: AccessScope = "all",
        category_filter: Iterable[str] | str | None = None,
        top_k: int | None = None,
        context_ids: Iterable[str] | None = None,
    ) -> QueryResponse:
        """Get an answer to a query using retrieved context.

        If llm_client is configured, synthesizes an answer from the context.
        Otherwise, returns QueryResponse with answer=None.
        """
        found = self.search(
            query, owner_id, history, access_scope, category_filter, top_k, context_ids
        )

        answer = None
        if found.results and self._llm_client:
            answer = self._llm_client.complete(
                self._synthesis_messages(query, found.results, history),
                temperature=self.synthesis_temperature,
                max_tokens=self.synthesis_max_tokens,
            ).strip()

        return QueryResponse(
            query=query,
            clarified_query=found.clarified_query,
            answer=answer,
            results=found.results,
        )

    def stream_answer(
        self,
        query: str,
        owner_id: str,
        history: History | None = None,
        access_scope: AccessScope = "all",
        category_filter: Iterable[str] | str | None = None,
        top_k: int | None = None,
        context_ids: Iterable[str] | None = None,
    ) -> Iterator[StreamChunk]:
        """Stream a synthesized answer. Always ends with END_OF_STREAM."""
        found = self.search(
            query, owner_id, history, access_scope, category_filter, top_k, context_ids
        )
        if not found.results or self._llm_client is None:
            yield END_OF_STREAM
            return

        yield from self._llm_client.stream(
            self._synthesis_messages(query, found.results, history),
            temperature=self.synthesis_temperature,
            max_tokens=self.synthesis_max_tokens,
        )
