# src/ubumuntu/ingestor.py
"""Ingestion pipeline for Ubumuntu."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime

from ubumuntu.embedder import Embedder
from ubumuntu.exceptions import DimensionMismatchError, IngestionError, PermissionDeniedError
from ubumuntu.logging_config import get_logger, log_with_context
from ubumuntu.models import (
    AccessLevel,
    ContentRecord,
    EmbeddingVector,
    IngestResult,
    SourceType,
    chunk_id,
)
from ubumuntu.splitter import TextSplitter, sanitize_text
from ubumuntu.stores import VectorStore, owned_parent_filter

logger = get_logger(__name__)

ProgressCallback = Callable[[str, int, int, str], None]
"""Callback for ingestion progress updates.

Args:
    event: Event type: "splitting", "embedding" or "storing"
    current: Current progress count (0 to total)
    total: Total items to process
    message: Human-readable status message

Example:
    def on_progress(event: str, current: int, total: int, message: str) -> None:
        print(f"[{event}] {current}/{total}: {message}")
"""


class ParentLocks:
    """One lock per parent id, so re-ingestion of a parent never interleaves.

    Ingestors writing to the same store should share one registry.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def for_parent(self, parent_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(parent_id)
            if lock is None:
                lock = self._locks[parent_id] = threading.Lock()
            return lock


class Ingestor:
    """Orchestrates the ingestion pipeline.

    Pipeline:
    1. Sanitize and split the raw text into overlapping windows
    2. Embed every window concurrently (bounded thread pool, per-window retry)
    3. Delete the parent's previous chunks
    4. Upsert all new vectors in one batch

    Nothing is written unless every window embedded successfully. A failed
    upsert is rolled back by deleting whatever was written for the parent.
    """

    def __init__(
        self,
        vector_store: VectorStore,
        embedder: Embedder,
        splitter: TextSplitter | None = None,
        max_concurrent_embeddings: int = 5,
        embed_retries: int = 2,
        locks: ParentLocks | None = None,
    ) -> None:
        """Initialize the ingestor with all required components.

        Args:
            vector_store: Store receiving the chunk vectors
            embedder: Component to embed chunk windows
            splitter: Text splitter; defaults to 1000/200 character windows
            max_concurrent_embeddings: Upper bound on in-flight embedding calls
            embed_retries: Extra attempts per window before ingestion fails
            locks: Per-parent lock registry shared with other ingestors
        """
        self.vector_store = vector_store
        self.embedder = embedder
        self.splitter = splitter or TextSplitter()
        self.max_concurrent_embeddings = max_concurrent_embeddings
        self.embed_retries = embed_retries
        self._locks = locks or ParentLocks()

    def _split(self, parent_id: str, raw_text: str) -> list[str]:
        try:
            windows = self.splitter.split(sanitize_text(raw_text))
        except Exception as e:
            raise IngestionError("split", f"Splitting failed: {e}", parent_id) from e
        if not windows:
            raise IngestionError("split", "Content is empty", parent_id)
        return windows

    def _embed_window(self, text: str) -> list[float]:
        attempt = 0
        while True:
            try:
                return self.embedder.embed_text(text)
            except DimensionMismatchError:
                raise
            except Exception as e:
                attempt += 1
                if attempt > self.embed_retries:
                    raise
                logger.warning(
                    "Embedding attempt %d/%d failed: %s", attempt, self.embed_retries + 1, e
                )

    def _embed_all(
        self,
        parent_id: str,
        windows: list[str],
        progress: ProgressCallback,
    ) -> list[list[float]]:
        total = len(windows)
        progress("embedding", 0, total, f"Embedding {total} chunks...")
        done = 0
        done_lock = threading.Lock()

        def embed(text: str) -> list[float]:
            nonlocal done
            vector = self._embed_window(text)
            with done_lock:
                done += 1
                current = done
            progress("embedding", current, total, f"Embedded {current}/{total} chunks")
            return vector

        workers = max(1, min(self.max_concurrent_embeddings, total))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(embed, text) for text in windows]
            try:
                return [future.result() for future in futures]
            except Exception as e:
                for future in futures:
                    future.cancel()
                raise IngestionError("embed", f"Embedding failed: {e}", parent_id) from e

    def _check_owner(self, parent_id: str, owner_id: str) -> None:
        """Refuse to replace a parent that already belongs to another user."""
        foreign = {"$and": [{"parent_id": parent_id}, {"owner_id": {"$ne": owner_id}}]}
        try:
            taken = self.vector_store.fetch(foreign, limit=1)
        except Exception as e:
            raise IngestionError("store", f"Could not check existing chunks: {e}", parent_id) from e
        if taken:
            raise PermissionDeniedError(f"Content {parent_id!r} belongs to another user")

    def _commit(self, parent_id: str, owner_id: str, vectors: list[EmbeddingVector]) -> None:
        parent = owned_parent_filter(parent_id, owner_id)
        try:
            self.vector_store.delete_by_filter(parent)
        except Exception as e:
            raise IngestionError("store", f"Could not clear old chunks: {e}", parent_id) from e

        try:
            self.vector_store.upsert(vectors)
        except Exception as e:
            try:
                self.vector_store.delete_by_filter(parent)
            except Exception as rollback_error:
                logger.error("Rollback failed for parent %s: %s", parent_id, rollback_error)
            raise IngestionError("store", f"Upsert failed: {e}", parent_id) from e

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
        """Split, embed and index one parent document, replacing any prior version.

        Args:
            parent_id: Stable id of the logical document
            raw_text: The full text to index
            owner_id: User the content belongs to
            categories: Category names (normalized to a lowercase set)
            access: "personal" or "public"
            source_type: "document", "note" or "activity"
            title: Display title used in context formatting and visualization
            on_progress: Optional callback(event, current, total, message)

        Returns:
            IngestResult with the number of chunks written.

        Raises:
            IngestionError: With stage "split", "embed" or "store". Nothing is
                left in the store for the parent's new version on failure.
            PermissionDeniedError: Another user already owns chunks of parent_id.
        """

        def progress(event: str, current: int, total: int, message: str = "") -> None:
            if on_progress:
                on_progress(event, current, total, message)

        with self._locks.for_parent(parent_id):
            self._check_owner(parent_id, owner_id)
            progress("splitting", 0, 1, "Splitting content...")
            windows = self._split(parent_id, raw_text)
            progress("splitting", 1, 1, f"Split into {len(windows)} chunks")

            embeddings = self._embed_all(parent_id, windows, progress)

            now = datetime.now(UTC)
            total = len(windows)
            vectors = []
            for index, (text, values) in enumerate(zip(windows, embeddings, strict=True)):
                record = ContentRecord(
                    id=chunk_id(parent_id, index),
                    parent_id=parent_id,
                    owner_id=owner_id,
                    access=access,
                    categories=categories,
                    text=text,
                    source_type=source_type,
                    title=title,
                    created_at=now,
                    updated_at=now,
                    chunk_index=index,
                    total_chunks=total,
                    is_first_chunk=index == 0,
                )
                vectors.append(
                    EmbeddingVector(id=record.id, values=values, metadata=record.to_metadata())
                )

            progress("storing", 0, 1, f"Storing {total} chunks...")
            self._commit(parent_id, owner_id, vectors)
            progress("storing", 1, 1, "Storing complete")

        log_with_context(
            logger, logging.INFO, "Ingested content", parent_id=parent_id, chunks=total
        )
        return IngestResult(parent_id=parent_id, chunk_count=total)

    async def aingest(
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
        """Ingest without blocking the event loop. See ingest()."""
        return await asyncio.to_thread(
            self.ingest,
            parent_id,
            raw_text,
            owner_id,
            categories,
            access,
            source_type,
            title,
            on_progress,
        )

    def delete(self, parent_id: str, owner_id: str) -> IngestResult:
        """Delete every chunk of a parent owned by owner_id."""
        with self._locks.for_parent(parent_id):
            self.vector_store.delete_by_filter(owned_parent_filter(parent_id, owner_id))
        log_with_context(logger, logging.INFO, "Deleted content", parent_id=parent_id)
        return IngestResult(parent_id=parent_id, chunk_count=0, status="deleted")
