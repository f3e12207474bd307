# src/ubumuntu/stores/memory.py
"""In-process vector store backed by numpy."""

import threading

import numpy as np

from ubumuntu.models import EmbeddingVector, VectorMatch
from ubumuntu.stores.base import VectorStore
from ubumuntu.stores.filters import Filter, matches, validate_filter


class InMemoryVectorStore(VectorStore):
    """Vector store that keeps everything in a dict and scores with cosine similarity.

    Suitable for tests and single-process use. Filters are evaluated with the
    same grammar as the persistent stores.
    """

    def __init__(self, dimensions: int = 768) -> None:
        self.dimensions = dimensions
        self._vectors: dict[str, np.ndarray] = {}
        self._metadata: dict[str, dict] = {}
        self._lock = threading.Lock()

    def upsert(self, vectors: list[EmbeddingVector]) -> None:
        """Insert or replace vectors by id."""
        for vec in vectors:
            self._check_dimensions(vec.values)
        with self._lock:
            for vec in vectors:
                self._vectors[vec.id] = np.asarray(vec.values, dtype=float)
                self._metadata[vec.id] = dict(vec.metadata)

    def query(
        self,
        vector: list[float],
        top_k: int = 5,
        filter: Filter | None = None,
        include_vectors: bool = False,
    ) -> list[VectorMatch]:
        """Return the top_k most similar vectors matching the filter."""
        self._check_dimensions(vector)
        validate_filter(filter)
        if top_k <= 0:
            return []

        query = np.asarray(vector, dtype=float)
        query_norm = np.linalg.norm(query) or 1.0

        with self._lock:
            candidates = [
                (vid, values, self._metadata[vid])
                for vid, values in self._vectors.items()
                if matches(filter, self._metadata[vid])
            ]

        scored = []
        for vid, values, meta in candidates:
            norm = np.linalg.norm(values) or 1.0
            score = float(np.dot(query, values) / (query_norm * norm))
            scored.append((score, vid, values, meta))
        scored.sort(key=lambda item: item[0], reverse=True)

        return [
            VectorMatch(
                id=vid,
                score=score,
                metadata=dict(meta),
                values=values.tolist() if include_vectors else None,
            )
            for score, vid, values, meta in scored[:top_k]
        ]

    def delete_by_filter(self, filter: Filter) -> None:
        """Delete every vector whose metadata matches the filter."""
        validate_filter(filter)
        with self._lock:
            doomed = [vid for vid, meta in self._metadata.items() if matches(filter, meta)]
            for vid in doomed:
                del self._vectors[vid]
                del self._metadata[vid]

    def fetch(
        self,
        filter: Filter | None = None,
        limit: int | None = None,
        include_vectors: bool = False,
    ) -> list[VectorMatch]:
        """List stored vectors matching the filter in insertion order."""
        validate_filter(filter)
        with self._lock:
            found = [
                VectorMatch(
                    id=vid,
                    metadata=dict(meta),
                    values=self._vectors[vid].tolist() if include_vectors else None,
                )
                for vid, meta in self._metadata.items()
                if matches(filter, meta)
            ]
        return found if limit is None else found[:limit]

    def count(self) -> int:
        """Count the total number of vectors in the store."""
        with self._lock:
            return len(self._vectors)
