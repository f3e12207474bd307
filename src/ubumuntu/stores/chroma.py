# src/ubumuntu/stores/chroma.py
"""ChromaDB vector store implementation."""

import json
from pathlib import Path
from typing import Any

import chromadb

from ubumuntu.exceptions import InvalidFilterError, StoreUnavailable
from ubumuntu.logging_config import get_logger
from ubumuntu.models import EmbeddingVector, VectorMatch
from ubumuntu.stores.base import VectorStore
from ubumuntu.stores.filters import CATEGORY_FIELD, Filter, validate_filter

logger = get_logger(__name__)

CATEGORY_PREFIX = "cat:"


def encode_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    """Flatten a metadata document into Chroma's scalar-only form.

    Categories become one boolean ``cat:<name>`` key per category (so they can
    be filtered) plus a JSON copy under ``categories``. None values are dropped.
    """
    encoded: dict[str, Any] = {}
    for key, value in metadata.items():
        if value is None:
            continue
        if key == CATEGORY_FIELD:
            names = sorted(value) if not isinstance(value, str) else [value]
            encoded[key] = json.dumps(names)
            for name in names:
                encoded[f"{CATEGORY_PREFIX}{name}"] = True
        elif isinstance(value, list | tuple | set | dict):
            encoded[key] = json.dumps(sorted(value) if isinstance(value, set) else value)
        else:
            encoded[key] = value
    return encoded


def decode_metadata(metadata: dict[str, Any] | None) -> dict[str, Any]:
    """Inverse of encode_metadata: categories come back as a sorted list."""
    if not metadata:
        return {}
    decoded: dict[str, Any] = {}
    categories: set[str] = set()
    for key, value in metadata.items():
        if key.startswith(CATEGORY_PREFIX):
            if value:
                categories.add(key[len(CATEGORY_PREFIX) :])
        elif key != CATEGORY_FIELD:
            decoded[key] = value
    decoded[CATEGORY_FIELD] = sorted(categories)
    return decoded


def to_chroma_where(where: Filter | None) -> dict[str, Any] | None:
    """Translate the shared filter grammar into a Chroma ``where`` clause."""
    if not where:
        return None
    validate_filter(where)

    clauses: list[dict[str, Any]] = []
    for key, value in where.items():
        if key in ("$and", "$or"):
            sub = [c for c in (to_chroma_where(clause) for clause in value) if c]
            clauses.append(sub[0] if len(sub) == 1 else {key: sub})
        elif key == CATEGORY_FIELD:
            clauses.append(_category_clause(value))
        elif isinstance(value, dict):
            op, operand = next(iter(value.items()))
            if op in ("$in", "$nin"):
                operand = list(operand)
            clauses.append({key: {op: operand}})
        else:
            clauses.append({key: {"$eq": value}})

    return clauses[0] if len(clauses) == 1 else {"$and": clauses}


def _category_clause(value: Any) -> dict[str, Any]:
    op, operand = next(iter(value.items())) if isinstance(value, dict) else ("$eq", value)
    if op == "$eq":
        return {f"{CATEGORY_PREFIX}{str(operand).strip().lower()}": True}
    if op == "$in":
        names = sorted({str(v).strip().lower() for v in operand})
        flags: list[dict[str, Any]] = [{f"{CATEGORY_PREFIX}{n}": True} for n in names]
        return flags[0] if len(flags) == 1 else {"$or": flags}
    # Chroma cannot express "key absent", which negated membership needs.
    raise InvalidFilterError(f"{op} on {CATEGORY_FIELD} is not supported by the Chroma store")


class ChromaVectorStore(VectorStore):
    """ChromaDB-based vector store using cosine space."""

    def __init__(
        self,
        persist_dir: str,
        collection_name: str = "ubumuntu",
        dimensions: int = 768,
    ) -> None:
        """Initialize the ChromaDB store."""
        Path(persist_dir).mkdir(parents=True, exist_ok=True)
        self.dimensions = dimensions
        self._client = chromadb.PersistentClient(path=persist_dir)
        self._collection = self._client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"},
        )

    def close(self) -> None:
        """Close the store and release resources.

        ChromaDB doesn't have an official close method, so we call the internal
        _system.stop() to release file handles. This is necessary to avoid
        'too many open files' errors in test suites.

        See: https://github.com/chroma-core/chroma/issues/5868
        """
        self._collection = None  # type: ignore[assignment]

        try:
            if self._client is not None and hasattr(self._client, "_system"):
                self._client._system.stop()
        except Exception as e:
            logger.debug("Ignoring error while stopping Chroma client: %s", e)

        self._client = None  # type: ignore[assignment]

    def upsert(self, vectors: list[EmbeddingVector]) -> None:
        """Insert or replace vectors by id."""
        if not vectors:
            return
        for vec in vectors:
            self._check_dimensions(vec.values)

        try:
            self._collection.upsert(
                ids=[v.id for v in vectors],
                embeddings=[v.values for v in vectors],  # type: ignore[arg-type]
                metadatas=[encode_metadata(v.metadata) for v in vectors],  # type: ignore[misc]
            )
        except Exception as e:
            raise StoreUnavailable(f"Chroma upsert failed: {e}") from e

    def query(
        self,
        vector: list[float],
        top_k: int = 5,
        filter: Filter | None = None,
        include_vectors: bool = False,
    ) -> list[VectorMatch]:
        """Search for the top_k most similar vectors matching the filter."""
        self._check_dimensions(vector)
        where = to_chroma_where(filter)
        if top_k <= 0:
            return []

        include = ["metadatas", "distances"]
        if include_vectors:
            include.append("embeddings")

        try:
            total = self._collection.count()
            if total == 0:
                return []
            results = self._collection.query(
                query_embeddings=[vector],  # type: ignore[arg-type]
                n_results=min(top_k, total),
                where=where,  # type: ignore[arg-type]
                include=include,  # type: ignore[arg-type]
            )
        except Exception as e:
            raise StoreUnavailable(f"Chroma query failed: {e}") from e

        ids = results["ids"][0]
        metadatas = results["metadatas"][0]  # type: ignore[index]
        distances = results["distances"][0]  # type: ignore[index]
        embeddings = results.get("embeddings")
        values = embeddings[0] if include_vectors and embeddings is not None else None

        matches = []
        for i, (vid, meta, dist) in enumerate(zip(ids, metadatas, distances, strict=True)):
            # For cosine distance: similarity = 1 - distance
            matches.append(
                VectorMatch(
                    id=vid,
                    score=1.0 - float(dist),
                    metadata=decode_metadata(meta),  # type: ignore[arg-type]
                    values=[float(x) for x in values[i]] if values is not None else None,
                )
            )
        return matches

    def delete_by_filter(self, filter: Filter) -> None:
        """Delete every vector whose metadata matches the filter."""
        where = to_chroma_where(filter)
        if where is None:
            raise InvalidFilterError("delete_by_filter requires a non-empty filter")
        try:
            self._collection.delete(where=where)  # type: ignore[arg-type]
        except Exception as e:
            raise StoreUnavailable(f"Chroma delete failed: {e}") from e

    def fetch(
        self,
        filter: Filter | None = None,
        limit: int | None = None,
        include_vectors: bool = False,
    ) -> list[VectorMatch]:
        """List stored vectors matching the filter."""
        where = to_chroma_where(filter)
        include = ["metadatas"]
        if include_vectors:
            include.append("embeddings")

        try:
            results = self._collection.get(
                where=where,  # type: ignore[arg-type]
                limit=limit,
                include=include,  # type: ignore[arg-type]
            )
        except Exception as e:
            raise StoreUnavailable(f"Chroma fetch failed: {e}") from e

        ids = results["ids"]
        metadatas = results["metadatas"] or [None] * len(ids)
        embeddings = results.get("embeddings")
        if not include_vectors or embeddings is None:
            embeddings = [None] * len(ids)

        return [
            VectorMatch(
                id=vid,
                metadata=decode_metadata(meta),  # type: ignore[arg-type]
                values=[float(x) for x in emb] if emb is not None else None,
            )
            for vid, meta, emb in zip(ids, metadatas, embeddings, strict=True)
        ]

    def count(self) -> int:
        """Count the total number of vectors in the store."""
        try:
            return self._collection.count()
        except Exception as e:
            raise StoreUnavailable(f"Chroma count failed: {e}") from e
