# src/ubumuntu/models/content.py
"""Content and vector data models."""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

AccessLevel = Literal["public", "personal"]
SourceType = Literal["document", "note", "activity"]


def normalize_tags(values: Iterable[str] | str | None) -> set[str]:
    """Lowercase and trim tag-like values, dropping blanks.

    Accepts every shape a category field has been seen in: a list/set of
    strings, a comma separated string, or a JSON-encoded list.
    """
    if values is None:
        return set()
    if isinstance(values, str):
        text = values.strip()
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                decoded = None
            if isinstance(decoded, list):
                return normalize_tags(str(v) for v in decoded)
        return {part.strip().lower() for part in text.split(",") if part.strip()}
    return {str(v).strip().lower() for v in values if str(v).strip()}


def chunk_id(parent_id: str, chunk_index: int) -> str:
    """Build the vector id of one chunk of a parent."""
    return f"{parent_id}-{chunk_index}"


def _to_epoch(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.timestamp()


def _from_epoch(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return datetime.fromtimestamp(float(value), tz=UTC)


class ContentRecord(BaseModel):
    """One chunk of a logical document, note or activity."""

    id: str
    parent_id: str
    owner_id: str
    access: AccessLevel = "personal"
    categories: set[str] = Field(default_factory=set)
    text: str
    source_type: SourceType = "document"
    title: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    chunk_index: int = Field(default=0, ge=0)
    total_chunks: int = Field(default=1, ge=1)
    is_first_chunk: bool = True

    @field_validator("categories", mode="before")
    @classmethod
    def _normalize_categories(cls, value: Any) -> set[str]:
        return normalize_tags(value)

    @model_validator(mode="after")
    def _check_chunk_position(self) -> ContentRecord:
        if self.chunk_index >= self.total_chunks:
            raise ValueError(
                f"chunk_index ({self.chunk_index}) must be less than "
                f"total_chunks ({self.total_chunks})"
            )
        if self.is_first_chunk != (self.chunk_index == 0):
            raise ValueError("is_first_chunk must be true exactly for chunk_index 0")
        return self

    def to_metadata(self) -> dict[str, Any]:
        """Flatten into the canonical vector-store metadata document."""
        return {
            "parent_id": self.parent_id,
            "owner_id": self.owner_id,
            "access": self.access,
            "categories": sorted(self.categories),
            "text": self.text,
            "source_type": self.source_type,
            "title": self.title,
            "created_at": _to_epoch(self.created_at),
            "updated_at": _to_epoch(self.updated_at),
            "chunk_index": self.chunk_index,
            "total_chunks": self.total_chunks,
            "is_first_chunk": self.is_first_chunk,
        }

    @classmethod
    def from_metadata(cls, record_id: str, metadata: dict[str, Any]) -> ContentRecord:
        """Rebuild a record from a vector-store metadata document."""
        chunk_index = int(metadata.get("chunk_index", 0))
        return cls(
            id=record_id,
            parent_id=str(metadata.get("parent_id", record_id)),
            owner_id=str(metadata.get("owner_id", "")),
            access=metadata.get("access", "personal"),
            categories=metadata.get("categories"),
            text=str(metadata.get("text", "")),
            source_type=metadata.get("source_type", "document"),
            title=str(metadata.get("title", "")),
            created_at=_from_epoch(metadata.get("created_at", 0.0)),
            updated_at=_from_epoch(metadata.get("updated_at", 0.0)),
            chunk_index=chunk_index,
            total_chunks=int(metadata.get("total_chunks", chunk_index + 1)),
            is_first_chunk=chunk_index == 0,
        )


class EmbeddingVector(BaseModel):
    """A vector paired with the metadata of the record it embeds."""

    id: str
    values: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)


class VectorMatch(BaseModel):
    """A single hit returned by a vector store query or fetch."""

    id: str
    score: float = 0.0
    metadata: dict[str, Any] = Field(default_factory=dict)
    values: list[float] | None = None
