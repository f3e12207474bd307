# src/ubumuntu/models/results.py
"""Result data models for Ubumuntu queries."""

from typing import Literal

from pydantic import BaseModel

from ubumuntu.models.content import ContentRecord, SourceType


class ChatMessage(BaseModel):
    """One turn of chat history."""

    role: Literal["user", "assistant", "system"]
    content: str


class ScoredRecord(BaseModel):
    """A retrieved record with its similarity score."""

    record: ContentRecord
    score: float


class RetrievalResult(BaseModel):
    """Outcome of the two-phase (clarified, then original) retrieval."""

    original_query: str
    clarified_query: str
    query_used: str
    results: list[ScoredRecord]

    @property
    def records(self) -> list[ContentRecord]:
        return [r.record for r in self.results]


class QueryResponse(BaseModel):
    """Full response to a user query."""

    query: str
    clarified_query: str
    answer: str | None
    results: list[ScoredRecord]


class VisualizationPoint(BaseModel):
    """A 3-D point for one embedded record. Derived, never persisted."""

    x: float
    y: float
    z: float
    source_type: SourceType
    source_id: str
    title: str = "Untitled"
    preview: str = ""


class IngestResult(BaseModel):
    """Outcome of ingesting one parent document."""

    parent_id: str
    chunk_count: int
    status: Literal["indexed", "deleted"] = "indexed"
