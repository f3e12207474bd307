# src/ubumuntu/models/__init__.py
"""Data models for Ubumuntu."""

from ubumuntu.models.agent import AgentConfig, Capability, PerformanceMetrics
from ubumuntu.models.chain import ChainRun, RunStatus, StepResult, StepStatus
from ubumuntu.models.content import (
    AccessLevel,
    ContentRecord,
    EmbeddingVector,
    SourceType,
    VectorMatch,
    chunk_id,
    normalize_tags,
)
from ubumuntu.models.results import (
    ChatMessage,
    IngestResult,
    QueryResponse,
    RetrievalResult,
    ScoredRecord,
    VisualizationPoint,
)

__all__ = [
    "AccessLevel",
    "AgentConfig",
    "Capability",
    "ChainRun",
    "ChatMessage",
    "ContentRecord",
    "EmbeddingVector",
    "IngestResult",
    "PerformanceMetrics",
    "QueryResponse",
    "RetrievalResult",
    "RunStatus",
    "ScoredRecord",
    "SourceType",
    "StepResult",
    "StepStatus",
    "VectorMatch",
    "VisualizationPoint",
    "chunk_id",
    "normalize_tags",
]
