# src/ubumuntu/commands/base.py
"""Base types for the commands layer.

This module defines the data structures used by all commands:
- Progress callbacks for long-running operations
- Confirmation callbacks for destructive commands
- Result types for each command

Results carry a stable ``error_code`` and a human-readable ``error`` but
never a stack trace.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ubumuntu.exceptions import UbumuntuError


class CommandStage(Enum):
    """Stages of command execution for progress reporting."""

    # Ingest stages
    SPLITTING = "Splitting"
    EMBEDDING = "Embedding"
    STORING = "Storing"

    # General stages
    PROCESSING = "Processing"
    COMPLETE = "Complete"


@dataclass
class ProgressUpdate:
    """Progress update for long-running operations.

    Attributes:
        stage: Current stage of the operation
        current: Current item number
        total: Total number of items (0 for indeterminate)
        message: Optional status message
    """

    stage: CommandStage
    current: int
    total: int
    message: str | None = None

    @property
    def is_indeterminate(self) -> bool:
        """True if progress is indeterminate (total unknown)."""
        return self.total == 0


# Callback type for progress updates
ProgressCallback = Callable[[ProgressUpdate], None]


@dataclass
class ConfirmRequest:
    """Request for a yes/no confirmation before a destructive action."""

    message: str
    details: str | None = None


# Callback type for confirmations - returns True to proceed
ConfirmCallback = Callable[[ConfirmRequest], bool]


@dataclass
class CommandResult:
    """Base result type for commands."""

    success: bool
    error: str | None = None
    error_code: str | None = None


def error_fields(error: Exception) -> dict[str, Any]:
    """Result fields describing a failure, without internal detail."""
    if isinstance(error, UbumuntuError):
        return {"success": False, "error": error.message, "error_code": error.code}
    return {
        "success": False,
        "error": f"{type(error).__name__}: {error}",
        "error_code": "internal",
    }


@dataclass
class FileIngestResult:
    """Result for a single file ingestion."""

    filepath: str
    parent_id: str
    chunks: int = 0
    error: str | None = None


@dataclass
class IngestResult(CommandResult):
    """Result of the ingest command.

    Attributes:
        files_processed: Number of files successfully indexed
        files_failed: Number of files that failed
        total_chunks: Total chunks written
        file_results: Per-file results
        errors: List of (filepath, error_message) for failed files
    """

    files_processed: int = 0
    files_failed: int = 0
    total_chunks: int = 0
    file_results: list[FileIngestResult] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class SearchResult:
    """A single search result."""

    parent_id: str
    title: str
    source_type: str
    content: str
    score: float
    chunk_id: str | None = None


@dataclass
class QueryResult(CommandResult):
    """Result of the query command.

    Attributes:
        query: The original query
        clarified_query: The query actually searched first
        answer: Synthesized answer (None in raw mode or without results)
        results: Retrieved chunks with scores
    """

    query: str = ""
    clarified_query: str | None = None
    answer: str | None = None
    results: list[SearchResult] = field(default_factory=list)


@dataclass
class DeleteResult(CommandResult):
    """Result of the delete command."""

    parent_id: str = ""
    chunks_deleted: int = 0


@dataclass
class AgentInfo:
    """Summary of a stored agent."""

    agent_id: str
    name: str
    category: str
    owner_id: str
    is_public: bool
    categories: list[str] = field(default_factory=list)
    parent_agent_ids: list[str] = field(default_factory=list)


@dataclass
class AgentResult(CommandResult):
    """Result of creating or remixing an agent."""

    agent: AgentInfo | None = None


@dataclass
class AgentListResult(CommandResult):
    """Result of listing the agents a user can see."""

    agents: list[AgentInfo] = field(default_factory=list)


@dataclass
class StepInfo:
    """Outcome of one chain step."""

    index: int
    agent_id: str
    status: str
    output: Any = None
    error: str | None = None
    duration_ms: float | None = None


@dataclass
class ChainResult(CommandResult):
    """Result of the chain command.

    ``success`` reports whether the chain could run at all; individual step
    failures are in ``steps`` and ``status``.
    """

    run_id: str = ""
    status: str = ""
    success_rate: float = 0.0
    steps: list[StepInfo] = field(default_factory=list)


@dataclass
class PointInfo:
    """A projected vector ready for plotting."""

    x: float
    y: float
    z: float
    source_type: str
    source_id: str
    title: str
    preview: str


@dataclass
class VisualizeResult(CommandResult):
    """Result of the visualize command."""

    points: list[PointInfo] = field(default_factory=list)
    output_path: str | None = None


@dataclass
class SettingInfo:
    """Information about a single setting."""

    name: str
    value: str
    source: str  # "env var", "yaml", "default"


@dataclass
class ConfigResult(CommandResult):
    """Result of the config command.

    Attributes:
        provider: Provider type
        llm_model: LLM model name
        embedding_model: Embedding model name
        data_dir: Data directory path
        settings: Behavioral settings with their sources
        config_path: Path to config file (if found)
        warnings: Unknown keys found in the config file
    """

    provider: str = "litellm"
    llm_model: str | None = None
    embedding_model: str | None = None
    data_dir: str = ""
    settings: list[SettingInfo] = field(default_factory=list)
    config_path: str | None = None
    warnings: list[str] = field(default_factory=list)
