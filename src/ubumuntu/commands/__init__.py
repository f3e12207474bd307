# src/ubumuntu/commands/__init__.py
"""UI-agnostic command layer for Ubumuntu.

Commands return data structures, allowing UIs to render results appropriately.

Usage:
    from ubumuntu.commands import ingest, query
    from ubumuntu.identity import EnvIdentityProvider

    identity = EnvIdentityProvider()
    result = ingest.ingest("./notes", identity)
    result = query.query("What did I decide about pricing?", identity)
"""

# Import command modules for easy access
from ubumuntu.commands import agents, chain, config_cmd, delete, ingest, query, visualize
from ubumuntu.commands.base import (
    AgentInfo,
    AgentListResult,
    AgentResult,
    ChainResult,
    CommandResult,
    CommandStage,
    ConfigResult,
    ConfirmCallback,
    ConfirmRequest,
    DeleteResult,
    FileIngestResult,
    IngestResult,
    PointInfo,
    ProgressCallback,
    ProgressUpdate,
    QueryResult,
    SearchResult,
    SettingInfo,
    StepInfo,
    VisualizeResult,
)

__all__ = [
    # Base types
    "CommandStage",
    "ProgressUpdate",
    "ProgressCallback",
    "ConfirmRequest",
    "ConfirmCallback",
    "CommandResult",
    # Result types
    "IngestResult",
    "FileIngestResult",
    "QueryResult",
    "SearchResult",
    "DeleteResult",
    "AgentInfo",
    "AgentResult",
    "AgentListResult",
    "ChainResult",
    "StepInfo",
    "VisualizeResult",
    "PointInfo",
    "ConfigResult",
    "SettingInfo",
    # Command modules
    "agents",
    "chain",
    "config_cmd",
    "delete",
    "ingest",
    "query",
    "visualize",
]
