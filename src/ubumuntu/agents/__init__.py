# src/ubumuntu/agents/__init__.py
"""Agent composition and chain execution for Ubumuntu."""

from ubumuntu.agents.chain import ChainLauncher
from ubumuntu.agents.composer import AgentComposer, AgentResolver, merge_capabilities
from ubumuntu.agents.executor import AgentExecutor, RetrievalAgentExecutor

__all__ = [
    "AgentComposer",
    "AgentExecutor",
    "AgentResolver",
    "ChainLauncher",
    "RetrievalAgentExecutor",
    "merge_capabilities",
]
