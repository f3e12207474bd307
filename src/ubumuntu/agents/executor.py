# src/ubumuntu/agents/executor.py
"""Agent executors: how a single agent turns an input into an output."""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any

from ubumuntu.logging_config import get_logger
from ubumuntu.models import AgentConfig
from ubumuntu.providers.base import LLMClient
from ubumuntu.retriever import Retriever, format_context

logger = get_logger(__name__)

AGENT_SYSTEM_PROMPT = """You are {name}, an AI assistant specializing in {category}.
Your task is to provide accurate, data-driven responses based on the available context.

{description}
{use_cases}{capabilities}{tools}
CONTEXT INFORMATION:
{context}

CRITICAL RULES:
1. Base your answer on the context above and say so when it is insufficient
2. Keep the response focused on the {category} domain
3. Make the response specific and actionable"""


class AgentExecutor(ABC):
    """Abstract base class for running one agent on one input.

    Example:
        class EchoExecutor(AgentExecutor):
            def run(self, agent, input):
                return {"agent_id": agent.agent_id, "response": input["question"]}
    """

    @abstractmethod
    def run(self, agent: AgentConfig, input: dict[str, Any]) -> Any:
        """Execute the agent and return its output.

        Args:
            agent: The agent to run
            input: Dict with at least a "question" key and an optional "context" dict

        Raises:
            Any exception; the chain launcher records it as a failed step.
        """
        ...

    async def arun(self, agent: AgentConfig, input: dict[str, Any]) -> Any:
        """Execute the agent (async).

        Default implementation runs the sync run() in a worker thread.
        Override in subclasses for true async behavior.
        """
        return await asyncio.to_thread(self.run, agent, input)


def build_system_prompt(agent: AgentConfig, context: str) -> str:
    """Describe an agent to the generative model."""
    use_cases = f"Use cases:\n{agent.use_cases}\n" if agent.use_cases else ""
    capabilities = ""
    if agent.capabilities:
        lines = "\n".join(
            f"- {c.name} ({c.type}, proficiency {c.proficiency_level:.0%})"
            for c in agent.capabilities
        )
        capabilities = f"Capabilities:\n{lines}\n"
    tools = f"Tools: {', '.join(sorted(agent.tools))}\n" if agent.tools else ""
    return AGENT_SYSTEM_PROMPT.format(
        name=agent.name,
        category=agent.category,
        description=agent.description,
        use_cases=use_cases,
        capabilities=capabilities,
        tools=tools,
        context=context,
    )


def retrieval_scope(agent: AgentConfig, requested_by: str | None = None) -> dict[str, Any]:
    """Retriever arguments for running an agent on behalf of a user.

    Retrieval always runs as the requesting user (the owner when nobody is
    given), so a public agent never exposes its owner's personal records to
    others. An agent with selected contexts searches only those parents; for
    anyone but the owner only their public records. Otherwise it searches by
    category.
    """
    user_id = requested_by or agent.owner_id
    if agent.selected_context_ids:
        return {
            "owner_id": user_id,
            "access_scope": "all" if user_id == agent.owner_id else "public",
            "context_ids": sorted(agent.selected_context_ids),
        }
    return {"owner_id": user_id, "category_filter": sorted(agent.categories) or None}


class RetrievalAgentExecutor(AgentExecutor):
    """Run an agent by retrieving context and asking the LLM.

    The requesting user is read from ``input["context"]["requested_by"]``;
    without it the agent runs on behalf of its owner. See retrieval_scope().
    """

    def __init__(
        self,
        retriever: Retriever,
        llm_client: LLMClient,
        temperature: float | None = 0.7,
        max_tokens: int | None = 2048,
        top_k: int | None = None,
    ) -> None:
        self.retriever = retriever
        self.llm_client = llm_client
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_k = top_k

    def run(self, agent: AgentConfig, input: dict[str, Any]) -> dict[str, Any]:
        question = str(input.get("question", "")).strip()
        if not question:
            raise ValueError("Agent input must contain a non-empty 'question'")

        requested_by = (input.get("context") or {}).get("requested_by")
        start = time.perf_counter()
        results = self.retriever.retrieve_scored(
            question, top_k=self.top_k, **retrieval_scope(agent, requested_by)
        )
        messages = [
            {"role": "system", "content": build_system_prompt(agent, format_context(results))},
            {"role": "user", "content": question},
        ]
        response = self.llm_client.complete(
            messages, temperature=self.temperature, max_tokens=self.max_tokens
        )
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("Agent %s answered in %.0fms", agent.agent_id, elapsed_ms)

        return {
            "agent_id": agent.agent_id,
            "response": response.strip(),
            "context_used": len(results),
            "response_time_ms": elapsed_ms,
        }
