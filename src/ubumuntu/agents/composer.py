# src/ubumuntu/agents/composer.py
"""Deterministic composition ("remix") of agents into a composite agent."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ubumuntu.exceptions import CompositionError
from ubumuntu.logging_config import get_logger, log_with_context
from ubumuntu.models import AgentConfig, Capability, PerformanceMetrics

logger = get_logger(__name__)

AgentResolver = Callable[[str], AgentConfig | None]
"""Look up an agent by id, returning None when it is unknown."""

DESCRIPTION_PREFIX = "Composite agent combining: "


def merge_capabilities(sources: Sequence[AgentConfig]) -> list[Capability]:
    """Merge same-named capabilities across agents, in first-seen order.

    Proficiency takes the maximum, usage counts add up, and the success rate
    is weighted by usage (a plain mean when nobody has used the capability).
    Domains and prerequisites are unions; the first-seen type wins.
    """
    grouped: dict[str, list[Capability]] = {}
    for agent in sources:
        for capability in agent.capabilities:
            grouped.setdefault(capability.name, []).append(capability)

    merged = []
    for name, group in grouped.items():
        total_usage = sum(c.usage_count for c in group)
        if total_usage > 0:
            success_rate = sum(c.success_rate * c.usage_count for c in group) / total_usage
        else:
            success_rate = sum(c.success_rate for c in group) / len(group)
        merged.append(
            Capability(
                name=name,
                type=group[0].type,
                proficiency_level=max(c.proficiency_level for c in group),
                domains=set().union(*(c.domains for c in group)),
                prerequisites=set().union(*(c.prerequisites for c in group)),
                usage_count=total_usage,
                success_rate=min(1.0, max(0.0, success_rate)),
            )
        )
    return merged


def _distinct_lines(values: Sequence[str]) -> str:
    seen: list[str] = []
    for value in values:
        for line in value.splitlines():
            text = line.strip()
            if text and text not in seen:
                seen.append(text)
    return "\n".join(seen)


class AgentComposer:
    """Combine two or more agents into a new composite agent.

    Composition is purely deterministic: the same ordered list of sources
    always produces the same name, description, categories, capabilities and
    parent list. No model is consulted.
    """

    def __init__(self, resolve_agent: AgentResolver | None = None) -> None:
        """Initialize the composer.

        Args:
            resolve_agent: Default lookup used to follow ancestry during cycle checks
        """
        self.resolve_agent = resolve_agent

    def _check_sources(self, sources: Sequence[AgentConfig]) -> None:
        if len(sources) < 2:
            raise CompositionError(
                "insufficient_agents",
                f"At least two agents are required to compose, got {len(sources)}",
            )
        seen: set[str] = set()
        for agent in sources:
            if agent.agent_id in seen:
                raise CompositionError(
                    "duplicate_source", f"Agent {agent.agent_id} appears more than once"
                )
            seen.add(agent.agent_id)

    def _check_cycles(
        self, sources: Sequence[AgentConfig], resolve_agent: AgentResolver | None
    ) -> None:
        known = {a.agent_id: a for a in sources}

        def lookup(agent_id: str) -> AgentConfig | None:
            if agent_id in known:
                return known[agent_id]
            found = resolve_agent(agent_id) if resolve_agent else None
            if found is not None:
                known[agent_id] = found
            return found

        done: set[str] = set()

        def visit(agent_id: str, path: list[str]) -> None:
            if agent_id in path:
                cycle = " -> ".join([*path[path.index(agent_id) :], agent_id])
                raise CompositionError("cycle", f"Agent ancestry contains a cycle: {cycle}")
            if agent_id in done:
                return
            agent = lookup(agent_id)
            if agent is not None:
                for parent_id in agent.parent_agent_ids:
                    visit(parent_id, [*path, agent_id])
            done.add(agent_id)

        for agent in sources:
            visit(agent.agent_id, [])

    def compose(
        self,
        source_agents: Sequence[AgentConfig],
        requested_by: str,
        *,
        is_public: bool = False,
        resolve_agent: AgentResolver | None = None,
    ) -> AgentConfig:
        """Build a composite agent from an ordered list of sources.

        Args:
            source_agents: Agents to combine, in priority order
            requested_by: User who will own the composite
            is_public: Publish the composite (private unless asked for)
            resolve_agent: Lookup for ancestry beyond the given sources

        Returns:
            A new AgentConfig whose parent_agent_ids are the sources in order.

        Raises:
            CompositionError: "insufficient_agents", "duplicate_source" or "cycle".
        """
        sources = list(source_agents)
        self._check_sources(sources)
        self._check_cycles(sources, resolve_agent or self.resolve_agent)

        names = [a.name for a in sources]
        description_lines = [DESCRIPTION_PREFIX + ", ".join(names)]
        description_lines.extend(
            f"- {a.name}: {a.description.strip()}" for a in sources if a.description.strip()
        )

        categories: set[str] = set()
        for agent in sources:
            categories |= agent.all_categories()

        composite = AgentConfig(
            name=" + ".join(names),
            description="\n".join(description_lines),
            category=sources[0].category,
            categories=categories,
            use_cases=_distinct_lines([a.use_cases for a in sources]),
            triggers=set().union(*(a.triggers for a in sources)),
            is_public=is_public,
            owner_id=requested_by,
            parent_agent_ids=[a.agent_id for a in sources],
            selected_context_ids=set().union(*(a.selected_context_ids for a in sources)),
            capabilities=merge_capabilities(sources),
            tools=set().union(*(a.tools for a in sources)),
            performance_metrics=PerformanceMetrics(),
        )

        log_with_context(
            logger,
            logging.INFO,
            "Composed agent",
            agent_id=composite.agent_id,
            sources=len(sources),
            owner=requested_by,
        )
        return composite
