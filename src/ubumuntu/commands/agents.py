# src/ubumuntu/commands/agents.py
"""Agent commands - create, list and remix agents.

These only touch the agent store, so no model provider is required.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from ubumuntu.agents import AgentComposer
from ubumuntu.commands.base import AgentInfo, AgentListResult, AgentResult, error_fields
from ubumuntu.config import AGENTS_DB, DEFAULT_DATA_DIR, load_config
from ubumuntu.exceptions import UbumuntuError
from ubumuntu.identity import IdentityProvider, require_user_id
from ubumuntu.models import AgentConfig
from ubumuntu.stores import AgentStore, SQLiteAgentStore


def agent_info(agent: AgentConfig) -> AgentInfo:
    """Summarize an agent for display."""
    return AgentInfo(
        agent_id=agent.agent_id,
        name=agent.name,
        category=agent.category,
        owner_id=agent.owner_id,
        is_public=agent.is_public,
        categories=sorted(agent.categories),
        parent_agent_ids=list(agent.parent_agent_ids),
    )


def _agent_store(data_dir: str | None, config_path: str | Path | None) -> AgentStore:
    config = load_config(config_path)
    effective_data_dir = data_dir or config.get("data_dir") or DEFAULT_DATA_DIR
    os.makedirs(effective_data_dir, exist_ok=True)
    return SQLiteAgentStore(os.path.join(effective_data_dir, AGENTS_DB))


def create_agent(
    identity: IdentityProvider,
    name: str,
    category: str,
    description: str = "",
    categories: Iterable[str] | None = None,
    use_cases: str = "",
    tools: Iterable[str] | None = None,
    context_ids: Iterable[str] | None = None,
    is_public: bool = False,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> AgentResult:
    """Create and store a new agent owned by the current user."""
    try:
        store = _agent_store(data_dir, config_path)
    except Exception as e:
        return AgentResult(**error_fields(e))
    return create_agent_in_store(
        store,
        identity,
        name=name,
        category=category,
        description=description,
        categories=categories,
        use_cases=use_cases,
        tools=tools,
        context_ids=context_ids,
        is_public=is_public,
    )


def create_agent_in_store(
    store: AgentStore,
    identity: IdentityProvider,
    name: str,
    category: str,
    description: str = "",
    categories: Iterable[str] | None = None,
    use_cases: str = "",
    tools: Iterable[str] | None = None,
    context_ids: Iterable[str] | None = None,
    is_public: bool = False,
) -> AgentResult:
    """Create an agent using an existing store. See create_agent()."""
    try:
        owner_id = require_user_id(identity)
        agent = AgentConfig(
            name=name,
            description=description,
            category=category,
            categories=set(categories or []),
            use_cases=use_cases,
            tools=set(tools or []),
            selected_context_ids=set(context_ids or []),
            is_public=is_public,
            owner_id=owner_id,
        )
        store.put(agent, owner_id)
    except ValidationError as e:
        return AgentResult(
            success=False, error=f"Invalid agent: {e.errors()[0]['msg']}", error_code="validation"
        )
    except UbumuntuError as e:
        return AgentResult(**error_fields(e))
    return AgentResult(success=True, agent=agent_info(agent))


def list_agents(
    identity: IdentityProvider,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> AgentListResult:
    """List the agents the current user owns plus public agents."""
    try:
        store = _agent_store(data_dir, config_path)
    except Exception as e:
        return AgentListResult(**error_fields(e))
    return list_agents_in_store(store, identity)


def list_agents_in_store(store: AgentStore, identity: IdentityProvider) -> AgentListResult:
    try:
        user_id = require_user_id(identity)
        agents = store.list_visible(user_id)
    except UbumuntuError as e:
        return AgentListResult(**error_fields(e))
    return AgentListResult(success=True, agents=[agent_info(a) for a in agents])


def remix(
    agent_ids: list[str],
    identity: IdentityProvider,
    is_public: bool = False,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> AgentResult:
    """Compose two or more visible agents into a new agent owned by the user."""
    try:
        store = _agent_store(data_dir, config_path)
    except Exception as e:
        return AgentResult(**error_fields(e))
    return remix_in_store(store, agent_ids, identity, is_public=is_public)


def remix_in_store(
    store: AgentStore,
    agent_ids: list[str],
    identity: IdentityProvider,
    is_public: bool = False,
) -> AgentResult:
    """Remix using an existing store. See remix()."""
    try:
        user_id = require_user_id(identity)
        sources = [store.get_visible(agent_id, user_id) for agent_id in agent_ids]
        composite = AgentComposer(resolve_agent=store.get).compose(
            sources, user_id, is_public=is_public
        )
        store.put(composite, user_id)
    except UbumuntuError as e:
        return AgentResult(**error_fields(e))
    return AgentResult(success=True, agent=agent_info(composite))
