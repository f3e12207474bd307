# src/ubumuntu/commands/chain.py
"""Chain command - run agents one after another and report each step."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING

from ubumuntu.commands.base import ChainResult, StepInfo, error_fields
from ubumuntu.config import ConfigError, create_ubumuntu, get_ubumuntu_config
from ubumuntu.exceptions import UbumuntuError
from ubumuntu.identity import IdentityProvider, require_user_id

if TYPE_CHECKING:
    from ubumuntu.agents import AgentExecutor
    from ubumuntu.models import ChainRun
    from ubumuntu.ubumuntu import Ubumuntu


def chain_result(run: ChainRun) -> ChainResult:
    """Convert a finished ChainRun into a command result."""
    return ChainResult(
        success=True,
        run_id=run.run_id,
        status=run.status.value,
        success_rate=run.success_rate,
        steps=[
            StepInfo(
                index=step.index,
                agent_id=step.agent_id,
                status=step.status.value,
                output=step.output,
                error=step.error,
                duration_ms=step.duration_ms,
            )
            for step in run.step_results
        ],
    )


def chain(
    agent_ids: list[str],
    identity: IdentityProvider,
    input: str | None = None,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    cancel_event: threading.Event | None = None,
) -> ChainResult:
    """Run the given agents in order with the same question.

    Args:
        agent_ids: Agents to run, in order
        identity: Resolves the requesting user
        input: Question for every agent (default: settings.chain_default_input)
        data_dir: Override data directory
        config_path: Override config file path
        cancel_event: Set to stop the chain before its next step
    """
    config = get_ubumuntu_config(data_dir, config_path)
    if isinstance(config, ConfigError):
        return ChainResult(success=False, error=config.message, error_code="configuration")

    try:
        ubu = create_ubumuntu(config)
    except Exception as e:
        return ChainResult(**error_fields(e))

    try:
        return chain_with_ubumuntu(ubu, agent_ids, identity, input, cancel_event=cancel_event)
    finally:
        ubu.close()


def chain_with_ubumuntu(
    ubu: Ubumuntu,
    agent_ids: list[str],
    identity: IdentityProvider,
    input: str | None = None,
    executor: AgentExecutor | None = None,
    cancel_event: threading.Event | None = None,
) -> ChainResult:
    """Run a chain using an existing Ubumuntu instance. See chain()."""
    try:
        user_id = require_user_id(identity)
        agents = [ubu.agent_store.get_visible(agent_id, user_id) for agent_id in agent_ids]
    except UbumuntuError as e:
        return ChainResult(**error_fields(e))

    launcher = ubu.chain_launcher(executor)
    run = launcher.launch_chain(
        agents, input=input, cancel_event=cancel_event, requested_by=user_id
    )
    result = chain_result(run)
    if run.error:
        result.error = run.error
        result.error_code = "chain.fatal"
    return result
