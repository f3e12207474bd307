# src/ubumuntu/agents/chain.py
"""Sequential execution of agent chains with per-step failure isolation."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Awaitable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from ubumuntu.agents.executor import AgentExecutor
from ubumuntu.exceptions import ChainError
from ubumuntu.logging_config import get_logger, log_with_context
from ubumuntu.models import AgentConfig, ChainRun

logger = get_logger(__name__)

DEFAULT_CHAIN_INPUT = "What tasks can you help me with?"
CHAIN_CONTEXT_TYPE = "chain_execution"


class ChainLauncher:
    """Run agents one after another and report every step.

    A failing or timed-out step is recorded and the chain moves on; the
    caller always receives a complete ChainRun. Cancellation is observed
    between steps only, never inside a running step.

    Executors that keep the default arun() are run on a thread pool owned
    by the launch, which is shut down without waiting. A timed-out step is
    abandoned, so neither the chain nor launch_chain() waits for it.

    Example:
        launcher = ChainLauncher(executor, step_timeout=30)
        run = launcher.launch_chain([research_agent, writer_agent])
        print(run.status, run.success_rate)
    """

    def __init__(
        self,
        executor: AgentExecutor,
        step_timeout: float = 60.0,
        default_input: str = DEFAULT_CHAIN_INPUT,
    ) -> None:
        """Initialize the launcher.

        Args:
            executor: Runs each agent
            step_timeout: Seconds one step may take before it is marked failed
            default_input: Question used when launch_chain gets no input
        """
        self.executor = executor
        self.step_timeout = step_timeout
        self.default_input = default_input
        self._running: set[str] = set()
        self._running_lock = threading.Lock()

    def is_agent_running(self, agent_id: str) -> bool:
        """Whether a step for this agent is executing right now."""
        with self._running_lock:
            return agent_id in self._running

    def _step_input(
        self, question: str, run: ChainRun, index: int, requested_by: str | None
    ) -> dict[str, Any]:
        context: dict[str, Any] = {
            "type": CHAIN_CONTEXT_TYPE,
            "run_id": run.run_id,
            "step": index,
            "timestamp": time.time(),
        }
        if requested_by:
            context["requested_by"] = requested_by
        return {"question": question, "context": context}

    def _execute(
        self, agent: AgentConfig, step_input: dict[str, Any], pool: ThreadPoolExecutor
    ) -> Awaitable[Any]:
        if type(self.executor).arun is AgentExecutor.arun:
            loop = asyncio.get_running_loop()
            return loop.run_in_executor(pool, self.executor.run, agent, step_input)
        return self.executor.arun(agent, step_input)

    async def _run_step(
        self,
        run: ChainRun,
        index: int,
        agent: AgentConfig,
        step_input: dict[str, Any],
        pool: ThreadPoolExecutor,
    ) -> None:
        run.begin_step(index)
        with self._running_lock:
            self._running.add(agent.agent_id)
        try:
            output = await asyncio.wait_for(
                self._execute(agent, step_input, pool), timeout=self.step_timeout
            )
        except TimeoutError:
            error = ChainError(
                f"Step timed out after {self.step_timeout:g}s", agent_id=agent.agent_id
            )
            logger.error("Chain %s step %d (%s) timed out", run.run_id, index, agent.agent_id)
            run.fail_step(index, error.message)
        except Exception as e:
            error = ChainError(str(e) or type(e).__name__, agent_id=agent.agent_id)
            logger.error(
                "Chain %s step %d (%s) failed: %s", run.run_id, index, agent.agent_id, e
            )
            run.fail_step(index, error.message)
        else:
            run.complete_step(index, output)
        finally:
            with self._running_lock:
                self._running.discard(agent.agent_id)

    async def alaunch_chain(
        self,
        agents: Sequence[AgentConfig],
        input: str | None = None,
        cancel_event: threading.Event | None = None,
        requested_by: str | None = None,
    ) -> ChainRun:
        """Run the agents in order and return the finished run report.

        Args:
            agents: Agents to run, in order
            input: Question given to every agent (default: self.default_input)
            cancel_event: Set it to stop the chain before the next step
            requested_by: User the chain runs for; agents retrieve as this user

        Returns:
            A terminal ChainRun: completed, failed-partial, failed-fatal
            (empty agent list) or cancelled.
        """
        agents = list(agents)
        run = ChainRun.for_agents([a.agent_id for a in agents])

        if not agents:
            error = ChainError("No agents provided", fatal=True)
            run.fail_fatal(error.message)
            logger.error("Rejected chain %s: %s", run.run_id, error.message)
            return run

        question = input or self.default_input
        log_with_context(
            logger, logging.INFO, "Launching chain", run_id=run.run_id, steps=len(agents)
        )

        # A timed-out call keeps running in its worker; don't wait for it.
        pool = ThreadPoolExecutor(max_workers=len(agents), thread_name_prefix="ubumuntu-chain")
        try:
            for index, agent in enumerate(agents):
                if cancel_event is not None and cancel_event.is_set():
                    logger.info("Chain %s cancelled before step %d", run.run_id, index)
                    run.finalize(cancelled=True)
                    return run
                step_input = self._step_input(question, run, index, requested_by)
                await self._run_step(run, index, agent, step_input, pool)
        finally:
            pool.shutdown(wait=False)

        run.finalize()
        log_with_context(
            logger,
            logging.INFO,
            "Chain finished",
            run_id=run.run_id,
            status=run.status.value,
            success_rate=f"{run.success_rate:.2f}",
        )
        return run

    def launch_chain(
        self,
        agents: Sequence[AgentConfig],
        input: str | None = None,
        cancel_event: threading.Event | None = None,
        requested_by: str | None = None,
    ) -> ChainRun:
        """Synchronous alaunch_chain(). Must not be called from a running event loop."""
        return asyncio.run(
            self.alaunch_chain(
                agents, input=input, cancel_event=cancel_event, requested_by=requested_by
            )
        )
