# src/ubumuntu/models/chain.py
"""Chain run data models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, PrivateAttr


class StepStatus(str, Enum):
    """Status of a single chain step."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RunStatus(str, Enum):
    """Status of a whole chain run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED_PARTIAL = "failed-partial"
    FAILED_FATAL = "failed-fatal"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset(
    {
        RunStatus.COMPLETED,
        RunStatus.FAILED_PARTIAL,
        RunStatus.FAILED_FATAL,
        RunStatus.CANCELLED,
    }
)


def _now() -> datetime:
    return datetime.now(UTC)


class StepResult(BaseModel):
    """Outcome of running one agent in a chain."""

    index: int
    agent_id: str
    status: StepStatus = StepStatus.PENDING
    output: Any = None
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    _locked: bool = PrivateAttr(default=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if self._locked and not name.startswith("_"):
            raise RuntimeError(f"Step {self.index} of a finished chain run is immutable")
        super().__setattr__(name, value)

    def lock(self) -> None:
        self._locked = True

    @property
    def duration_ms(self) -> float | None:
        if self.started_at is None or self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds() * 1000


class ChainRun(BaseModel):
    """One execution of an ordered list of agents.

    Mutated only by the chain launcher while running. Once the status is
    terminal the run and its steps are frozen: mutators and attribute
    assignment raise RuntimeError.
    """

    run_id: str = Field(default_factory=lambda: str(uuid4()))
    agent_ids: list[str] = Field(default_factory=list)
    status: RunStatus = RunStatus.PENDING
    steps: list[StepResult] = Field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None

    @classmethod
    def for_agents(cls, agent_ids: list[str]) -> ChainRun:
        return cls(
            agent_ids=list(agent_ids),
            steps=[StepResult(index=i, agent_id=a) for i, a in enumerate(agent_ids)],
        )

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith("_") and self.is_terminal:
            raise RuntimeError(f"Chain run {self.run_id} is {self.status.value} and immutable")
        super().__setattr__(name, value)

    def model_post_init(self, context: Any, /) -> None:
        if self.is_terminal:
            for step in self.steps:
                step.lock()

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def step_results(self) -> list[StepResult]:
        return self.steps

    @property
    def success_rate(self) -> float:
        """Fraction of steps that completed (0.0 for an empty run)."""
        if not self.steps:
            return 0.0
        completed = sum(1 for s in self.steps if s.status == StepStatus.COMPLETED)
        return completed / len(self.steps)

    def _check_mutable(self) -> None:
        if self.is_terminal:
            raise RuntimeError(f"Chain run {self.run_id} is {self.status.value} and immutable")

    def begin_step(self, index: int) -> None:
        self._check_mutable()
        if self.status == RunStatus.PENDING:
            self.status = RunStatus.RUNNING
            self.started_at = _now()
        step = self.steps[index]
        step.status = StepStatus.RUNNING
        step.started_at = _now()

    def complete_step(self, index: int, output: Any) -> None:
        self._check_mutable()
        step = self.steps[index]
        step.output = output
        step.completed_at = _now()
        step.status = StepStatus.COMPLETED

    def fail_step(self, index: int, error: str) -> None:
        self._check_mutable()
        step = self.steps[index]
        step.error = error
        step.completed_at = _now()
        step.status = StepStatus.FAILED

    def fail_fatal(self, error: str) -> None:
        self._check_mutable()
        self.error = error
        self.completed_at = _now()
        self._close(RunStatus.FAILED_FATAL)

    def finalize(self, *, cancelled: bool = False) -> None:
        """Move the run into its terminal status based on step outcomes."""
        self._check_mutable()
        if self.started_at is None:
            self.started_at = _now()
        self.completed_at = _now()
        if cancelled:
            self._close(RunStatus.CANCELLED)
        elif any(s.status == StepStatus.FAILED for s in self.steps):
            self._close(RunStatus.FAILED_PARTIAL)
        else:
            self._close(RunStatus.COMPLETED)

    def _close(self, status: RunStatus) -> None:
        # Status goes last: after it is terminal no field can be assigned.
        for step in self.steps:
            step.lock()
        self.status = status
