# src/ubumuntu/models/agent.py
"""Agent configuration models.

Tag-like fields (triggers, tools, categories, capability domains) are
lowercased and trimmed on the way in, so set operations in the composer
compare like with like. Rates outside [0, 1] are rejected, never clamped.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from ubumuntu.models.content import normalize_tags


class Capability(BaseModel):
    """A named skill an agent has, with usage statistics."""

    name: str = Field(min_length=1)
    type: str = "general"
    proficiency_level: float = Field(default=0.5, ge=0.0, le=1.0)
    domains: set[str] = Field(default_factory=set)
    prerequisites: set[str] = Field(default_factory=set)
    usage_count: int = Field(default=0, ge=0)
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("domains", "prerequisites", mode="before")
    @classmethod
    def _normalize_sets(cls, value: Any) -> set[str]:
        return normalize_tags(value)


class PerformanceMetrics(BaseModel):
    """Aggregate run statistics for an agent."""

    task_completion_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    average_response_time: float = Field(default=0.0, ge=0.0)
    user_satisfaction_score: float = Field(default=0.0, ge=0.0, le=1.0)
    total_tasks_completed: int = Field(default=0, ge=0)


class AgentConfig(BaseModel):
    """A named bundle of capabilities, tools and context scopes."""

    agent_id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(min_length=1)
    description: str = ""
    category: str = "general"
    categories: set[str] = Field(default_factory=set)
    use_cases: str = ""
    triggers: set[str] = Field(default_factory=set)
    is_public: bool = False
    owner_id: str = Field(min_length=1)
    parent_agent_ids: list[str] = Field(default_factory=list)
    selected_context_ids: set[str] = Field(default_factory=set)
    capabilities: list[Capability] = Field(default_factory=list)
    tools: set[str] = Field(default_factory=set)
    performance_metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or "general"
        return value

    @field_validator("categories", "triggers", "tools", mode="before")
    @classmethod
    def _normalize_sets(cls, value: Any) -> set[str]:
        return normalize_tags(value)

    @field_validator("selected_context_ids", mode="before")
    @classmethod
    def _strip_context_ids(cls, value: Any) -> Any:
        if value is None:
            return set()
        if isinstance(value, str):
            value = [value]
        return {str(v).strip() for v in value if str(v).strip()}

    @model_validator(mode="after")
    def _check_parents(self) -> AgentConfig:
        if self.agent_id in self.parent_agent_ids:
            raise ValueError(f"Agent {self.agent_id} cannot list itself as a parent")
        return self

    def all_categories(self) -> set[str]:
        """Primary category plus any selected categories."""
        return {self.category, *self.categories}

    def is_visible_to(self, user_id: str | None) -> bool:
        """Public agents are visible to everyone, private ones only to their owner."""
        return self.is_public or (user_id is not None and user_id == self.owner_id)
