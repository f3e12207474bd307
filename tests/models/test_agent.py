"""Tests for agent configuration models."""

import pytest
from pydantic import ValidationError

from ubumuntu.models import AgentConfig, Capability, PerformanceMetrics


class TestCapability:
    def test_name_is_stripped(self):
        assert Capability(name="  search ").name == "search"

    def test_domains_are_normalized(self):
        capability = Capability(name="search", domains=["Biology", " chemistry "])
        assert capability.domains == {"biology", "chemistry"}

    @pytest.mark.parametrize(
        "field,value",
        [
            ("proficiency_level", 1.5),
            ("proficiency_level", -0.1),
            ("success_rate", 2.0),
            ("usage_count", -1),
        ],
    )
    def test_out_of_range_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            Capability(name="search", **{field: value})

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            Capability(name="   ")


class TestPerformanceMetrics:
    def test_defaults(self):
        metrics = PerformanceMetrics()
        assert metrics.task_completion_rate == 0.0
        assert metrics.total_tasks_completed == 0

    def test_rate_above_one_rejected(self):
        with pytest.raises(ValidationError):
            PerformanceMetrics(user_satisfaction_score=1.2)


class TestAgentConfig:
    def test_defaults(self):
        agent = AgentConfig(name="Helper", owner_id="alice")

        assert agent.agent_id
        assert agent.category == "general"
        assert agent.is_public is False
        assert agent.parent_agent_ids == []

    def test_tag_fields_are_normalized(self):
        agent = AgentConfig(
            name="Helper",
            owner_id="alice",
            category="  Research ",
            categories=["Science", "science"],
            triggers="Find, Search",
            tools={"Web_Search"},
            selected_context_ids=[" doc-1 ", ""],
        )

        assert agent.category == "research"
        assert agent.categories == {"science"}
        assert agent.triggers == {"find", "search"}
        assert agent.tools == {"web_search"}
        assert agent.selected_context_ids == {"doc-1"}

    def test_blank_category_becomes_general(self):
        assert AgentConfig(name="Helper", owner_id="alice", category=" ").category == "general"

    def test_cannot_be_own_parent(self):
        with pytest.raises(ValidationError, match="parent"):
            AgentConfig(agent_id="a1", name="Loop", owner_id="alice", parent_agent_ids=["a1"])

    def test_owner_required(self):
        with pytest.raises(ValidationError):
            AgentConfig(name="Helper", owner_id="")

    def test_all_categories(self):
        agent = AgentConfig(
            name="Helper", owner_id="alice", category="research", categories={"science"}
        )
        assert agent.all_categories() == {"research", "science"}

    def test_visibility(self):
        private = AgentConfig(name="Mine", owner_id="alice")
        public = AgentConfig(name="Shared", owner_id="alice", is_public=True)

        assert private.is_visible_to("alice")
        assert not private.is_visible_to("bob")
        assert not private.is_visible_to(None)
        assert public.is_visible_to("bob")
        assert public.is_visible_to(None)

    def test_json_round_trip(self):
        agent = AgentConfig(
            name="Helper",
            owner_id="alice",
            capabilities=[Capability(name="search", domains={"web"})],
            tools={"browser"},
        )
        assert AgentConfig.model_validate_json(agent.model_dump_json()) == agent
