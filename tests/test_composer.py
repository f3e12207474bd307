"""Tests for agent composition."""

import pytest

from ubumuntu.agents import AgentComposer, merge_capabilities
from ubumuntu.agents.composer import DESCRIPTION_PREFIX
from ubumuntu.exceptions import CompositionError
from ubumuntu.models import Capability, PerformanceMetrics


@pytest.fixture
def composer():
    return AgentComposer()


@pytest.fixture
def researcher(make_agent):
    return make_agent(
        name="Researcher",
        description="Finds sources.",
        category="research",
        categories={"science"},
        use_cases="Literature review",
        triggers={"find"},
        tools={"web_search"},
        selected_context_ids={"doc-1"},
        capabilities=[
            Capability(
                name="search",
                type="retrieval",
                proficiency_level=0.6,
                usage_count=10,
                success_rate=0.9,
                domains={"Biology"},
            ),
            Capability(name="summarize", proficiency_level=0.4),
        ],
        performance_metrics=PerformanceMetrics(task_completion_rate=0.8),
    )


@pytest.fixture
def writer(make_agent):
    return make_agent(
        name="Writer",
        description="Drafts reports.",
        category="writing",
        use_cases="Report drafting\nLiterature review",
        triggers={"draft"},
        tools={"editor", "web_search"},
        selected_context_ids={"doc-2"},
        capabilities=[
            Capability(
                name="search",
                type="lookup",
                proficiency_level=0.8,
                usage_count=30,
                success_rate=0.5,
                domains={"chemistry"},
            ),
            Capability(name="write", proficiency_level=0.9),
        ],
    )


class TestMergeCapabilities:
    def test_same_named_capabilities_are_merged(self, researcher, writer):
        merged = {c.name: c for c in merge_capabilities([researcher, writer])}
        search = merged["search"]

        assert search.proficiency_level == 0.8
        assert search.usage_count == 40
        assert search.success_rate == pytest.approx((0.9 * 10 + 0.5 * 30) / 40)
        assert search.domains == {"biology", "chemistry"}
        assert search.type == "retrieval"

    def test_first_seen_order(self, researcher, writer):
        names = [c.name for c in merge_capabilities([researcher, writer])]
        assert names == ["search", "summarize", "write"]

    def test_unused_capabilities_average_success_rate(self, make_agent):
        a = make_agent(capabilities=[Capability(name="plan", success_rate=0.2)])
        b = make_agent(capabilities=[Capability(name="plan", success_rate=0.6)])

        (plan,) = merge_capabilities([a, b])

        assert plan.usage_count == 0
        assert plan.success_rate == pytest.approx(0.4)


class TestCompose:
    def test_composite_fields(self, composer, researcher, writer):
        composite = composer.compose([researcher, writer], requested_by="carol")

        assert composite.name == "Researcher + Writer"
        assert composite.owner_id == "carol"
        assert composite.is_public is False
        assert composite.category == "research"
        assert composite.categories == {"research", "science", "writing"}
        assert composite.triggers == {"find", "draft"}
        assert composite.tools == {"web_search", "editor"}
        assert composite.selected_context_ids == {"doc-1", "doc-2"}
        assert composite.parent_agent_ids == [researcher.agent_id, writer.agent_id]

    def test_description_lists_sources(self, composer, researcher, writer):
        composite = composer.compose([researcher, writer], requested_by="carol")

        lines = composite.description.splitlines()
        assert lines[0] == DESCRIPTION_PREFIX + "Researcher, Writer"
        assert "- Researcher: Finds sources." in lines
        assert "- Writer: Drafts reports." in lines

    def test_use_cases_are_deduplicated(self, composer, researcher, writer):
        composite = composer.compose([researcher, writer], requested_by="carol")
        assert composite.use_cases == "Literature review\nReport drafting"

    def test_metrics_start_fresh(self, composer, researcher, writer):
        composite = composer.compose([researcher, writer], requested_by="carol")
        assert composite.performance_metrics == PerformanceMetrics()

    def test_new_identity(self, composer, researcher, writer):
        composite = composer.compose([researcher, writer], requested_by="carol")
        assert composite.agent_id not in (researcher.agent_id, writer.agent_id)

    def test_public_on_request(self, composer, researcher, writer):
        composite = composer.compose([researcher, writer], requested_by="carol", is_public=True)
        assert composite.is_public is True

    def test_deterministic(self, composer, researcher, writer):
        first = composer.compose([researcher, writer], requested_by="carol")
        second = composer.compose([researcher, writer], requested_by="carol")

        ignored = {"agent_id", "created_at", "updated_at"}
        assert first.model_dump(exclude=ignored) == second.model_dump(exclude=ignored)

    def test_sources_are_not_modified(self, composer, researcher, writer):
        before = researcher.model_dump()
        composer.compose([researcher, writer], requested_by="carol")
        assert researcher.model_dump() == before


class TestComposeRejections:
    def test_needs_two_agents(self, composer, researcher):
        with pytest.raises(CompositionError) as exc_info:
            composer.compose([researcher], requested_by="carol")
        assert exc_info.value.reason == "insufficient_agents"
        assert exc_info.value.code == "composition.insufficient_agents"

    def test_empty_list(self, composer):
        with pytest.raises(CompositionError) as exc_info:
            composer.compose([], requested_by="carol")
        assert exc_info.value.reason == "insufficient_agents"

    def test_duplicate_source(self, composer, researcher, writer):
        with pytest.raises(CompositionError) as exc_info:
            composer.compose([researcher, writer, researcher], requested_by="carol")
        assert exc_info.value.reason == "duplicate_source"

    def test_cycle_through_resolver(self, make_agent):
        a = make_agent(name="A", agent_id="a", parent_agent_ids=["c"])
        b = make_agent(name="B", agent_id="b")
        c = make_agent(name="C", agent_id="c", parent_agent_ids=["a"])
        registry = {agent.agent_id: agent for agent in (a, b, c)}

        composer = AgentComposer(resolve_agent=registry.get)

        with pytest.raises(CompositionError) as exc_info:
            composer.compose([a, b], requested_by="carol")
        assert exc_info.value.reason == "cycle"

    def test_mutual_parents_among_sources(self, composer, make_agent):
        a = make_agent(name="A", agent_id="a", parent_agent_ids=["b"])
        b = make_agent(name="B", agent_id="b", parent_agent_ids=["a"])

        with pytest.raises(CompositionError) as exc_info:
            composer.compose([a, b], requested_by="carol")
        assert exc_info.value.reason == "cycle"
        assert "a -> b -> a" in exc_info.value.message

    def test_per_call_resolver(self, composer, make_agent):
        a = make_agent(name="A", agent_id="a", parent_agent_ids=["x"])
        x = make_agent(name="X", agent_id="x", parent_agent_ids=["a"])
        b = make_agent(name="B", agent_id="b")

        with pytest.raises(CompositionError):
            composer.compose([a, b], requested_by="carol", resolve_agent={"x": x}.get)

    def test_source_descending_from_another_source_is_allowed(self, composer, make_agent):
        base = make_agent(name="Base", agent_id="base")
        child = make_agent(name="Child", agent_id="child", parent_agent_ids=["base"])

        composite = composer.compose([base, child], requested_by="carol")

        assert composite.parent_agent_ids == ["base", "child"]

    def test_unknown_ancestors_are_ignored(self, composer, make_agent):
        a = make_agent(name="A", agent_id="a", parent_agent_ids=["deleted-agent"])
        b = make_agent(name="B", agent_id="b")

        composite = composer.compose([a, b], requested_by="carol")

        assert composite.parent_agent_ids == ["a", "b"]
