# tests/commands/test_query.py
"""Tests for the query command."""

import pytest

from ubumuntu.commands import query
from ubumuntu.identity import StaticIdentityProvider

ALICE = StaticIdentityProvider("alice")


@pytest.fixture
def indexed(ubu):
    ubu.ingest("pricing", "We decided to raise prices in March.", "alice", title="Pricing")
    ubu.ingest("travel", "Flights to Lisbon are booked for May.", "alice", categories=["trips"])
    ubu.ingest("bob-pricing", "Bob thinks prices should drop.", "bob")
    return ubu


class TestQueryWithUbumuntu:
    """Tests for query.query_with_ubumuntu()."""

    def test_synthesized_answer(self, indexed, llm):
        result = query.query_with_ubumuntu(indexed, "What did we decide about prices?", ALICE)

        assert result.success is True
        assert result.query == "What did we decide about prices?"
        assert result.answer == "A synthesized answer."
        assert "We decided to raise prices" in llm.last_prompt

    def test_raw_mode_skips_synthesis(self, indexed, llm):
        result = query.query_with_ubumuntu(indexed, "prices", ALICE, raw=True)

        assert result.answer is None
        assert result.results
        assert llm.calls == []

    def test_results_are_scoped_to_user(self, indexed):
        result = query.query_with_ubumuntu(indexed, "prices", ALICE, raw=True, k=10)

        assert {r.parent_id for r in result.results} == {"pricing", "travel"}

    def test_result_fields(self, indexed):
        result = query.query_with_ubumuntu(indexed, "decided in march", ALICE, raw=True, k=1)

        top = result.results[0]
        assert top.parent_id == "pricing"
        assert top.title == "Pricing"
        assert top.source_type == "document"
        assert top.chunk_id == "pricing-0"
        assert 0.0 < top.score <= 1.0

    def test_untitled_results_use_parent_id(self, indexed):
        result = query.query_with_ubumuntu(indexed, "flights", ALICE, raw=True, k=1)
        assert result.results[0].title == "travel"

    def test_category_filter(self, indexed):
        result = query.query_with_ubumuntu(indexed, "prices", ALICE, raw=True, categories=["Trips"])
        assert [r.parent_id for r in result.results] == ["travel"]

    def test_context_ids(self, indexed):
        result = query.query_with_ubumuntu(
            indexed, "flights", ALICE, raw=True, context_ids=["pricing"]
        )
        assert [r.parent_id for r in result.results] == ["pricing"]

    def test_no_results_means_no_answer(self, ubu, llm):
        result = query.query_with_ubumuntu(ubu, "anything", ALICE)

        assert result.success is True
        assert result.results == []
        assert result.answer is None
        assert llm.calls == []

    def test_requires_identity(self, indexed):
        result = query.query_with_ubumuntu(indexed, "prices", StaticIdentityProvider(""))

        assert result.success is False
        assert result.error_code == "auth.unauthorized"
        assert result.query == "prices"


class TestQueryCommand:
    """Tests for query.query()."""

    def test_query_without_models_configured(self, clean_env):
        result = query.query("test question", ALICE, data_dir=str(clean_env / "data"))

        assert result.success is False
        assert result.error_code == "configuration"
        assert result.query == "test question"
