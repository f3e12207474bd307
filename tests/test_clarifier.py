"""Tests for query clarification."""

import pytest

from ubumuntu.clarifier import QueryClarifier, format_history
from ubumuntu.models import ChatMessage


class TestFormatHistory:
    def test_empty_history(self):
        assert format_history(None, limit=10) == ""
        assert format_history([], limit=10) == ""

    def test_keeps_last_messages(self):
        history = [{"role": "user", "content": f"message {i}"} for i in range(5)]
        assert format_history(history, limit=2) == "user: message 3\nuser: message 4"

    def test_accepts_chat_messages(self):
        history = [
            ChatMessage(role="user", content="Tell me about the Q3 report"),
            ChatMessage(role="assistant", content="It covers revenue."),
        ]
        assert format_history(history, limit=10) == (
            "user: Tell me about the Q3 report\nassistant: It covers revenue."
        )

    def test_zero_limit(self):
        assert format_history([{"role": "user", "content": "hi"}], limit=0) == ""


class TestClarify:
    def test_returns_rewritten_query(self, make_llm):
        llm = make_llm(reply="  revenue figures in the Q3 2024 financial report  ")
        clarifier = QueryClarifier(llm)

        assert clarifier.clarify("what about Q3 revenue?") == (
            "revenue figures in the Q3 2024 financial report"
        )

    def test_prompt_includes_query_and_history(self, make_llm):
        llm = make_llm(reply="the second quarterly report from the finance team")
        clarifier = QueryClarifier(llm, temperature=0.1, max_tokens=64)
        history = [{"role": "user", "content": "list the finance reports"}]

        clarifier.clarify("the second one", history)

        prompt = llm.last_prompt
        assert "the second one" in prompt
        assert "user: list the finance reports" in prompt
        assert llm.calls[0]["temperature"] == 0.1
        assert llm.calls[0]["max_tokens"] == 64

    def test_history_limit(self, make_llm):
        llm = make_llm(reply="something considerably longer than the query")
        clarifier = QueryClarifier(llm, history_limit=1)
        history = [
            {"role": "user", "content": "old message"},
            {"role": "user", "content": "recent message"},
        ]

        clarifier.clarify("query", history)

        assert "recent message" in llm.last_prompt
        assert "old message" not in llm.last_prompt

    def test_empty_output_keeps_original(self, make_llm):
        clarifier = QueryClarifier(make_llm(reply="   "))
        assert clarifier.clarify("project deadlines") == "project deadlines"

    def test_same_query_in_other_case_keeps_original(self, make_llm):
        clarifier = QueryClarifier(make_llm(reply="PROJECT DEADLINES"))
        assert clarifier.clarify("project deadlines") == "project deadlines"

    def test_much_shorter_output_keeps_original(self, make_llm):
        clarifier = QueryClarifier(make_llm(reply="deadlines"))
        assert clarifier.clarify("project deadlines for the spring") == (
            "project deadlines for the spring"
        )

    def test_provider_error_keeps_original(self, make_llm):
        clarifier = QueryClarifier(make_llm(error=RuntimeError("rate limited")))
        assert clarifier.clarify("project deadlines") == "project deadlines"

    def test_timeout_keeps_original(self, make_llm):
        llm = make_llm(reply="a much longer clarified query text", delay=0.5)
        clarifier = QueryClarifier(llm, timeout=0.05)
        assert clarifier.clarify("project deadlines") == "project deadlines"

    def test_blank_query_skips_provider(self, make_llm):
        llm = make_llm(reply="anything")
        clarifier = QueryClarifier(llm)

        assert clarifier.clarify("   ") == "   "
        assert llm.calls == []

    def test_custom_prompt_template(self, make_llm):
        llm = make_llm(reply="rewritten query that is long enough")
        clarifier = QueryClarifier(
            llm, prompt_template="History:{chat_history}|Q:{original_query}"
        )

        clarifier.clarify("short query")

        assert llm.last_prompt == "History:|Q:short query"


class TestAsyncClarify:
    @pytest.mark.asyncio
    async def test_aclarify_returns_rewritten_query(self, make_llm):
        clarifier = QueryClarifier(make_llm(reply="revenue in the third quarter report"))
        assert await clarifier.aclarify("Q3 revenue?") == "revenue in the third quarter report"

    @pytest.mark.asyncio
    async def test_aclarify_timeout_keeps_original(self, make_llm):
        llm = make_llm(reply="a much longer clarified query text", delay=0.5)
        clarifier = QueryClarifier(llm, timeout=0.05)
        assert await clarifier.aclarify("project deadlines") == "project deadlines"

    @pytest.mark.asyncio
    async def test_aclarify_error_keeps_original(self, make_llm):
        clarifier = QueryClarifier(make_llm(error=ConnectionError("down")))
        assert await clarifier.aclarify("project deadlines") == "project deadlines"
