# src/ubumuntu/clarifier.py
"""Query clarification: rewrite a user query into a standalone search query."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from ubumuntu.logging_config import get_logger
from ubumuntu.models import ChatMessage
from ubumuntu.providers.base import LLMClient

logger = get_logger(__name__)

DEFAULT_CLARIFICATION_PROMPT = """You are a query understanding assistant. \
Your job is to analyze user queries and make them more explicit and searchable \
for a document retrieval system.

Given the user's query and chat history, create a clear, standalone search query \
that captures what the user is really looking for.

Guidelines:
1. Make implicit references explicit (e.g., "that document" -> "the document about X mentioned earlier")
2. Add relevant context from chat history if needed
3. Expand abbreviations and unclear terms
4. If the query is already clear and specific, return it as-is
5. Focus on what the user wants to find, not how they want it presented
6. Keep it concise but comprehensive
7. If the user is asking for analysis or comparison, clarify what they want analyzed

Chat History:
{chat_history}

Original Query: {original_query}

Please provide only the clarified query without any additional explanation."""

# A rewrite shorter than this fraction of the original probably lost meaning.
MIN_LENGTH_RATIO = 0.8

History = Sequence[ChatMessage | dict]


def format_history(history: History | None, limit: int) -> str:
    """Render the last ``limit`` messages as ``role: content`` lines."""
    if not history or limit <= 0:
        return ""
    lines = []
    for message in list(history)[-limit:]:
        if isinstance(message, ChatMessage):
            role, content = message.role, message.content
        else:
            role, content = message.get("role", "user"), message.get("content", "")
        lines.append(f"{role}: {content}")
    return "\n".join(lines)


class QueryClarifier:
    """Best-effort query rewriting with a hard timeout.

    clarify() never raises: on provider failure, timeout, or an output that
    does not look like an improvement, the original query is returned.

    Example:
        clarifier = QueryClarifier(LiteLLMClient(model=ChatModels.GEMINI_2_FLASH))
        search_query = clarifier.clarify("what about the second one?", history)
    """

    def __init__(
        self,
        llm_client: LLMClient,
        timeout: float = 10.0,
        history_limit: int = 10,
        temperature: float = 0.1,
        max_tokens: int = 256,
        prompt_template: str | None = None,
    ) -> None:
        """Initialize the clarifier.

        Args:
            llm_client: Generative provider used for the rewrite
            timeout: Seconds to wait for the provider before giving up
            history_limit: Number of most recent chat messages included
            temperature: Sampling temperature for the rewrite
            max_tokens: Output bound for the rewrite
            prompt_template: Custom prompt with {chat_history} and {original_query}
        """
        self.llm_client = llm_client
        self.timeout = timeout
        self.history_limit = history_limit
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.prompt_template = prompt_template or DEFAULT_CLARIFICATION_PROMPT

    def _messages(self, query: str, history: History | None) -> list[dict]:
        prompt = self.prompt_template.format(
            chat_history=format_history(history, self.history_limit),
            original_query=query,
        )
        return [{"role": "user", "content": prompt}]

    def _choose(self, query: str, clarified: str | None) -> str:
        candidate = (clarified or "").strip()
        if not candidate:
            return query
        if candidate.lower() == query.lower():
            return query
        if len(candidate) < len(query) * MIN_LENGTH_RATIO:
            logger.info("Clarified query is much shorter than the original, keeping original")
            return query
        return candidate

    def clarify(self, query: str, history: History | None = None) -> str:
        """Return a clarified query, or the original one on any failure."""
        if not query.strip():
            return query

        pool = ThreadPoolExecutor(max_workers=1)
        try:
            future = pool.submit(
                self.llm_client.complete,
                self._messages(query, history),
                self.temperature,
                self.max_tokens,
            )
            clarified = future.result(timeout=self.timeout)
        except FutureTimeoutError:
            logger.warning("Query clarification timed out after %.1fs", self.timeout)
            return query
        except Exception as e:
            logger.warning("Query clarification failed, using original: %s", e)
            return query
        finally:
            # A timed-out call keeps running in its worker; don't wait for it.
            pool.shutdown(wait=False)

        return self._choose(query, clarified)

    async def aclarify(self, query: str, history: History | None = None) -> str:
        """Async clarify(); same fallback rules."""
        if not query.strip():
            return query

        try:
            clarified = await asyncio.wait_for(
                self.llm_client.acomplete(
                    self._messages(query, history),
                    self.temperature,
                    self.max_tokens,
                ),
                timeout=self.timeout,
            )
        except TimeoutError:
            logger.warning("Query clarification timed out after %.1fs", self.timeout)
            return query
        except Exception as e:
            logger.warning("Query clarification failed, using original: %s", e)
            return query

        return self._choose(query, clarified)
