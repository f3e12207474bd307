# src/ubumuntu/commands/query.py
"""Query command - search a user's content and synthesize an answer.

This module provides the core query logic that the CLI uses.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from ubumuntu.commands.base import QueryResult, SearchResult, error_fields
from ubumuntu.config import ConfigError, create_ubumuntu, get_ubumuntu_config
from ubumuntu.exceptions import UbumuntuError
from ubumuntu.identity import IdentityProvider, require_user_id

if TYPE_CHECKING:
    from ubumuntu.stores import AccessScope
    from ubumuntu.ubumuntu import Ubumuntu


def query(
    question: str,
    identity: IdentityProvider,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    k: int | None = None,
    raw: bool = False,
    access_scope: AccessScope = "all",
    categories: Iterable[str] | None = None,
    context_ids: Iterable[str] | None = None,
) -> QueryResult:
    """Query the user's content with a question.

    Args:
        question: The question to ask
        identity: Resolves the requesting user
        data_dir: Override data directory
        config_path: Override config file path
        k: Number of results to return (None for default)
        raw: If True, return retrieved chunks without LLM synthesis
        access_scope: "all", "personal" or "public"
        categories: Only search content in at least one of these categories
        context_ids: Only search these parent documents

    Returns:
        QueryResult with answer and sources
    """
    config = get_ubumuntu_config(data_dir, config_path)
    if isinstance(config, ConfigError):
        return QueryResult(
            success=False, query=question, error=config.message, error_code="configuration"
        )

    try:
        ubu = create_ubumuntu(config)
    except Exception as e:
        return QueryResult(query=question, **error_fields(e))

    try:
        return query_with_ubumuntu(
            ubu,
            question,
            identity,
            k=k,
            raw=raw,
            access_scope=access_scope,
            categories=categories,
            context_ids=context_ids,
        )
    finally:
        ubu.close()


def query_with_ubumuntu(
    ubu: Ubumuntu,
    question: str,
    identity: IdentityProvider,
    k: int | None = None,
    raw: bool = False,
    access_scope: AccessScope = "all",
    categories: Iterable[str] | None = None,
    context_ids: Iterable[str] | None = None,
) -> QueryResult:
    """Query using an existing Ubumuntu instance. See query()."""
    try:
        user_id = require_user_id(identity)
        retriever = ubu.retriever(default_k=k, synthesize=not raw)
        response = retriever.get_answer(
            question,
            user_id,
            access_scope=access_scope,
            category_filter=list(categories) if categories else None,
            context_ids=list(context_ids) if context_ids else None,
        )
    except UbumuntuError as e:
        return QueryResult(query=question, **error_fields(e))

    results = [
        SearchResult(
            parent_id=r.record.parent_id,
            title=r.record.title or r.record.parent_id,
            source_type=r.record.source_type,
            content=r.record.text,
            score=r.score,
            chunk_id=r.record.id,
        )
        for r in response.results
    ]

    return QueryResult(
        success=True,
        query=question,
        clarified_query=response.clarified_query,
        answer=response.answer,
        results=results,
    )
