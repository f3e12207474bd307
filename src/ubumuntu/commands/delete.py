# src/ubumuntu/commands/delete.py
"""Delete command - remove a parent document from a user's index.

It uses callbacks for interactive confirmation, allowing each UI to
implement its own confirmation method.
"""

from __future__ import annotations

import os
from pathlib import Path

from ubumuntu.commands.base import ConfirmCallback, ConfirmRequest, DeleteResult, error_fields
from ubumuntu.config import DEFAULT_DATA_DIR, get_stores, load_config
from ubumuntu.exceptions import UbumuntuError
from ubumuntu.identity import IdentityProvider, require_user_id
from ubumuntu.stores import VectorStore, owned_parent_filter


def delete(
    parent_id: str,
    identity: IdentityProvider,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    on_confirm: ConfirmCallback | None = None,
) -> DeleteResult:
    """Delete every chunk of a parent document the user owns.

    Args:
        parent_id: Parent id given at ingestion (the file path by default)
        identity: Resolves the requesting user
        data_dir: Override data directory
        config_path: Override config file path
        on_confirm: Optional confirmation callback. Return True to proceed.
            If None, deletion proceeds without confirmation.

    Returns:
        DeleteResult with the number of chunks removed, or a cancelled result
    """
    config = load_config(config_path)
    effective_data_dir = data_dir or config.get("data_dir") or DEFAULT_DATA_DIR

    if not os.path.exists(effective_data_dir):
        return DeleteResult(
            success=False, parent_id=parent_id, error="No database found.", error_code="not_found"
        )

    try:
        stores = get_stores(effective_data_dir, config)
    except Exception as e:
        return DeleteResult(parent_id=parent_id, **error_fields(e))

    vector_store = stores["vector_store"]
    try:
        return delete_from_store(vector_store, parent_id, identity, on_confirm)
    finally:
        vector_store.close()


def delete_from_store(
    vector_store: VectorStore,
    parent_id: str,
    identity: IdentityProvider,
    on_confirm: ConfirmCallback | None = None,
) -> DeleteResult:
    """Delete using an existing vector store. See delete()."""
    try:
        owner_id = require_user_id(identity)
        where = owned_parent_filter(parent_id, owner_id)
        chunks = vector_store.fetch(filter=where)
    except UbumuntuError as e:
        return DeleteResult(parent_id=parent_id, **error_fields(e))

    if not chunks:
        return DeleteResult(
            success=False,
            parent_id=parent_id,
            error=f"Content not found: {parent_id}",
            error_code="not_found",
        )

    if on_confirm is not None:
        request = ConfirmRequest(
            message=f"Delete {parent_id}?",
            details=f"This will remove {len(chunks)} chunks from the index.",
        )
        if not on_confirm(request):
            return DeleteResult(
                success=False, parent_id=parent_id, error="Cancelled.", error_code="cancelled"
            )

    try:
        vector_store.delete_by_filter(where)
    except UbumuntuError as e:
        return DeleteResult(parent_id=parent_id, **error_fields(e))

    return DeleteResult(success=True, parent_id=parent_id, chunks_deleted=len(chunks))
