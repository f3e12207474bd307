# src/ubumuntu/commands/ingest.py
"""Ingest command - index text files for a user.

This module provides the core ingest logic that the CLI uses.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from ubumuntu.commands.base import (
    CommandStage,
    FileIngestResult,
    IngestResult,
    ProgressCallback,
    ProgressUpdate,
    error_fields,
)
from ubumuntu.config import ConfigError, create_ubumuntu, get_ubumuntu_config
from ubumuntu.exceptions import UbumuntuError
from ubumuntu.identity import IdentityProvider, require_user_id

if TYPE_CHECKING:
    from ubumuntu.models import AccessLevel, SourceType
    from ubumuntu.ubumuntu import Ubumuntu

SUPPORTED_EXTENSIONS = {".txt", ".md", ".markdown", ".rst", ".text"}

# Map internal stage names to CommandStage
STAGE_MAP = {
    "splitting": CommandStage.SPLITTING,
    "embedding": CommandStage.EMBEDDING,
    "storing": CommandStage.STORING,
}


def find_files(path: Path) -> list[str]:
    """List the supported text files at a path (a file or a directory tree)."""
    if path.is_file():
        return [str(path)]
    files = []
    for root, _, filenames in os.walk(path):
        for filename in sorted(filenames):
            if Path(filename).suffix.lower() in SUPPORTED_EXTENSIONS:
                files.append(os.path.join(root, filename))
    return sorted(files)


def ingest(
    path: str | Path,
    identity: IdentityProvider,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    categories: Iterable[str] | None = None,
    access: AccessLevel = "personal",
    source_type: SourceType = "document",
    parent_id: str | None = None,
    on_progress: ProgressCallback | None = None,
    on_file_start: Callable | None = None,
    on_file_complete: Callable | None = None,
) -> IngestResult:
    """Ingest a file or directory of text files into the user's index.

    Args:
        path: File or directory to ingest
        identity: Resolves the user the content belongs to
        data_dir: Override data directory (uses config if not provided)
        config_path: Override config file path
        categories: Categories attached to every file
        access: "personal" or "public"
        source_type: "document", "note" or "activity"
        parent_id: Explicit parent id (single file only; default: the file path)
        on_progress: Callback for progress updates during ingestion
        on_file_start: Callback when starting a file (filepath, file_index, total_files)
        on_file_complete: Callback when a file is done (receives FileIngestResult)

    Returns:
        IngestResult with aggregated statistics and per-file results
    """
    config = get_ubumuntu_config(data_dir, config_path)
    if isinstance(config, ConfigError):
        return IngestResult(success=False, error=config.message, error_code="configuration")

    try:
        ubu = create_ubumuntu(config)
    except Exception as e:
        return IngestResult(**error_fields(e))

    try:
        return ingest_with_ubumuntu(
            ubu,
            path,
            identity,
            categories=categories,
            access=access,
            source_type=source_type,
            parent_id=parent_id,
            on_progress=on_progress,
            on_file_start=on_file_start,
            on_file_complete=on_file_complete,
        )
    finally:
        ubu.close()


def _ingest_file(
    ubu: Ubumuntu,
    filepath: str,
    parent_id: str,
    owner_id: str,
    categories: list[str],
    access: AccessLevel,
    source_type: SourceType,
    on_progress: ProgressCallback | None = None,
) -> FileIngestResult:
    """Ingest a single file, reporting failure instead of raising."""

    def progress_adapter(event: str, current: int, total: int, message: str) -> None:
        """Adapt the ingestor's progress callback to ProgressUpdate."""
        if on_progress:
            on_progress(
                ProgressUpdate(
                    stage=STAGE_MAP.get(event, CommandStage.PROCESSING),
                    current=current,
                    total=total,
                    message=message,
                )
            )

    try:
        text = Path(filepath).read_text(encoding="utf-8", errors="replace")
        result = ubu.ingest(
            parent_id,
            text,
            owner_id,
            categories=categories,
            access=access,
            source_type=source_type,
            title=Path(filepath).name,
            on_progress=progress_adapter if on_progress else None,
        )
    except (OSError, UbumuntuError) as e:
        message = e.message if isinstance(e, UbumuntuError) else f"{type(e).__name__}: {e}"
        return FileIngestResult(filepath=filepath, parent_id=parent_id, error=message)

    return FileIngestResult(filepath=filepath, parent_id=parent_id, chunks=result.chunk_count)


def ingest_with_ubumuntu(
    ubu: Ubumuntu,
    path: str | Path,
    identity: IdentityProvider,
    categories: Iterable[str] | None = None,
    access: AccessLevel = "personal",
    source_type: SourceType = "document",
    parent_id: str | None = None,
    on_progress: ProgressCallback | None = None,
    on_file_start: Callable | None = None,
    on_file_complete: Callable | None = None,
) -> IngestResult:
    """Ingest files using an existing Ubumuntu instance. See ingest()."""
    try:
        owner_id = require_user_id(identity)
    except UbumuntuError as e:
        return IngestResult(**error_fields(e))

    path = Path(path)
    if not path.exists():
        return IngestResult(success=False, error=f"Path not found: {path}", error_code="not_found")

    files = find_files(path)
    if not files:
        return IngestResult(success=True, error="No supported files found")
    if parent_id is not None and len(files) > 1:
        return IngestResult(
            success=False,
            error="--id can only be used when ingesting a single file",
            error_code="usage",
        )

    result = IngestResult(success=True)
    category_list = list(categories or [])

    for i, filepath in enumerate(files):
        if on_file_start:
            on_file_start(filepath, i, len(files))

        file_result = _ingest_file(
            ubu,
            filepath,
            parent_id or filepath,
            owner_id,
            category_list,
            access,
            source_type,
            on_progress=on_progress,
        )
        result.file_results.append(file_result)

        if file_result.error:
            result.errors.append((filepath, file_result.error))
        else:
            result.files_processed += 1
            result.total_chunks += file_result.chunks

        if on_file_complete:
            on_file_complete(file_result)

    if result.errors:
        result.files_failed = len(result.errors)
        if result.files_processed == 0:
            result.success = False
            result.error = result.errors[0][1]
            result.error_code = "ingestion"

    return result
