# src/ubumuntu/commands/visualize.py
"""Visualize command - project a user's embeddings to 3-D points."""

from __future__ import annotations

import json
import os
from dataclasses import asdict
from pathlib import Path

from ubumuntu.commands.base import PointInfo, VisualizeResult, error_fields
from ubumuntu.config import DEFAULT_DATA_DIR, build_settings, get_stores, load_config
from ubumuntu.exceptions import UbumuntuError
from ubumuntu.identity import IdentityProvider, require_user_id
from ubumuntu.visualization import VisualizationReducer


def visualize(
    identity: IdentityProvider,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    output_path: str | Path | None = None,
) -> VisualizeResult:
    """Project the user's stored vectors and optionally write them as JSON.

    Args:
        identity: Resolves the requesting user
        data_dir: Override data directory
        config_path: Override config file path
        output_path: Write the points to this JSON file

    Returns:
        VisualizeResult with one point per valid stored vector
    """
    config = load_config(config_path)
    effective_data_dir = data_dir or config.get("data_dir") or DEFAULT_DATA_DIR

    if not os.path.exists(effective_data_dir):
        return VisualizeResult(success=True, points=[])

    try:
        settings = build_settings(config)
        stores = get_stores(effective_data_dir, config)
    except Exception as e:
        return VisualizeResult(**error_fields(e))

    reducer = VisualizationReducer(
        stores["vector_store"],
        max_vectors=settings.visualization_max_vectors,
        batch_size=settings.visualization_batch_size,
        scale=settings.visualization_scale,
    )
    try:
        return visualize_with_reducer(reducer, identity, output_path)
    finally:
        stores["vector_store"].close()


def visualize_with_reducer(
    reducer: VisualizationReducer,
    identity: IdentityProvider,
    output_path: str | Path | None = None,
) -> VisualizeResult:
    """Visualize using an existing reducer. See visualize()."""
    try:
        user_id = require_user_id(identity)
        points = [PointInfo(**p.model_dump()) for p in reducer.points(user_id)]
    except UbumuntuError as e:
        return VisualizeResult(**error_fields(e))

    result = VisualizeResult(success=True, points=points)
    if output_path is not None:
        try:
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump([asdict(p) for p in points], f, indent=2)
        except OSError as e:
            return VisualizeResult(**error_fields(e))
        result.output_path = str(output_path)
    return result
