# src/ubumuntu/visualization.py
"""Project stored embeddings to 3-D points for display."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from ubumuntu.exceptions import ReductionError
from ubumuntu.logging_config import get_logger
from ubumuntu.models import VisualizationPoint
from ubumuntu.stores import VectorStore

logger = get_logger(__name__)

PREVIEW_LENGTH = 100
NO_PREVIEW = "No preview available"
SOURCE_TYPES = ("document", "note", "activity")


def normalize_batches(matrix: np.ndarray, batch_size: int = 100) -> np.ndarray:
    """L2-normalize rows, batch by batch. Zero-length rows are left as they are."""
    normalized = np.empty_like(matrix, dtype=float)
    for start in range(0, len(matrix), batch_size):
        batch = matrix[start : start + batch_size]
        norms = np.linalg.norm(batch, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        normalized[start : start + batch_size] = batch / norms
    return normalized


def _pad(matrix: np.ndarray, target_dims: int) -> np.ndarray:
    if matrix.shape[1] >= target_dims:
        return matrix[:, :target_dims]
    padding = np.zeros((matrix.shape[0], target_dims - matrix.shape[1]))
    return np.hstack([matrix, padding])


def pca_project(matrix: np.ndarray, target_dims: int = 3) -> np.ndarray:
    """Project rows onto their top principal components.

    Component signs are fixed so the largest-magnitude loading of each
    component is positive, which makes the output deterministic. Components
    whose singular value is at rounding-noise level are zeroed, so rank
    deficient input (such as three points) yields flat columns.

    Raises:
        ReductionError: The input is not finite or the decomposition fails.
    """
    if not np.all(np.isfinite(matrix)):
        raise ReductionError("Input contains non-finite values")
    centered = matrix - matrix.mean(axis=0)
    try:
        _, singular, vt = np.linalg.svd(centered, full_matrices=False)
    except np.linalg.LinAlgError as e:
        raise ReductionError(f"SVD did not converge: {e}") from e

    components = vt[:target_dims].copy()
    tolerance = singular[0] * max(centered.shape) * np.finfo(float).eps if len(singular) else 0.0
    components[singular[:target_dims] <= tolerance] = 0.0
    pivots = np.argmax(np.abs(components), axis=1)
    signs = np.sign(components[np.arange(len(components)), pivots])
    signs[signs == 0] = 1.0
    projected = centered @ (components * signs[:, None]).T

    if not np.all(np.isfinite(projected)):
        raise ReductionError("Projection produced non-finite values")
    return _pad(projected, target_dims)


def scale_to_range(points: np.ndarray, scale: float = 10.0) -> np.ndarray:
    """Min-max rescale every column to [-scale, scale]. A flat column maps to -scale."""
    low = points.min(axis=0)
    high = points.max(axis=0)
    high = np.where(high == low, low + 1.0, high)
    return (points - low) / (high - low) * (2 * scale) - scale


def reduce_vectors(
    vectors: Sequence[Sequence[float]],
    target_dims: int = 3,
    batch_size: int = 100,
    scale: float = 10.0,
) -> list[list[float]]:
    """Reduce high-dimensional vectors to ``target_dims`` coordinates.

    Zero, one and two vectors have fixed layouts (nothing, the origin, and two
    points on the x axis). Three or more are batch-normalized, projected with
    PCA and rescaled to [-scale, scale]; when PCA fails the first
    ``target_dims`` raw components are used instead. Never raises for
    numerical reasons.
    """
    count = len(vectors)
    if count == 0:
        return []
    if count == 1:
        return [[0.0] * target_dims]
    if count == 2:
        first = [-1.0] + [0.0] * (target_dims - 1)
        second = [1.0] + [0.0] * (target_dims - 1)
        return [first, second]

    matrix = np.asarray(vectors, dtype=float)
    try:
        reduced = pca_project(normalize_batches(matrix, batch_size), target_dims)
    except ReductionError as e:
        logger.warning("PCA failed, falling back to raw components: %s", e)
        reduced = _pad(np.nan_to_num(matrix, nan=0.0, posinf=0.0, neginf=0.0), target_dims)

    return scale_to_range(reduced, scale).tolist()


class VisualizationReducer:
    """Turn a user's stored vectors into labelled 3-D points."""

    def __init__(
        self,
        vector_store: VectorStore,
        max_vectors: int = 500,
        batch_size: int = 100,
        scale: float = 10.0,
    ) -> None:
        self.vector_store = vector_store
        self.max_vectors = max_vectors
        self.batch_size = batch_size
        self.scale = scale

    def points(self, owner_id: str) -> list[VisualizationPoint]:
        """Fetch up to max_vectors of the owner's vectors and project them."""
        matches = self.vector_store.fetch(
            filter={"owner_id": owner_id},
            limit=self.max_vectors,
            include_vectors=True,
        )

        vectors: list[list[float]] = []
        labels: list[dict] = []
        dimensions = self.vector_store.dimensions
        for match in matches:
            values = match.values
            if values is None or len(values) != dimensions or not np.all(np.isfinite(values)):
                continue
            meta = match.metadata
            source_type = meta.get("source_type")
            if source_type not in SOURCE_TYPES:
                continue
            text = meta.get("text")
            vectors.append(values)
            labels.append(
                {
                    "source_type": source_type,
                    "source_id": str(meta.get("parent_id", match.id)),
                    "title": meta.get("title") or "Untitled",
                    "preview": text[:PREVIEW_LENGTH] if isinstance(text, str) else NO_PREVIEW,
                }
            )

        logger.info("Projecting %d of %d vectors for %s", len(vectors), len(matches), owner_id)
        coords = reduce_vectors(vectors, batch_size=self.batch_size, scale=self.scale)
        return [
            VisualizationPoint(x=x, y=y, z=z, **label)
            for (x, y, z), label in zip(coords, labels, strict=True)
        ]
