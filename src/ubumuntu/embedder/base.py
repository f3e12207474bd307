# src/ubumuntu/embedder/base.py
"""Embedder abstract base class."""

from abc import ABC, abstractmethod

from ubumuntu.exceptions import DimensionMismatchError


class Embedder(ABC):
    """Abstract base class for embedding generation.

    Subclasses must implement embed_text and embed_texts. Every vector an
    embedder returns has exactly ``dimensions`` components.
    """

    dimensions: int

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text."""
        ...

    @abstractmethod
    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts (batched)."""
        ...

    def check_dimensions(self, vector: list[float]) -> list[float]:
        """Return the vector unchanged, or raise DimensionMismatchError."""
        if len(vector) != self.dimensions:
            raise DimensionMismatchError(self.dimensions, len(vector))
        return vector
