# src/ubumuntu/embedder/client.py
"""Client-based embedder implementation."""

from ubumuntu.embedder.base import Embedder
from ubumuntu.exceptions import EmbeddingError
from ubumuntu.providers.base import EmbeddingClient


class ClientEmbedder(Embedder):
    """Embedder that uses an EmbeddingClient for generating embeddings.

    Example:
        from ubumuntu.providers.litellm import LiteLLMEmbeddingClient
        from ubumuntu.embedder import ClientEmbedder

        client = LiteLLMEmbeddingClient(model="gemini/text-embedding-004")
        embedder = ClientEmbedder(embedding_client=client, dimensions=768)
    """

    def __init__(self, embedding_client: EmbeddingClient, dimensions: int = 768) -> None:
        """Initialize the embedder.

        Args:
            embedding_client: Any EmbeddingClient implementation
            dimensions: Fixed vector dimensionality of the deployment
        """
        self._client = embedding_client
        self.dimensions = dimensions

    def embed_text(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text."""
        return self.embed_texts([text])[0]

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts (batched)."""
        if not texts:
            return []
        vectors = self._client.embed(texts)
        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"Provider returned {len(vectors)} embeddings for {len(texts)} texts"
            )
        return [self.check_dimensions(list(v)) for v in vectors]
