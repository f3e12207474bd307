# src/ubumuntu/stores/base.py
"""Abstract base classes for storage."""

from abc import ABC, abstractmethod

from ubumuntu.exceptions import AgentNotFoundError, DimensionMismatchError, PermissionDeniedError
from ubumuntu.models import AgentConfig, EmbeddingVector, VectorMatch
from ubumuntu.stores.filters import Filter


class VectorStore(ABC):
    """Abstract base class for vector storage.

    A store has a fixed dimensionality; vectors of any other length are
    rejected with DimensionMismatchError. Transport failures surface as
    StoreUnavailable.
    """

    dimensions: int

    @abstractmethod
    def upsert(self, vectors: list[EmbeddingVector]) -> None:
        """Insert or replace vectors by id. Idempotent."""
        ...

    @abstractmethod
    def query(
        self,
        vector: list[float],
        top_k: int = 5,
        filter: Filter | None = None,
        include_vectors: bool = False,
    ) -> list[VectorMatch]:
        """Return up to top_k matches ordered by descending similarity."""
        ...

    @abstractmethod
    def delete_by_filter(self, filter: Filter) -> None:
        """Delete every vector whose metadata matches the filter."""
        ...

    @abstractmethod
    def fetch(
        self,
        filter: Filter | None = None,
        limit: int | None = None,
        include_vectors: bool = False,
    ) -> list[VectorMatch]:
        """List stored vectors matching the filter, without ranking."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Count the total number of vectors in the store."""
        ...

    def close(self) -> None:  # noqa: B027
        """Release resources held by the store."""

    def _check_dimensions(self, values: list[float]) -> None:
        if len(values) != self.dimensions:
            raise DimensionMismatchError(self.dimensions, len(values))


class AgentStore(ABC):
    """Abstract base class for agent configuration storage."""

    @abstractmethod
    def put(self, agent: AgentConfig, requested_by: str) -> None:
        """Store an agent. Only its owner may overwrite an existing agent."""
        ...

    @abstractmethod
    def get(self, agent_id: str) -> AgentConfig | None:
        """Retrieve an agent by ID. Returns None if not found."""
        ...

    @abstractmethod
    def list_visible(self, user_id: str) -> list[AgentConfig]:
        """List agents owned by the user plus public agents."""
        ...

    @abstractmethod
    def delete(self, agent_id: str, requested_by: str) -> None:
        """Delete an agent. Only its owner may delete it."""
        ...

    def get_visible(self, agent_id: str, user_id: str) -> AgentConfig:
        """Retrieve an agent the user may see.

        Raises:
            AgentNotFoundError: The agent does not exist.
            PermissionDeniedError: The agent is private to another user.
        """
        agent = self.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(f"Agent {agent_id} not found")
        if not agent.is_visible_to(user_id):
            raise PermissionDeniedError(f"Agent {agent_id} is not visible to {user_id}")
        return agent
