# src/ubumuntu/exceptions.py
"""Error taxonomy for Ubumuntu.

Every error carries a stable ``code`` so callers (the commands layer, an HTTP
adapter) can report failures without exposing internal detail.
"""

from __future__ import annotations

from typing import Literal

IngestionStage = Literal["split", "embed", "store"]
RetrievalReason = Literal["provider_unreachable", "invalid_filter", "dimension_mismatch"]
CompositionReason = Literal["insufficient_agents", "duplicate_source", "cycle"]


class UbumuntuError(Exception):
    """Base class for all Ubumuntu errors."""

    code: str = "ubumuntu.error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ConfigurationError(UbumuntuError):
    """Invalid or incomplete configuration."""

    code = "configuration.invalid"


class AuthorizationError(UbumuntuError):
    """No user identity is available for the current request."""

    code = "auth.unauthorized"


class StoreUnavailable(UbumuntuError):
    """The vector store could not be reached or rejected the operation."""

    code = "store.unavailable"


class InvalidFilterError(UbumuntuError):
    """A metadata filter does not follow the supported grammar."""

    code = "store.invalid_filter"


class EmbeddingError(UbumuntuError):
    """The embedding provider failed."""

    code = "provider.embedding"


class GenerationError(UbumuntuError):
    """The generative provider failed."""

    code = "provider.generation"


class IngestionError(UbumuntuError):
    """Ingestion failed at one stage; nothing was committed for the parent.

    Attributes:
        stage: One of "split", "embed" or "store".
        parent_id: Parent document the ingestion was for.
    """

    def __init__(self, stage: IngestionStage, message: str, parent_id: str | None = None) -> None:
        super().__init__(message, code=f"ingestion.{stage}")
        self.stage = stage
        self.parent_id = parent_id


class RetrievalError(UbumuntuError):
    """Retrieval failed.

    Attributes:
        reason: One of "provider_unreachable", "invalid_filter" or "dimension_mismatch".
    """

    retryable = True

    def __init__(self, reason: RetrievalReason, message: str) -> None:
        super().__init__(message, code=f"retrieval.{reason}")
        self.reason = reason


class DimensionMismatchError(RetrievalError):
    """A vector does not match the deployment's fixed dimensionality.

    This is a configuration fault and is never retried.
    """

    retryable = False

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            "dimension_mismatch",
            f"Vector dimension mismatch: expected {expected}, got {actual}",
        )
        self.expected = expected
        self.actual = actual


class CompositionError(UbumuntuError):
    """Agent composition was rejected.

    Attributes:
        reason: One of "insufficient_agents", "duplicate_source" or "cycle".
    """

    def __init__(self, reason: CompositionReason, message: str) -> None:
        super().__init__(message, code=f"composition.{reason}")
        self.reason = reason


class ChainError(UbumuntuError):
    """A chain step failed, or the whole chain was rejected before running.

    Attributes:
        fatal: True when the chain was rejected before any step ran.
        agent_id: The agent whose step failed, if any.
    """

    def __init__(self, message: str, *, fatal: bool = False, agent_id: str | None = None) -> None:
        super().__init__(message, code="chain.fatal" if fatal else "chain.step_failed")
        self.fatal = fatal
        self.agent_id = agent_id


class ReductionError(UbumuntuError):
    """Numerical failure while projecting vectors. Never leaves the reducer."""

    code = "visualization.reduction"


class AgentNotFoundError(UbumuntuError):
    """An agent id could not be resolved."""

    code = "agent.not_found"


class PermissionDeniedError(UbumuntuError):
    """A user tried to modify an agent or content they do not own."""

    code = "auth.forbidden"
