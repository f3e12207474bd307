# src/ubumuntu/identity.py
"""The identity boundary: who is making a request.

Authentication itself happens outside the library. Every user-scoped
operation takes an explicit user id; an IdentityProvider is how the
application layer (CLI, web handler) obtains that id in the first place.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ubumuntu.exceptions import AuthorizationError

USER_ID_ENV = "UBUMUNTU_USER_ID"


@runtime_checkable
class IdentityProvider(Protocol):
    """Resolves the current request's user id, or None when unauthenticated."""

    def current_user_id(self) -> str | None: ...


@dataclass(frozen=True)
class StaticIdentityProvider:
    """Always reports the same user. Useful for scripts and tests."""

    user_id: str | None

    def current_user_id(self) -> str | None:
        return self.user_id


@dataclass(frozen=True)
class EnvIdentityProvider:
    """Reads the user id from an environment variable (CLI use)."""

    variable: str = USER_ID_ENV

    def current_user_id(self) -> str | None:
        return os.environ.get(self.variable)


def require_user_id(provider: IdentityProvider) -> str:
    """Return the current user id.

    Raises:
        AuthorizationError: No identity is available or it is blank.
    """
    user_id = provider.current_user_id()
    if user_id is None or not user_id.strip():
        raise AuthorizationError("Authentication required: no user id available")
    return user_id.strip()
