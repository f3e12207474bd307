"""Tests for the identity boundary."""

import pytest

from ubumuntu.exceptions import AuthorizationError
from ubumuntu.identity import (
    USER_ID_ENV,
    EnvIdentityProvider,
    IdentityProvider,
    StaticIdentityProvider,
    require_user_id,
)


class TestProviders:
    def test_static_provider(self):
        assert StaticIdentityProvider("alice").current_user_id() == "alice"

    def test_env_provider(self, monkeypatch):
        monkeypatch.setenv(USER_ID_ENV, "bob")
        assert EnvIdentityProvider().current_user_id() == "bob"

    def test_env_provider_custom_variable(self, monkeypatch):
        monkeypatch.setenv("APP_USER", "carol")
        assert EnvIdentityProvider("APP_USER").current_user_id() == "carol"

    def test_env_provider_unset(self, monkeypatch):
        monkeypatch.delenv(USER_ID_ENV, raising=False)
        assert EnvIdentityProvider().current_user_id() is None

    def test_protocol(self):
        assert isinstance(StaticIdentityProvider("alice"), IdentityProvider)
        assert isinstance(EnvIdentityProvider(), IdentityProvider)


class TestRequireUserId:
    def test_returns_stripped_id(self):
        assert require_user_id(StaticIdentityProvider("  alice ")) == "alice"

    @pytest.mark.parametrize("user_id", [None, "", "   "])
    def test_missing_identity(self, user_id):
        with pytest.raises(AuthorizationError) as exc_info:
            require_user_id(StaticIdentityProvider(user_id))
        assert exc_info.value.code == "auth.unauthorized"
