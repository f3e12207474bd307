# tests/commands/test_delete.py
"""Tests for the delete command."""

import os

import pytest

from ubumuntu.commands import delete
from ubumuntu.identity import StaticIdentityProvider

ALICE = StaticIdentityProvider("alice")


@pytest.fixture
def indexed(ubu):
    ubu.ingest("notes.md", "First paragraph.\n\nSecond paragraph.", "alice")
    ubu.ingest("bob.md", "Bob's notes.", "bob")
    return ubu


class TestDeleteFromStore:
    """Tests for delete.delete_from_store()."""

    def test_delete(self, indexed):
        result = delete.delete_from_store(indexed.vector_store, "notes.md", ALICE)

        assert result.success is True
        assert result.parent_id == "notes.md"
        assert result.chunks_deleted == 1
        assert [m.id for m in indexed.vector_store.fetch()] == ["bob.md-0"]

    def test_cannot_delete_other_users_content(self, indexed):
        result = delete.delete_from_store(indexed.vector_store, "bob.md", ALICE)

        assert result.success is False
        assert result.error_code == "not_found"
        assert indexed.vector_store.count() == 2

    def test_confirmation_declined(self, indexed):
        requests = []

        def decline(request):
            requests.append(request)
            return False

        result = delete.delete_from_store(indexed.vector_store, "notes.md", ALICE, decline)

        assert result.success is False
        assert result.error_code == "cancelled"
        assert requests[0].message == "Delete notes.md?"
        assert "1 chunks" in requests[0].details
        assert indexed.vector_store.count() == 2

    def test_confirmation_accepted(self, indexed):
        result = delete.delete_from_store(
            indexed.vector_store, "notes.md", ALICE, on_confirm=lambda request: True
        )
        assert result.success is True

    def test_requires_identity(self, indexed):
        result = delete.delete_from_store(
            indexed.vector_store, "notes.md", StaticIdentityProvider(None)
        )

        assert result.success is False
        assert result.error_code == "auth.unauthorized"


class TestDeleteCommand:
    """Tests for delete.delete()."""

    def test_delete_no_database(self, clean_env):
        """Delete with no database returns error."""
        nonexistent_dir = os.path.join(str(clean_env), "nonexistent")

        result = delete.delete("test.md", ALICE, data_dir=nonexistent_dir)

        assert result.success is False
        assert "No database found" in result.error

    def test_delete_nonexistent_content(self, clean_env, temp_dir):
        """Delete of unknown content returns error."""
        result = delete.delete("nonexistent.md", ALICE, data_dir=temp_dir)

        assert result.success is False
        assert result.error_code == "not_found"
