# tests/commands/test_ingest.py
"""Tests for the ingest command."""

import os

import pytest

from ubumuntu.commands import CommandStage, ingest
from ubumuntu.identity import StaticIdentityProvider

ALICE = StaticIdentityProvider("alice")


@pytest.fixture
def notes_dir(tmp_path):
    (tmp_path / "pricing.md").write_text("We decided to raise prices in March.")
    (tmp_path / "travel.txt").write_text("Flights to Lisbon are booked for May.")
    (tmp_path / "photo.png").write_bytes(b"\x89PNG")
    nested = tmp_path / "archive"
    nested.mkdir()
    (nested / "old.rst").write_text("Old meeting minutes.")
    return tmp_path


class TestFindFiles:
    def test_filters_supported_extensions(self, notes_dir):
        files = ingest.find_files(notes_dir)
        assert [os.path.basename(f) for f in files] == ["old.rst", "pricing.md", "travel.txt"]

    def test_single_file(self, notes_dir):
        path = notes_dir / "pricing.md"
        assert ingest.find_files(path) == [str(path)]


class TestIngestWithUbumuntu:
    """Tests for ingest.ingest_with_ubumuntu()."""

    def test_ingest_directory(self, ubu, notes_dir):
        result = ingest.ingest_with_ubumuntu(ubu, notes_dir, ALICE, categories=["Work"])

        assert result.success is True
        assert result.files_processed == 3
        assert result.files_failed == 0
        assert result.total_chunks == ubu.vector_store.count()
        parent_ids = {r.parent_id for r in result.file_results}
        assert str(notes_dir / "pricing.md") in parent_ids

    def test_metadata_of_stored_chunks(self, ubu, notes_dir):
        path = notes_dir / "pricing.md"

        ingest.ingest_with_ubumuntu(
            ubu, path, ALICE, categories=["Work"], access="public", source_type="note"
        )

        metadata = ubu.vector_store.fetch()[0].metadata
        assert metadata["owner_id"] == "alice"
        assert metadata["parent_id"] == str(path)
        assert metadata["title"] == "pricing.md"
        assert metadata["categories"] == ["work"]
        assert metadata["access"] == "public"
        assert metadata["source_type"] == "note"

    def test_explicit_parent_id(self, ubu, notes_dir):
        result = ingest.ingest_with_ubumuntu(
            ubu, notes_dir / "pricing.md", ALICE, parent_id="pricing"
        )

        assert result.file_results[0].parent_id == "pricing"
        assert ubu.vector_store.fetch()[0].id == "pricing-0"

    def test_parent_id_requires_single_file(self, ubu, notes_dir):
        result = ingest.ingest_with_ubumuntu(ubu, notes_dir, ALICE, parent_id="pricing")

        assert result.success is False
        assert result.error_code == "usage"
        assert ubu.vector_store.count() == 0

    def test_path_not_found(self, ubu, tmp_path):
        result = ingest.ingest_with_ubumuntu(ubu, tmp_path / "missing", ALICE)

        assert result.success is False
        assert "Path not found" in result.error

    def test_no_supported_files(self, ubu, tmp_path):
        (tmp_path / "image.png").write_bytes(b"\x89PNG")

        result = ingest.ingest_with_ubumuntu(ubu, tmp_path, ALICE)

        assert result.success is True
        assert result.error == "No supported files found"
        assert result.files_processed == 0

    def test_requires_identity(self, ubu, notes_dir):
        result = ingest.ingest_with_ubumuntu(ubu, notes_dir, StaticIdentityProvider(None))

        assert result.success is False
        assert result.error_code == "auth.unauthorized"

    def test_empty_file_is_reported(self, ubu, tmp_path):
        (tmp_path / "empty.md").write_text("   \n")
        (tmp_path / "full.md").write_text("Some real content here.")

        result = ingest.ingest_with_ubumuntu(ubu, tmp_path, ALICE)

        assert result.success is True
        assert result.files_processed == 1
        assert result.files_failed == 1
        assert result.errors[0][0].endswith("empty.md")

    def test_all_files_failing(self, ubu, tmp_path):
        (tmp_path / "empty.md").write_text("")

        result = ingest.ingest_with_ubumuntu(ubu, tmp_path, ALICE)

        assert result.success is False
        assert result.error_code == "ingestion"

    def test_callbacks(self, ubu, notes_dir):
        started, completed, updates = [], [], []

        ingest.ingest_with_ubumuntu(
            ubu,
            notes_dir,
            ALICE,
            on_progress=updates.append,
            on_file_start=lambda path, i, total: started.append((i, total)),
            on_file_complete=completed.append,
        )

        assert started == [(0, 3), (1, 3), (2, 3)]
        assert len(completed) == 3
        stages = {u.stage for u in updates}
        assert {CommandStage.SPLITTING, CommandStage.EMBEDDING, CommandStage.STORING} <= stages


class TestIngestCommand:
    """Tests for ingest.ingest()."""

    def test_ingest_without_models_configured(self, clean_env, notes_dir):
        result = ingest.ingest(notes_dir, ALICE, data_dir=str(clean_env / "data"))

        assert result.success is False
        assert result.error_code == "configuration"
        assert "llm_model" in result.error
