# tests/test_cli.py
"""Tests for the CLI."""

import logging
import os

import pytest
from typer.testing import CliRunner

from ubumuntu.cli import app
from ubumuntu.commands import agents
from ubumuntu.identity import StaticIdentityProvider
from ubumuntu.logging_config import ROOT_LOGGER


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """Drop the stderr handler the CLI installs; it points at the runner's stream."""
    logger = logging.getLogger(ROOT_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


class TestCliBasics:
    def test_help(self, runner):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "ubumuntu" in result.output.lower()

    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("ubumuntu ")


class TestConfigCommand:
    def test_config_shows_settings(self, runner, clean_env):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "chunk_size" in result.output
        assert "default_k" in result.output
        assert "No config file found" in result.output


class TestIngestCommand:
    def test_ingest_nonexistent_file(self, runner, clean_env):
        result = runner.invoke(app, ["--user", "alice", "ingest", "/nonexistent/file.md"])

        assert result.exit_code == 1
        assert "error" in result.output.lower()

    def test_unknown_source_type(self, runner, clean_env):
        result = runner.invoke(app, ["--user", "alice", "ingest", ".", "--type", "email"])

        assert result.exit_code == 2
        assert "unknown source type" in result.output


class TestQueryCommand:
    def test_query_without_models_configured(self, runner, clean_env):
        data_dir = os.path.join(str(clean_env), "data")

        result = runner.invoke(
            app, ["--user", "alice", "query", "test question", "--data-dir", data_dir]
        )

        assert result.exit_code == 1
        assert "configuration" in result.output


class TestDeleteCommand:
    def test_delete_without_database(self, runner, clean_env):
        data_dir = os.path.join(str(clean_env), "data")

        result = runner.invoke(
            app, ["--user", "alice", "delete", "notes.md", "--force", "--data-dir", data_dir]
        )

        assert result.exit_code == 1
        assert "No database found" in result.output


class TestAgentsCommands:
    def test_create_and_list(self, runner, clean_env, temp_dir):
        created = runner.invoke(
            app,
            ["--user", "alice", "agents", "create", "--name", "Planner",
             "--category", "planning", "--data-dir", temp_dir],
        )
        listed = runner.invoke(app, ["--user", "alice", "agents", "list", "--data-dir", temp_dir])

        assert created.exit_code == 0
        assert "Created agent" in created.output
        assert listed.exit_code == 0
        assert "Planner" in listed.output

    def test_list_empty(self, runner, clean_env, temp_dir):
        result = runner.invoke(app, ["--user", "alice", "agents", "list", "--data-dir", temp_dir])

        assert result.exit_code == 0
        assert "No agents yet." in result.output

    def test_user_from_environment(self, runner, clean_env, temp_dir, monkeypatch):
        monkeypatch.setenv("UBUMUNTU_USER_ID", "alice")

        runner.invoke(
            app,
            ["agents", "create", "--name", "Planner", "--category", "planning",
             "--data-dir", temp_dir],
        )

        listed = agents.list_agents(StaticIdentityProvider("alice"), data_dir=temp_dir)
        assert [a.owner_id for a in listed.agents] == ["alice"]

    def test_without_user(self, runner, clean_env, temp_dir):
        result = runner.invoke(app, ["agents", "list", "--data-dir", temp_dir])

        assert result.exit_code == 1
        assert "auth.unauthorized" in result.output

    def test_remix(self, runner, clean_env, temp_dir):
        alice = StaticIdentityProvider("alice")
        first = agents.create_agent(alice, "Planner", "planning", data_dir=temp_dir).agent
        second = agents.create_agent(alice, "Writer", "writing", data_dir=temp_dir).agent

        result = runner.invoke(
            app,
            ["--user", "alice", "agents", "remix", first.agent_id, second.agent_id,
             "--data-dir", temp_dir],
        )

        assert result.exit_code == 0
        listed = agents.list_agents(alice, data_dir=temp_dir)
        composite = [a for a in listed.agents if a.parent_agent_ids]
        assert len(composite) == 1
        assert composite[0].parent_agent_ids == [first.agent_id, second.agent_id]

    def test_remix_unknown_agent(self, runner, clean_env, temp_dir):
        result = runner.invoke(
            app,
            ["--user", "alice", "agents", "remix", "a", "b", "--data-dir", temp_dir],
        )

        assert result.exit_code == 1
        assert "agent.not_found" in result.output


class TestVisualizeCommand:
    def test_nothing_to_visualize(self, runner, clean_env):
        data_dir = os.path.join(str(clean_env), "data")

        result = runner.invoke(app, ["--user", "alice", "visualize", "--data-dir", data_dir])

        assert result.exit_code == 0
        assert "Nothing to visualize." in result.output
