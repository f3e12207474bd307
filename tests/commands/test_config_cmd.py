# tests/commands/test_config_cmd.py
"""Tests for the config command."""

from ubumuntu.commands import config_cmd


def settings_by_name(result):
    return {s.name: s for s in result.settings}


class TestConfigCommand:
    """Tests for config_cmd.config()."""

    def test_defaults_without_config_file(self, clean_env):
        result = config_cmd.config()

        assert result.success is True
        assert result.config_path is None
        assert result.provider == "litellm"
        assert result.llm_model is None
        assert result.data_dir == "./ubumuntu_data"
        assert [s.name for s in result.settings] == config_cmd.DISPLAYED_SETTINGS
        assert all(s.source == "default" for s in result.settings)
        assert settings_by_name(result)["min_score"].value == "disabled"

    def test_yaml_and_env_sources(self, clean_env, monkeypatch):
        (clean_env / "ubumuntu.yaml").write_text(
            "llm_model: gemini/gemini-2.0-flash\n"
            "data_dir: ./data\n"
            "settings:\n"
            "  chunk_size: 500\n"
            "  default_k: 3\n"
        )
        monkeypatch.setenv("UBUMUNTU_DEFAULT_K", "8")

        result = config_cmd.config()

        settings = settings_by_name(result)
        assert result.config_path.endswith("ubumuntu.yaml")
        assert result.llm_model == "gemini/gemini-2.0-flash"
        assert result.data_dir == "./data"
        assert (settings["chunk_size"].value, settings["chunk_size"].source) == ("500", "yaml")
        assert (settings["default_k"].value, settings["default_k"].source) == ("8", "env var")

    def test_embedding_model_from_env(self, clean_env, monkeypatch):
        monkeypatch.setenv("UBUMUNTU_EMBEDDING_MODEL", "openai/text-embedding-3-small")
        assert config_cmd.config().embedding_model == "openai/text-embedding-3-small"

    def test_unknown_keys_warn(self, clean_env):
        path = clean_env / "custom.yaml"
        path.write_text("llm: x\n")

        result = config_cmd.config(path)

        assert result.config_path == str(path)
        assert result.warnings == [f"Unknown config keys in {path}: llm"]

    def test_invalid_settings(self, clean_env):
        (clean_env / "ubumuntu.yaml").write_text(
            "settings:\n  chunk_size: 100\n  chunk_overlap: 150\n"
        )

        result = config_cmd.config()

        assert result.success is False
        assert result.error_code == "internal"
