# tests/test_config.py
"""Tests for configuration loading (YAML, .env and UBUMUNTU_* variables)."""

import os

import pytest

from ubumuntu.config import (
    ConfigError,
    UbumuntuConfig,
    build_settings,
    create_ubumuntu,
    find_config_file,
    get_settings_from_env,
    get_settings_from_yaml,
    get_stores,
    get_ubumuntu,
    get_ubumuntu_config,
    load_config,
    load_env_file,
    validate_config,
)
from ubumuntu.exceptions import ConfigurationError
from ubumuntu.settings import Settings


class TestLoadEnvFile:
    def test_loads_values(self, clean_env, monkeypatch):
        env_file = clean_env / ".env"
        env_file.write_text('# comment\nUBUMUNTU_API_KEY="secret"\n\nUBUMUNTU_DEFAULT_K=7\n')
        # Register both keys so monkeypatch removes them again afterwards
        for key in ("UBUMUNTU_API_KEY", "UBUMUNTU_DEFAULT_K"):
            monkeypatch.setenv(key, "")
            monkeypatch.delenv(key)

        load_env_file(env_file)

        assert os.environ["UBUMUNTU_API_KEY"] == "secret"
        assert os.environ["UBUMUNTU_DEFAULT_K"] == "7"

    def test_does_not_override_existing(self, clean_env, monkeypatch):
        env_file = clean_env / ".env"
        env_file.write_text("UBUMUNTU_USER_ID=from-file\n")
        monkeypatch.setenv("UBUMUNTU_USER_ID", "from-shell")

        load_env_file(env_file)

        assert os.environ["UBUMUNTU_USER_ID"] == "from-shell"

    def test_missing_file_is_ignored(self, clean_env):
        load_env_file(clean_env / "missing.env")


class TestFindConfigFile:
    def test_finds_in_start_dir(self, tmp_path):
        config = tmp_path / "ubumuntu.yaml"
        config.write_text("provider: litellm\n")
        assert find_config_file(tmp_path) == config

    def test_finds_in_parent(self, tmp_path):
        config = tmp_path / ".ubumunturc"
        config.write_text("provider: litellm\n")
        child = tmp_path / "a" / "b"
        child.mkdir(parents=True)
        assert find_config_file(child) == config


class TestLoadConfig:
    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("llm_model: gemini/gemini-2.0-flash\nsettings:\n  default_k: 3\n")

        config = load_config(path)

        assert config["llm_model"] == "gemini/gemini-2.0-flash"
        assert config["settings"] == {"default_k": 3}

    def test_no_config_found(self, clean_env):
        assert load_config() == {}

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        assert load_config(path) == {}


class TestValidateConfig:
    def test_valid_config(self):
        assert validate_config({"provider": "litellm", "settings": {"default_k": 3}}) == []

    def test_unknown_keys(self):
        warnings = validate_config({"llm": "x", "settings": {"chunk_sise": 10}})
        assert any("llm" in w for w in warnings)
        assert any("chunk_sise" in w for w in warnings)

    def test_settings_must_be_mapping(self):
        assert validate_config({"settings": ["default_k"]}) == [
            "The 'settings' section must be a mapping"
        ]


class TestSettingsSources:
    def test_env_parsing(self):
        env = {
            "UBUMUNTU_CHUNK_SIZE": "400",
            "UBUMUNTU_CLARIFY_QUERIES": "no",
            "UBUMUNTU_MIN_SCORE": "",
            "UBUMUNTU_CLARIFICATION_TIMEOUT": "2.5",
            "UBUMUNTU_DEFAULT_K": "lots",
        }

        settings = get_settings_from_env(env)

        assert settings == {
            "chunk_size": 400,
            "clarify_queries": False,
            "min_score": None,
            "clarification_timeout": 2.5,
        }

    def test_yaml_settings_ignore_unknown_keys(self):
        config = {"settings": {"default_k": 3, "bogus": True}}
        assert get_settings_from_yaml(config) == {"default_k": 3}

    def test_env_overrides_yaml(self):
        config = {"settings": {"default_k": 3, "chunk_size": 600}}

        settings = build_settings(config, {"default_k": 9})

        assert settings.default_k == 9
        assert settings.chunk_size == 600

    def test_rate_limit_profile(self):
        settings = build_settings({"settings": {"rate_limit_profile": "conservative"}}, {})
        assert settings.max_concurrent_embeddings == 2

    def test_unknown_profile(self):
        with pytest.raises(ValueError, match="rate_limit_profile"):
            build_settings({"settings": {"rate_limit_profile": "turbo"}}, {})

    def test_defaults(self):
        assert build_settings({}, {}) == Settings()


class TestGetStores:
    def test_builds_stores(self, temp_dir):
        stores = get_stores(temp_dir, {"settings": {"embedding_dimensions": 16}})
        try:
            assert stores["vector_store"].dimensions == 16
            assert stores["vector_store"].count() == 0
            assert stores["agent_store"].count_agents() == 0
            assert os.path.exists(os.path.join(temp_dir, "agents.db"))
        finally:
            stores["vector_store"].close()


class TestGetUbumuntuConfig:
    def test_missing_models(self, clean_env):
        result = get_ubumuntu_config()

        assert isinstance(result, ConfigError)
        assert "llm_model" in result.message
        assert result.suggestion is not None

    def test_models_from_yaml(self, clean_env):
        path = clean_env / "ubumuntu.yaml"
        path.write_text(
            "llm_model: gemini/gemini-2.0-flash\n"
            "embedding_model: gemini/text-embedding-004\n"
            "data_dir: ./data\n"
            "collection_name: notes\n"
        )

        result = get_ubumuntu_config()

        assert isinstance(result, UbumuntuConfig)
        assert result.llm_model == "gemini/gemini-2.0-flash"
        assert result.embedding_model == "gemini/text-embedding-004"
        assert result.data_dir == "./data"
        assert result.collection_name == "notes"

    def test_models_from_env(self, clean_env, monkeypatch):
        monkeypatch.setenv("UBUMUNTU_LLM_MODEL", "openai/gpt-4o-mini")
        monkeypatch.setenv("UBUMUNTU_EMBEDDING_MODEL", "openai/text-embedding-3-small")
        monkeypatch.setenv("UBUMUNTU_API_KEY", "sk-test")

        result = get_ubumuntu_config(data_dir="/tmp/override")

        assert isinstance(result, UbumuntuConfig)
        assert result.api_key == "sk-test"
        assert result.data_dir == "/tmp/override"

    def test_unknown_provider(self, clean_env):
        (clean_env / "ubumuntu.yaml").write_text("provider: magic\n")

        result = get_ubumuntu_config()

        assert isinstance(result, ConfigError)
        assert "magic" in result.message

    def test_invalid_settings(self, clean_env):
        (clean_env / "ubumuntu.yaml").write_text(
            "llm_model: a\nembedding_model: b\nsettings:\n  chunk_size: 10\n  chunk_overlap: 20\n"
        )

        result = get_ubumuntu_config()

        assert isinstance(result, ConfigError)
        assert result.message.startswith("Invalid settings")


class TestCreateUbumuntu:
    def test_creates_instance(self, temp_dir):
        config = UbumuntuConfig(
            provider="litellm",
            llm_model="gemini/gemini-2.0-flash",
            embedding_model="gemini/text-embedding-004",
            data_dir=temp_dir,
            settings=Settings(embedding_dimensions=16),
        )

        ubu = create_ubumuntu(config)
        try:
            assert ubu.settings.embedding_dimensions == 16
            assert ubu.embedder.dimensions == 16
            assert ubu.vector_store.dimensions == 16
        finally:
            ubu.close()


class TestGetUbumuntu:
    def test_missing_models_raise(self, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            get_ubumuntu(data_dir=str(clean_env / "data"))

        assert exc_info.value.code == "configuration.invalid"
        assert "llm_model and embedding_model" in exc_info.value.message

    def test_from_environment(self, clean_env, monkeypatch, temp_dir):
        monkeypatch.setenv("UBUMUNTU_LLM_MODEL", "gemini/gemini-2.0-flash")
        monkeypatch.setenv("UBUMUNTU_EMBEDDING_MODEL", "gemini/text-embedding-004")
        monkeypatch.setenv("UBUMUNTU_EMBEDDING_DIMENSIONS", "16")

        ubu = get_ubumuntu(data_dir=temp_dir)
        try:
            assert ubu.settings.embedding_dimensions == 16
        finally:
            ubu.close()
