# src/ubumuntu/config.py
"""Reading Ubumuntu configuration from files and the environment.

The library itself only ever receives a Settings object. This module is the
outer layer (used by the CLI and by applications embedding Ubumuntu) that
looks up ubumuntu.yaml, .env and UBUMUNTU_* variables, merges them, and
opens the stores or a full Ubumuntu instance for a data directory.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypedDict

import yaml

from ubumuntu.exceptions import ConfigurationError
from ubumuntu.settings import RATE_LIMIT_PROFILES

if TYPE_CHECKING:
    from ubumuntu.settings import Settings
    from ubumuntu.stores import ChromaVectorStore, SQLiteAgentStore
    from ubumuntu.ubumuntu import Ubumuntu

# Default paths
DEFAULT_DATA_DIR = "./ubumuntu_data"
CONFIG_FILES = ["ubumuntu.yaml", "ubumuntu.yml", ".ubumunturc"]
ENV_FILE = ".env"
ENV_PREFIX = "UBUMUNTU_"
AGENTS_DB = "agents.db"


class StoreBundle(TypedDict):
    """Bundle of store instances for operations that need no model provider."""

    vector_store: ChromaVectorStore
    agent_store: SQLiteAgentStore


@dataclass
class ConfigError:
    """Error during configuration loading."""

    message: str
    suggestion: str | None = None


def load_env_file(env_path: str | Path = ENV_FILE) -> None:
    """Load environment variables from a .env file if it exists.

    Existing environment variables are never overridden.

    Args:
        env_path: Path to .env file (default: .env in current directory)
    """
    path = Path(env_path)
    if not path.exists():
        return

    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip().strip("\"'")
                if key not in os.environ:
                    os.environ[key] = value


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find a configuration file in the current directory or its parents.

    Args:
        start_dir: Directory to start searching from (default: cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_dir or Path.cwd()
    for _ in range(10):  # Limit search depth
        for config_name in CONFIG_FILES:
            config_path = current / config_name
            if config_path.exists():
                return config_path
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _safe_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def _safe_float(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


def _optional_text(value: str) -> str | None:
    return value or None


def _optional_float(value: str) -> float | None:
    return None if value == "" else _safe_float(value)


def _optional_int(value: str) -> int | None:
    return None if value == "" else _safe_int(value)


# Settings field -> parser for its UBUMUNTU_* environment variable.
# A parser returning None for a required field means "invalid, ignore".
ENV_PARSERS: dict[str, Callable[[str], Any]] = {
    "chunk_size": _safe_int,
    "chunk_overlap": _safe_int,
    "sentence_language": str,
    "embedding_dimensions": _safe_int,
    "max_concurrent_embeddings": _safe_int,
    "embed_retries": _safe_int,
    "default_k": _safe_int,
    "min_score": _optional_float,
    "retrieval_overfetch": _safe_int,
    "clarify_queries": _parse_bool,
    "clarification_history": _safe_int,
    "clarification_max_tokens": _safe_int,
    "clarification_temperature": _safe_float,
    "clarification_timeout": _safe_float,
    "synthesis_prompt": _optional_text,
    "synthesis_temperature": _optional_float,
    "synthesis_max_tokens": _optional_int,
    "chain_step_timeout": _safe_float,
    "chain_default_input": str,
    "visualization_batch_size": _safe_int,
    "visualization_max_vectors": _safe_int,
    "visualization_scale": _safe_float,
    "num_retries": _safe_int,
    "rate_limit_profile": str,
}

NULLABLE_SETTINGS = {
    "min_score",
    "synthesis_prompt",
    "synthesis_temperature",
    "synthesis_max_tokens",
}

# Valid configuration keys for validation
VALID_ROOT_KEYS = {
    "provider",
    "llm_model",
    "embedding_model",
    "data_dir",
    "collection_name",
    "settings",
}

VALID_SETTINGS_KEYS = set(ENV_PARSERS)


def validate_config(config: dict[str, Any], config_path: Path | None = None) -> list[str]:
    """Validate config and return warnings about unknown keys.

    Args:
        config: The loaded configuration dictionary
        config_path: Path to config file (for error messages)

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    unknown_root = set(config.keys()) - VALID_ROOT_KEYS
    if unknown_root:
        path_str = str(config_path) if config_path else "config"
        warnings.append(f"Unknown config keys in {path_str}: {', '.join(sorted(unknown_root))}")

    settings = config.get("settings", {})
    if isinstance(settings, dict):
        unknown_settings = set(settings.keys()) - VALID_SETTINGS_KEYS
        if unknown_settings:
            warnings.append(f"Unknown settings keys: {', '.join(sorted(unknown_settings))}")
    elif settings is not None:
        warnings.append("The 'settings' section must be a mapping")

    return warnings


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Explicit path to config file, or None to search

    Returns:
        Configuration dictionary (empty if no config found)
    """
    config_path = Path(config_path) if config_path is not None else find_config_file()

    if config_path is None:
        return {}

    with open(config_path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        return {}
    return config


def get_settings_from_env(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Read behavioral settings from UBUMUNTU_* environment variables.

    Returns only values that were explicitly set and parse cleanly, so YAML
    settings are used unless overridden by env vars.
    """
    environ = dict(os.environ) if environ is None else environ
    result: dict[str, Any] = {}

    for key, parse in ENV_PARSERS.items():
        env_name = ENV_PREFIX + key.upper()
        if env_name not in environ:
            continue
        value = parse(environ[env_name])
        if value is None and key not in NULLABLE_SETTINGS:
            continue
        result[key] = value

    return result


def get_settings_from_yaml(config: dict[str, Any]) -> dict[str, Any]:
    """Extract known settings from the 'settings:' section of a YAML config."""
    yaml_settings = config.get("settings", {}) or {}
    if not isinstance(yaml_settings, dict):
        return {}
    return {key: value for key, value in yaml_settings.items() if key in VALID_SETTINGS_KEYS}


def build_settings(
    config: dict[str, Any] | None = None,
    env_settings: dict[str, Any] | None = None,
) -> Settings:
    """Build Settings object from YAML config and env vars.

    Precedence (highest to lowest):
    1. Environment variables (for CI/CD override)
    2. YAML settings: section
    3. Settings class defaults

    Args:
        config: YAML configuration dictionary
        env_settings: Environment variable overrides (if None, reads from env)

    Returns:
        Configured Settings instance
    """
    from ubumuntu.settings import Settings

    config = config or {}
    yaml_settings = get_settings_from_yaml(config)
    env_settings = env_settings if env_settings is not None else get_settings_from_env()

    merged = {**yaml_settings, **env_settings}

    # rate_limit_profile affects several settings at once
    rate_limit_profile = merged.pop("rate_limit_profile", None)

    if rate_limit_profile:
        if rate_limit_profile not in RATE_LIMIT_PROFILES:
            raise ValueError(
                f"Unknown rate_limit_profile '{rate_limit_profile}'. "
                f"Available profiles: {sorted(RATE_LIMIT_PROFILES)}"
            )
        return Settings.with_profile(rate_limit_profile, **merged)
    return Settings(**merged)


def get_stores(data_dir: str | Path, config: dict[str, Any] | None = None) -> StoreBundle:
    """Get store instances for operations that need no model provider.

    Args:
        data_dir: Path to data directory
        config: Loaded YAML config (collection name and embedding dimensions)

    Returns:
        Bundle of store instances
    """
    from ubumuntu.stores import ChromaVectorStore, SQLiteAgentStore

    data_dir = str(data_dir)
    config = config or {}
    settings = build_settings(config)
    return {
        "vector_store": ChromaVectorStore(
            os.path.join(data_dir, "chroma"),
            collection_name=config.get("collection_name") or "ubumuntu",
            dimensions=settings.embedding_dimensions,
        ),
        "agent_store": SQLiteAgentStore(os.path.join(data_dir, AGENTS_DB)),
    }


@dataclass
class UbumuntuConfig:
    """Configuration for creating an Ubumuntu instance."""

    provider: str
    llm_model: str
    embedding_model: str
    data_dir: str
    settings: Settings
    api_key: str | None = None
    collection_name: str = "ubumuntu"


def get_ubumuntu_config(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> UbumuntuConfig | ConfigError:
    """Get configuration for creating an Ubumuntu instance.

    This extracts configuration without creating the instance, allowing
    the caller to handle errors and missing values appropriately.

    Args:
        data_dir: Override data directory
        config_path: Override config file path

    Returns:
        UbumuntuConfig with all settings, or ConfigError if invalid
    """
    load_env_file()
    config = load_config(config_path)
    effective_data_dir = data_dir or config.get("data_dir") or DEFAULT_DATA_DIR
    provider = config.get("provider", "litellm")

    try:
        settings = build_settings(config, get_settings_from_env())
    except ValueError as e:
        return ConfigError(
            message=f"Invalid settings: {e}",
            suggestion="Check the settings section of ubumuntu.yaml and UBUMUNTU_* variables",
        )

    if provider != "litellm":
        return ConfigError(
            message=f"Unknown provider '{provider}'",
            suggestion="Supported providers: litellm",
        )

    llm_model = config.get("llm_model") or os.environ.get("UBUMUNTU_LLM_MODEL")
    embedding_model = config.get("embedding_model") or os.environ.get(
        "UBUMUNTU_EMBEDDING_MODEL"
    )
    if not llm_model or not embedding_model:
        return ConfigError(
            message="LiteLLM provider requires llm_model and embedding_model.",
            suggestion="Set them in ubumuntu.yaml or UBUMUNTU_LLM_MODEL/UBUMUNTU_EMBEDDING_MODEL",
        )

    return UbumuntuConfig(
        provider=provider,
        llm_model=llm_model,
        embedding_model=embedding_model,
        data_dir=effective_data_dir,
        settings=settings,
        api_key=os.environ.get("UBUMUNTU_API_KEY"),
        collection_name=config.get("collection_name") or "ubumuntu",
    )


def create_ubumuntu(config: UbumuntuConfig) -> Ubumuntu:
    """Create an Ubumuntu instance from configuration."""
    from ubumuntu.configuration import LiteLLMProvider, LocalStorage
    from ubumuntu.ubumuntu import Ubumuntu

    return Ubumuntu(
        provider=LiteLLMProvider(
            llm=config.llm_model,
            embedding=config.embedding_model,
            api_key=config.api_key,
        ),
        storage=LocalStorage(config.data_dir, collection_name=config.collection_name),
        settings=config.settings,
    )


def get_ubumuntu(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> Ubumuntu:
    """Create an Ubumuntu instance based on configuration.

    For library callers; the commands layer uses get_ubumuntu_config so it can
    report the suggestion alongside the message.

    Raises:
        ConfigurationError: If the provider or models are not configured
    """
    config = get_ubumuntu_config(data_dir, config_path)
    if isinstance(config, ConfigError):
        raise ConfigurationError(config.message)
    return create_ubumuntu(config)
