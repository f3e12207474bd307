# src/ubumuntu/commands/config_cmd.py
"""Config command - display the effective configuration."""

from __future__ import annotations

import os
from pathlib import Path

from ubumuntu.commands.base import ConfigResult, SettingInfo, error_fields
from ubumuntu.config import (
    DEFAULT_DATA_DIR,
    build_settings,
    find_config_file,
    get_settings_from_env,
    get_settings_from_yaml,
    load_config,
    validate_config,
)

# Settings shown by `ubumuntu config`, in display order
DISPLAYED_SETTINGS = [
    "chunk_size",
    "chunk_overlap",
    "embedding_dimensions",
    "max_concurrent_embeddings",
    "default_k",
    "min_score",
    "clarify_queries",
    "clarification_timeout",
    "chain_step_timeout",
    "visualization_max_vectors",
    "num_retries",
]


def _get_setting_source(key: str, yaml_settings: dict, env_settings: dict) -> str:
    """Determine the source of a setting value."""
    if key in env_settings:
        return "env var"
    if key in yaml_settings:
        return "yaml"
    return "default"


def config(config_path: str | Path | None = None) -> ConfigResult:
    """Get current configuration settings.

    Args:
        config_path: Override config file path

    Returns:
        ConfigResult with all displayed settings and their sources
    """
    cli_config = load_config(config_path)
    env_settings = get_settings_from_env()
    yaml_settings = get_settings_from_yaml(cli_config)

    try:
        settings = build_settings(cli_config, env_settings)
    except ValueError as e:
        return ConfigResult(**error_fields(e))

    found_config_path = Path(config_path) if config_path else find_config_file()

    result = ConfigResult(success=True)
    result.config_path = str(found_config_path) if found_config_path else None
    result.warnings = validate_config(cli_config, found_config_path)
    result.provider = cli_config.get("provider", "litellm")
    result.llm_model = cli_config.get("llm_model") or os.environ.get("UBUMUNTU_LLM_MODEL")
    result.embedding_model = cli_config.get("embedding_model") or os.environ.get(
        "UBUMUNTU_EMBEDDING_MODEL"
    )
    result.data_dir = cli_config.get("data_dir") or DEFAULT_DATA_DIR

    for key in DISPLAYED_SETTINGS:
        value = getattr(settings, key)
        result.settings.append(
            SettingInfo(
                name=key,
                value="disabled" if value is None else str(value),
                source=_get_setting_source(key, yaml_settings, env_settings),
            )
        )

    return result
