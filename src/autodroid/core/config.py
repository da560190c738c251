"""autodroid configuration — load / save / merge.

Merge order (later wins):
    1. Model defaults
    2. YAML file values
    3. Environment variables (AUTODROID_ prefix, __ nested delimiter)
    4. CLI overrides dict
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import EnvSettingsSource

from autodroid.core.exceptions import ConfigError
from autodroid.core.models import Config

DEFAULT_CONFIG_FILENAME = "autodroid.config.yaml"


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Config:
    """Load Config from YAML + env vars + CLI overrides.

    Args:
        config_path: Explicit path to YAML config. If None, searches cwd and parents.
        overrides: CLI flag overrides to merge on top.

    Returns:
        Validated Config instance.

    Raises:
        ConfigError: If YAML parsing or validation fails.
    """
    yaml_data: dict[str, Any] = {}

    if config_path is None:
        config_path = find_config_file()

    if config_path is not None and config_path.exists():
        yaml_data = _load_yaml(config_path)

    merged = _deep_merge(yaml_data, EnvSettingsSource(Config)())
    if overrides:
        merged = _deep_merge(merged, overrides)

    try:
        return Config(**merged)
    except Exception as e:
        msg = f"Config validation failed: {e}"
        raise ConfigError(msg) from e


def save_config(config: Config, path: Path) -> None:
    """Save Config to YAML file."""
    data = config.model_dump(mode="json")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:  # noqa: PTH123
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)


def find_config_file(start: Path | None = None) -> Path | None:
    """Search for the config file in *start* (default cwd), then parent directories."""
    current = start or Path.cwd()
    for directory in [current, *current.parents]:
        candidate = directory / DEFAULT_CONFIG_FILENAME
        if candidate.exists():
            return candidate
        candidate = directory / ".autodroid" / DEFAULT_CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:  # noqa: PTH123
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Failed to parse YAML: {path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Failed to read config: {path}: {e}"
        raise ConfigError(msg) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Config file must be a YAML mapping, got {type(data).__name__}: {path}"
        raise ConfigError(msg)
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override wins on conflicts."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
