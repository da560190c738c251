"""Tests for Config loading, saving, and layered merge."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from autodroid.core.config import (
    DEFAULT_CONFIG_FILENAME,
    _deep_merge,
    _load_yaml,
    find_config_file,
    load_config,
    save_config,
)
from autodroid.core.exceptions import ConfigError
from autodroid.core.models import Config

_MISSING = Path("/nonexistent/autodroid.config.yaml")

# ── Defaults ──


class TestConfigDefaults:
    def test_default_values(self) -> None:
        config = Config()
        assert config.device.adb_path == "adb"
        assert config.wait.default_timeout_ms == 60000
        assert config.matching.default_threshold == 0.05

    def test_is_base_settings(self) -> None:
        from pydantic_settings import BaseSettings

        assert issubclass(Config, BaseSettings)


# ── YAML Loading ──


class TestYAMLLoading:
    def test_load_nested_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text(
            yaml.dump(
                {
                    "device": {"serial": "emulator-5554", "adb_path": "/opt/adb"},
                    "wait": {"short_interval_s": 0.5},
                }
            ),
            encoding="utf-8",
        )
        config = load_config(config_path=yaml_file)
        assert config.device.serial == "emulator-5554"
        assert config.device.adb_path == "/opt/adb"
        assert config.wait.short_interval_s == 0.5
        assert config.wait.long_interval_s == 5.0

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text("", encoding="utf-8")
        config = load_config(config_path=yaml_file)
        assert config.templates_file == "templates.yaml"

    def test_load_nonexistent_path_uses_defaults(self) -> None:
        config = load_config(config_path=_MISSING)
        assert config.wait.default_timeout_ms == 60000

    def test_load_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text("device: [invalid: yaml: {{", encoding="utf-8")
        with pytest.raises(ConfigError, match="Failed to parse YAML"):
            load_config(config_path=yaml_file)

    def test_load_non_mapping_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text("- item1\n- item2\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="must be a YAML mapping"):
            _load_yaml(yaml_file)


class TestFindConfigFile:
    def test_finds_in_parent(self, tmp_path: Path) -> None:
        (tmp_path / DEFAULT_CONFIG_FILENAME).write_text("{}", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == tmp_path / DEFAULT_CONFIG_FILENAME

    def test_finds_in_dot_dir(self, tmp_path: Path) -> None:
        dot = tmp_path / ".autodroid"
        dot.mkdir()
        (dot / DEFAULT_CONFIG_FILENAME).write_text("{}", encoding="utf-8")
        assert find_config_file(tmp_path) == dot / DEFAULT_CONFIG_FILENAME


# ── Environment Variable Merge ──


class TestEnvVarMerge:
    def test_env_flat(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AUTODROID_TEMPLATES_FILE", "assets/tmpl.yaml")
        config = load_config(config_path=_MISSING)
        assert config.templates_file == "assets/tmpl.yaml"

    def test_env_nested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AUTODROID_DEVICE__SERIAL", "R58M123")
        monkeypatch.setenv("AUTODROID_WAIT__DEFAULT_TIMEOUT_MS", "5000")
        config = load_config(config_path=_MISSING)
        assert config.device.serial == "R58M123"
        assert config.wait.default_timeout_ms == 5000

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text(yaml.dump({"device": {"serial": "yaml"}}), encoding="utf-8")
        monkeypatch.setenv("AUTODROID_DEVICE__SERIAL", "env")
        config = load_config(config_path=yaml_file)
        assert config.device.serial == "env"

    def test_model_alone_ignores_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AUTODROID_DEVICE__SERIAL", "env")
        assert Config().device.serial is None
        assert load_config(config_path=_MISSING).device.serial == "env"

    def test_cli_override_beats_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AUTODROID_DEVICE__SERIAL", "env")
        config = load_config(config_path=_MISSING, overrides={"device": {"serial": "cli"}})
        assert config.device.serial == "cli"


# ── CLI Override Merge ──


class TestCLIOverrides:
    def test_override_does_not_destroy_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / DEFAULT_CONFIG_FILENAME
        yaml_file.write_text(
            yaml.dump({"device": {"serial": "abc", "adb_path": "/opt/adb"}}),
            encoding="utf-8",
        )
        config = load_config(config_path=yaml_file, overrides={"device": {"serial": "xyz"}})
        assert config.device.adb_path == "/opt/adb"  # from YAML
        assert config.device.serial == "xyz"  # from override

    def test_validation_error_raises_config_error(self) -> None:
        with pytest.raises(ConfigError, match="Config validation failed"):
            load_config(config_path=_MISSING, overrides={"wait": {"default_timeout_ms": -1}})


# ── Save Config ──


class TestSaveConfig:
    def test_save_and_reload(self, tmp_path: Path) -> None:
        config = Config(device={"serial": "saved"}, templates_file="t.yaml")
        out_path = tmp_path / "nested" / DEFAULT_CONFIG_FILENAME
        save_config(config, out_path)

        reloaded = load_config(config_path=out_path)
        assert reloaded.device.serial == "saved"
        assert reloaded.templates_file == "t.yaml"


# ── Deep Merge ──


class TestDeepMerge:
    def test_nested_merge(self) -> None:
        base = {"x": {"a": 1, "b": 2}, "y": 10}
        result = _deep_merge(base, {"x": {"b": 3, "c": 4}})
        assert result == {"x": {"a": 1, "b": 3, "c": 4}, "y": 10}

    def test_override_replaces_non_dict(self) -> None:
        assert _deep_merge({"x": "string"}, {"x": {"nested": True}}) == {"x": {"nested": True}}

    def test_base_not_mutated(self) -> None:
        base = {"a": {"b": 1}}
        _deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}
