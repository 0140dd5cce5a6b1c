"""Tests for plughost.config: XDG paths, atomic writes, global config, data dir."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from plughost.config import (
    atomic_write,
    get_config_dir,
    get_data_dir,
    get_plugin_data_dir,
    get_settings_path,
    load_global_config,
    save_global_config,
)
from plughost.exceptions import ConfigError
from plughost.models import DataConfig, GlobalConfig, OutputConfig, PluginsConfig


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("plughost.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "plughost"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("plughost.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))

        assert get_config_dir() == tmp_path / "cfg" / "plughost"

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("plughost.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_data_dir() == tmp_path / ".local" / "share" / "plughost"

    def test_non_xdg_platform_uses_dot_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("plughost.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".plughost"
        assert get_data_dir() == tmp_path / ".plughost" / "data"

    def test_settings_path_lives_in_config_dir(self, isolated_config: Path) -> None:
        assert get_settings_path() == isolated_config / "config" / "plughost" / "settings.json"


# ---------------------------------------------------------------------------
# Plugin data directory precedence
# ---------------------------------------------------------------------------


class TestPluginDataDir:
    def test_default_under_data_dir(self, isolated_config: Path) -> None:
        assert get_plugin_data_dir() == isolated_config / "data" / "plughost" / "plugin-data"

    def test_config_overrides_default(self, isolated_config: Path) -> None:
        config = GlobalConfig(data=DataConfig(directory=str(isolated_config / "custom")))
        assert get_plugin_data_dir(config) == isolated_config / "custom"

    def test_env_overrides_config(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PLUGHOST_DATA_DIR", str(isolated_config / "from-env"))
        config = GlobalConfig(data=DataConfig(directory=str(isolated_config / "custom")))
        assert get_plugin_data_dir(config) == isolated_config / "from-env"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_and_creates_parents(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "dir" / "file.json"
        atomic_write(target, '{"ok": true}')
        assert json.loads(target.read_text(encoding="utf-8")) == {"ok": True}

    def test_overwrites_existing(self, tmp_path: Path) -> None:
        target = tmp_path / "file.txt"
        target.write_text("old", encoding="utf-8")
        atomic_write(target, "new")
        assert target.read_text(encoding="utf-8") == "new"

    def test_no_temp_files_left_behind(self, tmp_path: Path) -> None:
        atomic_write(tmp_path / "file.txt", "data")
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]

    def test_failed_replace_cleans_up(self, tmp_path: Path) -> None:
        target = tmp_path / "file.txt"
        with patch("plughost.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                atomic_write(target, "data")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_missing_file_returns_defaults(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config.output.format == "auto"
        assert config.plugins.autoload is True
        assert config.plugins.default_enabled == {"Hello World": True}
        assert config.data.directory is None

    def test_roundtrip(self, isolated_config: Path) -> None:
        config = GlobalConfig(
            output=OutputConfig(format="json"),
            plugins=PluginsConfig(autoload=False, default_enabled={"Word Count": True}),
        )
        save_global_config(config)
        loaded = load_global_config()
        assert loaded.output.format == "json"
        assert loaded.plugins.autoload is False
        assert loaded.plugins.default_enabled == {"Word Count": True}

    def test_invalid_json_raises(self, isolated_config: Path) -> None:
        path = get_config_dir() / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_values_raise(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"plugins": {"autoload": "sometimes"}})
        with pytest.raises(ConfigError):
            load_global_config()
