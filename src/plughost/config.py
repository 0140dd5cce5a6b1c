"""Configuration management with XDG paths and atomic writes.

This module handles the on-disk layout used by plughost:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.plughost/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- a single :class:`~plughost.models.GlobalConfig` JSON
  file with output and plugin-loading preferences.
* **Host settings** -- ``settings.json`` next to the global config, owned by
  :class:`~plughost.stores.SettingsStore` (holds the enabled set).
* **Plugin data** -- a :mod:`diskcache` directory resolved by
  :func:`get_plugin_data_dir`.

All file writes go through :func:`atomic_write` so a crash never leaves a
half-written settings file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from plughost.exceptions import ConfigError
from plughost.models import GlobalConfig

_APP_NAME = "plughost"
_CONFIG_FILENAME = "config.json"
_SETTINGS_FILENAME = "settings.json"
_DATA_DIR_ENV = "PLUGHOST_DATA_DIR"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms following the XDG Base Directory layout."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from *env_var*, else ``$HOME/<segments>``."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/plughost/`` (default ``~/.config/plughost/``).
    On macOS/Windows: ``~/.plughost/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (plugin data, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/plughost/`` (default ``~/.local/share/plughost/``).
    On macOS/Windows: ``~/.plughost/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_settings_path() -> Path:
    """Path of the host settings file holding ``enabledPlugins``."""
    return get_config_dir() / _SETTINGS_FILENAME


def get_plugin_data_dir(config: Optional[GlobalConfig] = None) -> Path:
    """Resolve the plugin data directory.

    Precedence (high to low):
        1. ``PLUGHOST_DATA_DIR`` environment variable
        2. ``data.directory`` in the global config
        3. ``<data dir>/plugin-data``

    Args:
        config: Global config to consult; ``None`` skips step 2.

    Returns:
        The directory path (not created here; :mod:`diskcache` creates it).
    """
    env_value = os.environ.get(_DATA_DIR_ENV)
    if env_value:
        return Path(env_value).expanduser()
    if config is not None and config.data.directory:
        return Path(config.data.directory).expanduser()
    return get_data_dir() / "plugin-data"


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using a temp file and ``os.replace``.

    The temp file lives in the same directory as *path* so the rename stays
    on one filesystem. On any failure the temp file is removed and the
    exception re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration.

    Returns:
        The deserialised :class:`~plughost.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file holds invalid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically."""
    data = config.model_dump(mode="json")
    atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")
