"""Persistent stores used by the plugin lifecycle.

* :class:`SettingsStore` -- the host's small key-value settings file. The
  controller keeps the enabled set under ``enabledPlugins`` and subscribes to
  changes of that key.
* :class:`DataStore` -- per-plugin data and data-version records, kept in a
  :class:`diskcache.Cache`. Keys are namespaced by plugin name, so two
  plugins writing the same key never collide.

Both stores are synchronous; callers can rely on a ``set`` being visible to
the next ``get``.
"""

from __future__ import annotations

import copy
import json
import logging
import shutil
from pathlib import Path
from typing import Any, Callable, Optional

import diskcache

from plughost.config import atomic_write
from plughost.exceptions import ConfigError

logger = logging.getLogger(__name__)

SettingsListener = Callable[[Any], None]


class SettingsStore:
    """Key-value settings persisted as one JSON object.

    When *path* is ``None`` the store lives in memory only, which is what
    embedded hosts and tests usually want.

    Args:
        path: JSON file backing the store, or ``None``.

    Example::

        settings = SettingsStore(get_settings_path())
        unsubscribe = settings.subscribe("enabledPlugins", print)
        settings.set("enabledPlugins", {"Hello World": True})
        unsubscribe()
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path
        self._values: dict[str, Any] = {}
        self._listeners: dict[str, list[SettingsListener]] = {}
        self.reload()

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def reload(self) -> None:
        """Re-read the backing file, discarding in-memory values.

        Raises:
            ConfigError: If the file exists but is not a JSON object.
        """
        if self._path is None or not self._path.is_file():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            raise ConfigError(f"Invalid settings file at {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Settings file at {self._path} must hold a JSON object")
        self._values = data

    def get(self, key: str, default: Any = None) -> Any:
        """Return a copy of the value stored under *key*, or *default*."""
        if key not in self._values:
            return copy.deepcopy(default)
        return copy.deepcopy(self._values[key])

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, persist, then notify subscribers of *key*."""
        self._values[key] = copy.deepcopy(value)
        self._flush()
        for listener in list(self._listeners.get(key, [])):
            listener(copy.deepcopy(value))

    def subscribe(self, key: str, listener: SettingsListener) -> Callable[[], None]:
        """Call *listener* with the new value whenever *key* is set.

        Returns:
            A function removing the subscription. Calling it twice is harmless.
        """
        self._listeners.setdefault(key, []).append(listener)

        def _unsubscribe() -> None:
            listeners = self._listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)

        return _unsubscribe

    def _flush(self) -> None:
        if self._path is None:
            return
        atomic_write(self._path, json.dumps(self._values, indent=2, sort_keys=True) + "\n")


class DataStore:
    """Per-plugin data backed by :mod:`diskcache`.

    Args:
        directory: Cache directory. ``None`` lets diskcache create a
            temporary directory; the store owns it and removes it on
            :meth:`close`. An explicit directory is left in place.
    """

    _DATA_PREFIX = "data"
    _VERSION_PREFIX = "data-version"

    def __init__(self, directory: Optional[Path] = None) -> None:
        self._cache = diskcache.Cache(str(directory) if directory is not None else None)
        self._owns_directory = directory is None
        logger.debug("Plugin data store at %s", self._cache.directory)

    @property
    def directory(self) -> str:
        return self._cache.directory

    # Plugin names cannot contain "/", so the name segment is a safe namespace.
    def _data_key(self, plugin: str, key: str) -> str:
        return f"{self._DATA_PREFIX}/{plugin}/{key}"

    def get(self, plugin: str, key: str, default: Any = None) -> Any:
        """Return *plugin*'s value for *key*, or *default* when unset."""
        return self._cache.get(self._data_key(plugin, key), default)

    def set(self, plugin: str, key: str, value: Any) -> None:
        self._cache.set(self._data_key(plugin, key), value)

    def delete(self, plugin: str, key: str) -> bool:
        """Remove *plugin*'s value for *key*. Returns whether it existed."""
        return self._cache.delete(self._data_key(plugin, key))

    def get_data_version(self, plugin: str) -> Optional[int]:
        """Return the stored data version for *plugin*, or ``None`` if never written."""
        return self._cache.get(f"{self._VERSION_PREFIX}/{plugin}")

    def set_data_version(self, plugin: str, version: int) -> None:
        self._cache.set(f"{self._VERSION_PREFIX}/{plugin}", int(version))

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache`.

        A temporary directory created for this store is deleted as well.
        """
        self._cache.close()
        if self._owns_directory:
            shutil.rmtree(self._cache.directory, ignore_errors=True)
            self._owns_directory = False

    def __enter__(self) -> "DataStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
