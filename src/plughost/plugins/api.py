"""The capability object handed to a plugin's activation callback.

A :class:`PluginApi` is built for every load and bound to one plugin name.
It is the only way plugin code reaches host state: its own data slot, its
own data version, other plugins' public values, and the ``panic`` escape
hatch for reporting a fatal problem.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from plughost.plugins.notify import OneShot

if TYPE_CHECKING:
    from plughost.plugins.controller import LifecycleController


class PluginApi:
    """Scoped access to host state for a single plugin.

    Args:
        name: The plugin this capability belongs to.
        view: The host view the environment dependency resolved with.
        controller: The lifecycle controller that created the capability.
    """

    def __init__(self, name: str, view: Any, controller: "LifecycleController") -> None:
        self._name = name
        self._view = view
        self._controller = controller
        self._logger = logging.getLogger(f"plughost.plugin.{name.replace(' ', '_')}")
        self._panic = OneShot(self._report_panic)

    @property
    def name(self) -> str:
        return self._name

    @property
    def view(self) -> Any:
        """The host view object (the resolved environment dependency)."""
        return self._view

    @property
    def logger(self) -> logging.Logger:
        """Logger under ``plughost.plugin.<name>`` for the plugin's own messages."""
        return self._logger

    def get_data_version(self) -> int | None:
        """Stored data version of this plugin, or ``None`` if never written."""
        return self._controller.get_data_version(self._name)

    def set_data_version(self, version: int) -> None:
        """Record that this plugin's stored data now has shape *version*.

        Plugins call this after rewriting their own data; the next load
        compares it against the declared ``data_version``.
        """
        self._controller.set_data_version(self._name, version)

    def get_data(self, key: str, default: Any = None) -> Any:
        return self._controller.data_store.get(self._name, key, default)

    def set_data(self, key: str, value: Any) -> None:
        self._controller.data_store.set(self._name, key, value)

    def get_plugin(self, name: str) -> Any:
        """Public value of plugin *name*, or ``None`` unless it is loaded."""
        return self._controller.get_plugin(name)

    def panic(self) -> None:
        """Report a major problem: alert the user and disable this plugin.

        Only the first call on a capability has any effect.
        """
        self._panic()

    def _report_panic(self) -> None:
        self._logger.error("Plugin '%s' panicked; disabling it", self._name)
        self._controller.alert(
            f"The plugin '{self._name}' encountered a major problem and has been disabled."
        )
        self._controller.disable_plugin(self._name)

    def __repr__(self) -> str:
        return f"PluginApi(name={self._name!r})"
