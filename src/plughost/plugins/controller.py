"""Lifecycle controller -- registration, dependency-gated loading, enable/disable.

This module contains :class:`LifecycleController`, the coordinator of the
plugin system. Each plugin moves through these states::

    Unregistered --register--> Registered --deps resolved--> Loading --> Loaded
                                              \\                           |
                                               +--(not enabled)--> Disabled <+ disable_plugin
                                                                     |
                                                       enable_plugin +--> Loading --> Loaded

A registration waits in the :class:`~plughost.plugins.graph.DependencyGraph`
until every declared dependency has loaded and the host view is bound
(:meth:`LifecycleController.resolve_view`). The enabled set is persisted in
the settings store under ``enabledPlugins``; core plugins bypass it.

Data versions guard the shape of each plugin's stored data. A mismatch
between the stored and declared version aborts the load with
:class:`~plughost.exceptions.DataVersionMismatch`; nothing is migrated.

Dependents of a disabled plugin are left running. Unloading a plugin does
not cascade.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Optional

from plughost import output
from plughost.exceptions import ContractError, DataVersionMismatch
from plughost.models import (
    CORE_PLUGINS,
    DEFAULT_ENABLED_PLUGINS,
    ENABLED_PLUGINS_KEY,
    ENVIRONMENT_DEP,
    PluginMetadata,
    PluginStatus,
)
from plughost.plugins.api import PluginApi
from plughost.plugins.graph import DependencyGraph
from plughost.plugins.notify import OneShot
from plughost.plugins.registry import (
    DisableCallback,
    EnableCallback,
    PluginRecord,
    PluginRegistry,
    snapshot,
)
from plughost.plugins.schema import MetadataValidator
from plughost.stores import DataStore, SettingsStore

logger = logging.getLogger(__name__)

REFRESH_REQUIRED_MESSAGE = (
    "A plugin without a disable handler was turned off. "
    "Restart the application to fully unload it."
)


class LifecycleController:
    """Drives every plugin's state machine.

    Args:
        settings: Store holding the persisted enabled set.
        data_store: Store holding per-plugin data and data versions.
        alert: Shows a message to the user. Defaults to
            :func:`plughost.output.alert`.
        core_plugins: Names that are always enabled and never disabled.
        default_enabled: Enabled set used while nothing is persisted.
        validator: Metadata validator; the default applies the pydantic
            metadata schema.
        graph: Dependency graph to park registrations in.

    Example::

        controller = LifecycleController(SettingsStore(), DataStore(tmp))
        controller.register({"name": "Hello World"}, lambda api: "hi")
        controller.resolve_view(view)
        controller.status("Hello World")  # PluginStatus.LOADED
    """

    def __init__(
        self,
        settings: SettingsStore,
        data_store: DataStore,
        alert: Optional[Callable[[str], None]] = None,
        core_plugins: Iterable[str] = CORE_PLUGINS,
        default_enabled: Optional[Mapping[str, bool]] = None,
        validator: Optional[MetadataValidator] = None,
        graph: Optional[DependencyGraph] = None,
    ) -> None:
        self._settings = settings
        self._data_store = data_store
        self._alert = alert if alert is not None else output.alert
        self._core = frozenset(core_plugins)
        self._default_enabled = dict(
            DEFAULT_ENABLED_PLUGINS if default_enabled is None else default_enabled
        )
        self._validator = validator or MetadataValidator()
        self._graph = graph if graph is not None else DependencyGraph()
        self._registry = PluginRegistry()
        self._view: Any = None
        self._view_bound = False
        self._enabled = self._read_enabled_set()
        self._refresh_alert = OneShot(lambda: self._alert(REFRESH_REQUIRED_MESSAGE))
        self._unsubscribe: Optional[Callable[[], None]] = settings.subscribe(
            ENABLED_PLUGINS_KEY, self._on_enabled_set_changed
        )

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    @property
    def registry(self) -> PluginRegistry:
        return self._registry

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    @property
    def data_store(self) -> DataStore:
        return self._data_store

    @property
    def core_plugins(self) -> frozenset[str]:
        return self._core

    @property
    def view(self) -> Any:
        return self._view

    def alert(self, message: str) -> None:
        """Show *message* to the user through the host's alert hook."""
        self._alert(message)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        metadata: Any,
        enable: Optional[EnableCallback],
        disable: Optional[DisableCallback] = None,
    ) -> str:
        """Register a plugin, schedule its load and return its validated name.

        The load runs once every declared dependency has loaded and the host
        view is bound, which may be immediately.

        Args:
            metadata: Mapping (or :class:`~plughost.models.PluginMetadata`)
                satisfying the plugin metadata schema.
            enable: Activation callback, called with a
                :class:`~plughost.plugins.api.PluginApi`. Its return value
                becomes the plugin's public value.
            disable: Optional deactivation callback, called with that value.

        Returns:
            The plugin name from the validated metadata.

        Raises:
            ValidationError: If *metadata* is malformed.
            ContractError: If *enable* is missing or not callable.
            DataVersionMismatch: If the load runs right away and the stored
                data version differs from the declared one.
        """
        validated = self._validator.validate(metadata)
        if enable is None or not callable(enable):
            raise ContractError(
                f"Plugin '{validated.name}' must be registered with an enable callback"
            )
        if disable is not None and not callable(disable):
            raise ContractError(f"Disable callback of plugin '{validated.name}' is not callable")

        record = PluginRecord(
            metadata=validated,
            raw_metadata=snapshot(metadata),
            enable_callback=enable,
            disable_callback=disable,
            dependencies=(*validated.dependencies, ENVIRONMENT_DEP),
        )
        self._registry.add(record)
        logger.info("Registered plugin '%s' v%d", validated.name, validated.version)

        deferred = self._graph.add(record.name, record.dependencies)
        deferred.add_done_callback(lambda _done: self._on_dependencies_resolved(record))
        return validated.name

    def _on_dependencies_resolved(self, record: PluginRecord) -> None:
        # A newer registration under the same name owns the slot now.
        if self._registry.get(record.name) is not record:
            logger.debug("Skipping load of replaced record for '%s'", record.name)
            return
        self.load(record)

    def resolve_view(self, view: Any) -> None:
        """Bind the host view, reload the enabled set and release waiting plugins.

        Raises:
            ContractError: If a view was already bound in this session.
        """
        if self._view_bound:
            raise ContractError("The host view can only be bound once per session")
        self._view = view
        self._view_bound = True
        self._enabled = self._read_enabled_set()
        logger.debug("Host view bound; enabled set: %s", sorted(self._enabled))
        self._graph.resolve(ENVIRONMENT_DEP, view)

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def load(self, record: PluginRecord) -> None:
        """Activate *record* if it is enabled, otherwise mark it ``Disabled``.

        Raises:
            DataVersionMismatch: If the stored data version differs from the
                declared one. The status is left as it was.
            Exception: Whatever the enable callback raises. The plugin is
                then ``Disabled`` and can be retried with
                :meth:`enable_plugin`.
        """
        if not self.is_enabled(record.name):
            record.mark_disabled()
            logger.info("Plugin '%s' is not enabled; leaving it disabled", record.name)
            return

        previous = record.status
        record.status = PluginStatus.LOADING
        try:
            self._check_data_version(record.metadata)
        except BaseException:
            record.status = previous
            raise

        try:
            value = record.enable_callback(PluginApi(record.name, self._view, self))
        except BaseException:
            # The graph waiter is spent; Disabled lets enable_plugin retry.
            record.mark_disabled()
            logger.error("Plugin '%s' failed to activate", record.name)
            raise
        record.mark_loaded(value)

        if not self.is_enabled(record.name):
            # enable() panicked or otherwise disabled itself.
            logger.warning("Plugin '%s' was disabled while activating", record.name)
            self.unload(record)
            return
        logger.info("Loaded plugin '%s'", record.name)
        self._graph.resolve(record.name, value)

    def unload(self, record: PluginRecord) -> None:
        """Deactivate a loaded plugin and mark it ``Disabled``.

        Without a disable callback the plugin cannot really be torn down, so
        the user is told (once per process) to restart.
        """
        if record.disable_callback is not None:
            record.disable_callback(record.value)
        else:
            logger.warning("Plugin '%s' has no disable callback", record.name)
            self._refresh_alert()
        record.mark_disabled()
        logger.info("Unloaded plugin '%s'", record.name)

    def enable_plugin(self, name: str) -> None:
        """Mark *name* enabled, persist it, and load it if currently ``Disabled``.

        Raises:
            DataVersionMismatch: If the reload finds incompatible stored data.
        """
        self._enabled[name] = True
        self._persist_enabled_set()
        record = self._registry.get(name)
        if record is not None and record.status is PluginStatus.DISABLED:
            self.load(record)

    def disable_plugin(self, name: str) -> None:
        """Remove *name* from the enabled set and unload it if it is loaded.

        Core plugins are never disabled.
        """
        if self.is_core(name):
            logger.info("Ignoring request to disable core plugin '%s'", name)
            return
        self._enabled.pop(name, None)
        self._persist_enabled_set()
        record = self._registry.get(name)
        if record is not None and record.is_loaded and not self.is_enabled(name):
            self.unload(record)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_core(self, name: str) -> bool:
        return name in self._core

    def is_enabled(self, name: str) -> bool:
        """Whether *name* is core or explicitly enabled. Has no side effects."""
        return name in self._core or self._enabled.get(name) is True

    def enabled_set(self) -> dict[str, bool]:
        return dict(self._enabled)

    def status(self, name: str) -> PluginStatus:
        return self._registry.status(name)

    def get_plugin(self, name: str) -> Any:
        """Public value of plugin *name*, or ``None`` unless it is ``Loaded``."""
        return self._registry.value(name)

    def get_plugin_names(self) -> list[str]:
        return self._registry.names()

    def get_record(self, name: str) -> Optional[PluginRecord]:
        return self._registry.get(name)

    # ------------------------------------------------------------------
    # Data versions
    # ------------------------------------------------------------------

    def get_data_version(self, name: str) -> Optional[int]:
        return self._data_store.get_data_version(name)

    def set_data_version(self, name: str, version: int) -> None:
        self._data_store.set_data_version(name, version)

    def _check_data_version(self, metadata: PluginMetadata) -> None:
        stored = self._data_store.get_data_version(metadata.name)
        if stored is None:
            self._data_store.set_data_version(metadata.name, metadata.data_version)
        elif stored != metadata.data_version:
            raise DataVersionMismatch(metadata.name, stored, metadata.data_version)

    # ------------------------------------------------------------------
    # Enabled set persistence
    # ------------------------------------------------------------------

    def _read_enabled_set(self) -> dict[str, bool]:
        value = self._settings.get(ENABLED_PLUGINS_KEY)
        if not isinstance(value, dict):
            return dict(self._default_enabled)
        return {str(k): v is True for k, v in value.items()}

    def _persist_enabled_set(self) -> None:
        self._settings.set(ENABLED_PLUGINS_KEY, dict(self._enabled))

    def _on_enabled_set_changed(self, value: Any) -> None:
        if isinstance(value, dict):
            self._enabled = {str(k): v is True for k, v in value.items()}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def shutdown(self) -> None:
        """Forget all records and pending registrations and stop listening to settings.

        Loaded plugins are not deactivated. Safe to call more than once.
        """
        self._registry.clear()
        self._graph.clear()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        logger.debug("Lifecycle controller shut down")

    def pending(self) -> dict[str, list[str]]:
        """Registrations still waiting, with the dependencies they wait for."""
        return self._graph.pending()
