"""Composition root for a host session.

A :class:`Session` wires the settings store, the plugin data store and the
:class:`~plughost.plugins.controller.LifecycleController` together. Exactly
one session is live per process; it is installed with :func:`set_session`
and torn down with :func:`reset_session` (which clears all plugin records
and unsubscribes from settings).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from plughost import output
from plughost.config import get_plugin_data_dir, get_settings_path, load_global_config
from plughost.models import CORE_PLUGINS, GlobalConfig
from plughost.plugins.controller import LifecycleController
from plughost.plugins.discovery import discover
from plughost.stores import DataStore, SettingsStore

logger = logging.getLogger(__name__)


class CliView:
    """Host view used by the ``plughost`` CLI.

    Plugins receive it as ``api.view``. Messages they announce are shown as
    debug output so they do not pollute command results.
    """

    def announce(self, message: str) -> None:
        output.debug(message)


class Session:
    """Owns the stores and the lifecycle controller for one host session.

    Args:
        config: Global configuration the session was built from.
        settings: Host settings store.
        data_store: Plugin data store.
        controller: The lifecycle controller using both stores.
    """

    def __init__(
        self,
        config: GlobalConfig,
        settings: SettingsStore,
        data_store: DataStore,
        controller: LifecycleController,
    ) -> None:
        self.config = config
        self.settings = settings
        self.data_store = data_store
        self.controller = controller
        self._started = False
        self._closed = False

    @property
    def started(self) -> bool:
        return self._started

    @classmethod
    def from_config(
        cls,
        config: Optional[GlobalConfig] = None,
        alert: Optional[Callable[[str], None]] = None,
        core_plugins: Iterable[str] = CORE_PLUGINS,
    ) -> "Session":
        """Build a session backed by the on-disk settings and data stores.

        Args:
            config: Global config; loaded from disk when ``None``.
            alert: User alert hook passed to the controller.
            core_plugins: Names exempt from the enabled-set gate.
        """
        if config is None:
            config = load_global_config()
        settings = SettingsStore(get_settings_path())
        data_store = DataStore(get_plugin_data_dir(config))
        controller = LifecycleController(
            settings,
            data_store,
            alert=alert,
            core_plugins=core_plugins,
            default_enabled=config.plugins.default_enabled,
        )
        return cls(config, settings, data_store, controller)

    def start(self, view: Any = None) -> list[str]:
        """Register installed plugins (if autoload is on) and bind the host view.

        Args:
            view: Host view handed to plugins; defaults to :class:`CliView`.

        Returns:
            Names registered through entry-point discovery.

        Raises:
            DataVersionMismatch: If a plugin's stored data is incompatible.
        """
        self._started = True
        registered: list[str] = []
        if self.config.plugins.autoload:
            registered = discover(self.controller)
            logger.debug("Discovered plugins: %s", registered)
        self.controller.resolve_view(view if view is not None else CliView())
        return registered

    def close(self) -> None:
        """Shut the controller down and close the data store. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self.controller.shutdown()
        self.data_store.close()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


# ------------------------------------------------------------------ #
# Process-wide session
# ------------------------------------------------------------------ #

_session: Optional[Session] = None


def get_session() -> Session:
    """Return the live session, creating one from the on-disk config lazily."""
    global _session
    if _session is None:
        _session = Session.from_config()
    return _session


def set_session(session: Session) -> None:
    """Install *session* as the live session, closing any previous one."""
    global _session
    if _session is not None and _session is not session:
        _session.close()
    _session = session


def reset_session() -> None:
    """Close and drop the live session."""
    global _session
    if _session is not None:
        _session.close()
    _session = None
