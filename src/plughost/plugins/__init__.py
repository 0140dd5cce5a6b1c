"""Plugin lifecycle: registration, dependency-gated activation, enable/disable.

Key classes:

* :class:`LifecycleController` -- drives each plugin's state machine.
* :class:`PluginApi` -- capability handed to a plugin when it activates.
* :class:`DependencyGraph` -- parks registrations until their dependencies load.
* :class:`MetadataValidator` -- checks and completes plugin metadata.
* :class:`Plugin` -- optional base class for class-based plugins.

Example::

    from plughost.plugins import LifecycleController
    from plughost.stores import DataStore, SettingsStore

    controller = LifecycleController(SettingsStore(), DataStore())
    controller.register({"name": "Hello World"}, lambda api: "hi")
    controller.resolve_view(view)
"""

from plughost.plugins.api import PluginApi
from plughost.plugins.base import Plugin, register_plugin
from plughost.plugins.controller import LifecycleController
from plughost.plugins.discovery import ENTRY_POINT_GROUP, discover
from plughost.plugins.graph import Deferred, DependencyGraph
from plughost.plugins.registry import PluginRecord, PluginRegistry
from plughost.plugins.schema import MetadataValidator, PydanticSchemaValidator

__all__ = [
    "Deferred",
    "DependencyGraph",
    "ENTRY_POINT_GROUP",
    "LifecycleController",
    "MetadataValidator",
    "Plugin",
    "PluginApi",
    "PluginRecord",
    "PluginRegistry",
    "PydanticSchemaValidator",
    "discover",
    "register_plugin",
]
