"""Class-based plugins.

Plugins can call :meth:`LifecycleController.register` directly with a
metadata mapping and callbacks, or subclass :class:`Plugin` and hand an
instance to :func:`register_plugin`. The class form is what entry-point
discovery expects.

Example::

    class WordCount(Plugin):
        metadata = {"name": "Word Count", "dependencies": ["Editor"]}

        def enable(self, api):
            editor = api.get_plugin("Editor")
            return WordCounter(editor)

        def disable(self, value):
            value.close()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Mapping, Union

if TYPE_CHECKING:
    from plughost.models import PluginMetadata
    from plughost.plugins.api import PluginApi
    from plughost.plugins.controller import LifecycleController


class Plugin(ABC):
    """Base class for class-based plugins.

    Subclasses provide :attr:`metadata` (a class attribute or property,
    either a mapping or a :class:`~plughost.models.PluginMetadata`) and
    implement :meth:`enable`. Overriding :meth:`disable` is optional; a
    plugin that does not override it is registered without a disable
    callback, so turning it off asks the user to restart.
    """

    metadata: Union[Mapping[str, Any], "PluginMetadata"] = {}

    @abstractmethod
    def enable(self, api: "PluginApi") -> Any:
        """Activate the plugin and return its public value.

        Other plugins receive that value from ``api.get_plugin(name)``.
        """

    def disable(self, value: Any) -> None:
        """Tear down what :meth:`enable` set up. *value* is its return value."""

    @property
    def has_disable(self) -> bool:
        """Whether the subclass overrides :meth:`disable`."""
        return type(self).disable is not Plugin.disable


def register_plugin(controller: "LifecycleController", plugin: Plugin) -> str:
    """Register *plugin* with *controller* and return its validated name.

    Raises:
        ValidationError: If the plugin's metadata is malformed.
    """
    return controller.register(
        plugin.metadata,
        plugin.enable,
        plugin.disable if plugin.has_disable else None,
    )
