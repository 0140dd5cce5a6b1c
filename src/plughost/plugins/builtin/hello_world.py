"""The bundled ``Hello World`` plugin.

Enabled by default. It counts how many times it has been activated in the
plugin's own data slot and greets the host view when that view can print.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from plughost.plugins.api import PluginApi
from plughost.plugins.base import Plugin


@dataclass
class Greeter:
    """Public value of the plugin, reachable through ``get_plugin``."""

    activations: int

    def greet(self, who: str = "world") -> str:
        return f"Hello, {who}! (activation #{self.activations})"


class HelloWorldPlugin(Plugin):
    metadata = {
        "name": "Hello World",
        "version": 1,
        "author": "plughost",
        "description": "Greets the host and counts its activations",
        "dataVersion": 1,
    }

    def enable(self, api: PluginApi) -> Greeter:
        activations = api.get_data("activations", 0) + 1
        api.set_data("activations", activations)
        greeter = Greeter(activations)
        api.logger.debug("Activated %d time(s)", activations)

        announce: Any = getattr(api.view, "announce", None)
        if callable(announce):
            announce(greeter.greet())
        return greeter

    def disable(self, value: Greeter) -> None:
        """Nothing to release; defined so disabling needs no restart."""
