"""Example plugin that counts words using the bundled Hello World plugin."""

from __future__ import annotations

from typing import Any

from plughost.plugins.api import PluginApi
from plughost.plugins.base import Plugin


class WordCounter:
    def __init__(self, api: PluginApi, greeting: str) -> None:
        self._api = api
        self.greeting = greeting

    def count(self, text: Any) -> int:
        """Count words in *text*, panicking the plugin on non-text input."""
        if not isinstance(text, str):
            self._api.panic()
            return 0
        words = len(text.split())
        self._api.set_data("words_seen", self._api.get_data("words_seen", 0) + words)
        return words


class WordCountPlugin(Plugin):
    """Needs ``Hello World`` loaded first; has no disable handler."""

    metadata = {
        "name": "Word Count",
        "version": 2,
        "description": "Counts words and remembers the running total",
        "dependencies": ["Hello World"],
        "dataVersion": 1,
    }

    def enable(self, api: PluginApi) -> WordCounter:
        greeter = api.get_plugin("Hello World")
        return WordCounter(api, greeter.greet("word counter"))
