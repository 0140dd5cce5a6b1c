"""Tests for class-based plugins, entry-point discovery and the bundled plugins."""

from __future__ import annotations

from typing import Any, Callable
from unittest.mock import patch

import pytest

from plughost.exceptions import ValidationError
from plughost.models import PluginMetadata, PluginStatus
from plughost.plugins.base import Plugin, register_plugin
from plughost.plugins.builtin.hello_world import Greeter, HelloWorldPlugin
from plughost.plugins.controller import REFRESH_REQUIRED_MESSAGE, LifecycleController
from plughost.plugins.discovery import ENTRY_POINT_GROUP, discover
from plugins.example_plugin.plugin import WordCountPlugin


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class NoDisablePlugin(Plugin):
    metadata = {"name": "No Disable"}

    def enable(self, api: Any) -> str:
        return "nd"


class TypedMetadataPlugin(Plugin):
    metadata = PluginMetadata(name="Typed Meta", version=3)

    def enable(self, api: Any) -> str:
        return "typed"


class BadMetadataPlugin(Plugin):
    metadata = {"name": "x"}

    def enable(self, api: Any) -> None:
        return None


class NotAPlugin:
    pass


class MockEP:
    def __init__(self, name: str, target: Any = None, error: Exception | None = None) -> None:
        self.name = name
        self._target = target
        self._error = error

    def load(self) -> Any:
        if self._error is not None:
            raise self._error
        return self._target


class AnnouncingView:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def announce(self, message: str) -> None:
        self.messages.append(message)


def _patch_entry_points(eps: list[MockEP]):
    def fake_entry_points(group: str) -> list[MockEP]:
        return eps if group == ENTRY_POINT_GROUP else []

    return patch(
        "plughost.plugins.discovery.importlib.metadata.entry_points",
        side_effect=fake_entry_points,
    )


# ---------------------------------------------------------------------------
# Plugin base class
# ---------------------------------------------------------------------------


class TestPluginBase:
    def test_abstract_enable(self) -> None:
        with pytest.raises(TypeError):
            Plugin()  # type: ignore[abstract]

    def test_has_disable(self) -> None:
        assert HelloWorldPlugin().has_disable is True
        assert NoDisablePlugin().has_disable is False

    def test_register_plugin_returns_name(self, controller: LifecycleController) -> None:
        assert register_plugin(controller, NoDisablePlugin()) == "No Disable"
        assert controller.get_record("No Disable").disable_callback is None

    def test_register_plugin_accepts_model_metadata(self, controller: LifecycleController) -> None:
        assert register_plugin(controller, TypedMetadataPlugin()) == "Typed Meta"
        assert controller.get_record("Typed Meta").metadata.version == 3

    def test_register_plugin_passes_disable(self, controller: LifecycleController) -> None:
        register_plugin(controller, HelloWorldPlugin())
        assert controller.get_record("Hello World").disable_callback is not None

    def test_register_plugin_validates(self, controller: LifecycleController) -> None:
        with pytest.raises(ValidationError):
            register_plugin(controller, BadMetadataPlugin())


# ---------------------------------------------------------------------------
# Entry-point discovery
# ---------------------------------------------------------------------------


class TestDiscovery:
    def test_registers_advertised_plugins(self, controller: LifecycleController) -> None:
        eps = [MockEP("hello-world", HelloWorldPlugin), MockEP("no-disable", NoDisablePlugin)]
        with _patch_entry_points(eps):
            registered = discover(controller)
        assert registered == ["Hello World", "No Disable"]
        assert controller.status("Hello World") is PluginStatus.REGISTERED

    def test_skips_broken_entry_points(self, controller: LifecycleController, caplog) -> None:
        eps = [
            MockEP("broken", error=ImportError("no module named broken")),
            MockEP("not-a-plugin", NotAPlugin),
            MockEP("bad-metadata", BadMetadataPlugin),
            MockEP("hello-world", HelloWorldPlugin),
        ]
        with caplog.at_level("WARNING", logger="plughost.plugins.discovery"):
            with _patch_entry_points(eps):
                registered = discover(controller)

        assert registered == ["Hello World"]
        text = caplog.text
        assert "broken" in text
        assert "not-a-plugin" in text
        assert "bad-metadata" in text

    def test_other_group_is_empty(self, controller: LifecycleController) -> None:
        with _patch_entry_points([MockEP("hello-world", HelloWorldPlugin)]):
            assert discover(controller, group="something.else") == []


# ---------------------------------------------------------------------------
# Bundled and example plugins
# ---------------------------------------------------------------------------


class TestHelloWorld:
    def test_greets_view_and_counts_activations(self, make_controller: Callable) -> None:
        controller = make_controller(default_enabled={"Hello World": True})
        view = AnnouncingView()
        register_plugin(controller, HelloWorldPlugin())
        controller.resolve_view(view)

        greeter = controller.get_plugin("Hello World")
        assert isinstance(greeter, Greeter)
        assert greeter.activations == 1
        assert view.messages == ["Hello, world! (activation #1)"]

        controller.disable_plugin("Hello World")
        controller.enable_plugin("Hello World")
        assert controller.get_plugin("Hello World").activations == 2

    def test_view_without_announce(self, make_controller: Callable) -> None:
        controller = make_controller(default_enabled={"Hello World": True})
        register_plugin(controller, HelloWorldPlugin())
        controller.resolve_view(object())
        assert controller.status("Hello World") is PluginStatus.LOADED


class TestWordCountExample:
    @pytest.fixture
    def loaded(self, make_controller: Callable) -> LifecycleController:
        controller = make_controller(default_enabled={"Hello World": True, "Word Count": True})
        register_plugin(controller, WordCountPlugin())
        register_plugin(controller, HelloWorldPlugin())
        controller.resolve_view(object())
        return controller

    def test_loads_after_hello_world(self, loaded: LifecycleController) -> None:
        counter = loaded.get_plugin("Word Count")
        assert counter.greeting == "Hello, word counter! (activation #1)"

    def test_counts_and_remembers(self, loaded: LifecycleController) -> None:
        counter = loaded.get_plugin("Word Count")
        assert counter.count("one two three") == 3
        assert counter.count("four") == 1
        assert loaded.data_store.get("Word Count", "words_seen") == 4

    def test_bad_input_panics(self, loaded: LifecycleController, alerts) -> None:
        counter = loaded.get_plugin("Word Count")
        assert counter.count(42) == 0
        assert loaded.status("Word Count") is PluginStatus.DISABLED
        assert alerts.messages == [
            "The plugin 'Word Count' encountered a major problem and has been disabled.",
            REFRESH_REQUIRED_MESSAGE,
        ]
        assert loaded.status("Hello World") is PluginStatus.LOADED
