"""Tests for plughost.session: wiring stores, discovery and the host view."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from plughost.models import ENABLED_PLUGINS_KEY, GlobalConfig, PluginsConfig, PluginStatus
from plughost.plugins.builtin.hello_world import HelloWorldPlugin
from plughost.session import CliView, Session, get_session, reset_session, set_session


class _EP:
    name = "hello-world"

    def load(self) -> type:
        return HelloWorldPlugin


class TestSession:
    def test_from_config_uses_config_paths(self, isolated_config: Path) -> None:
        with Session.from_config(GlobalConfig()) as session:
            assert session.settings.path == isolated_config / "config" / "plughost" / "settings.json"
            assert Path(session.data_store.directory) == (
                isolated_config / "data" / "plughost" / "plugin-data"
            )

    def test_start_discovers_and_binds_view(self, isolated_config: Path) -> None:
        with Session.from_config(GlobalConfig()) as session:
            with patch(
                "plughost.plugins.discovery.importlib.metadata.entry_points",
                return_value=[_EP()],
            ):
                registered = session.start()

            assert session.started
            assert registered == ["Hello World"]
            assert isinstance(session.controller.view, CliView)
            assert session.controller.status("Hello World") is PluginStatus.LOADED

    def test_autoload_off_skips_discovery(self, isolated_config: Path) -> None:
        config = GlobalConfig(plugins=PluginsConfig(autoload=False))
        with Session.from_config(config) as session:
            with patch("plughost.session.discover") as discover:
                assert session.start() == []
            discover.assert_not_called()

    def test_default_enabled_comes_from_config(self, isolated_config: Path) -> None:
        config = GlobalConfig(plugins=PluginsConfig(default_enabled={"Word Count": True}))
        with Session.from_config(config) as session:
            assert session.controller.is_enabled("Word Count")
            assert not session.controller.is_enabled("Hello World")

    def test_enabled_set_persists_across_sessions(self, isolated_config: Path) -> None:
        config = GlobalConfig(plugins=PluginsConfig(autoload=False))
        with Session.from_config(config) as session:
            session.controller.enable_plugin("Word Count")
        with Session.from_config(config) as session:
            assert session.settings.get(ENABLED_PLUGINS_KEY)["Word Count"] is True
            assert session.controller.is_enabled("Word Count")

    def test_close_is_idempotent(self, isolated_config: Path) -> None:
        session = Session.from_config(GlobalConfig())
        session.controller.register({"name": "Hello World"}, lambda api: None)
        session.close()
        session.close()
        assert session.controller.get_plugin_names() == []


class TestGlobalSession:
    def test_get_session_is_lazy_singleton(self, isolated_config: Path) -> None:
        assert get_session() is get_session()

    def test_set_session_closes_previous(self, isolated_config: Path) -> None:
        first = Session.from_config(GlobalConfig())
        second = Session.from_config(GlobalConfig())
        set_session(first)
        first.controller.register({"name": "Hello World"}, lambda api: None)
        set_session(second)
        assert first.controller.get_plugin_names() == []
        assert get_session() is second

    def test_reset_session(self, isolated_config: Path) -> None:
        session = get_session()
        reset_session()
        assert get_session() is not session
