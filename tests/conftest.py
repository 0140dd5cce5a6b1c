"""Shared test fixtures for plughost.

Provides isolated config directories, in-memory settings, temporary data
stores, a recording alert hook, and a ready-made lifecycle controller.
Fixtures are discovered by pytest automatically.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from plughost.output import reset_output
from plughost.plugins.controller import LifecycleController
from plughost.session import reset_session
from plughost.stores import DataStore, SettingsStore


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals_between_tests() -> None:
    """Drop the global OutputManager and Session after every test.

    The OutputManager caches sys.stdout/sys.stderr, which CliRunner swaps
    out; the Session holds an open diskcache directory under tmp_path.
    """
    yield
    reset_session()
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG directories at tmp_path so tests never touch real user config.

    Also clears ``PLUGHOST_DATA_DIR`` and changes into tmp_path.

    Returns:
        The tmp_path root.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("plughost.config._is_xdg_platform", lambda: True)
    monkeypatch.delenv("PLUGHOST_DATA_DIR", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Stores and controller
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> SettingsStore:
    """An in-memory settings store."""
    return SettingsStore()


@pytest.fixture
def data_store(tmp_path: Path) -> DataStore:
    """A diskcache-backed data store under tmp_path."""
    store = DataStore(tmp_path / "plugin-data")
    yield store
    store.close()


class AlertRecorder:
    """Alert hook that remembers every message."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def alerts() -> AlertRecorder:
    return AlertRecorder()


@pytest.fixture
def make_controller(
    settings: SettingsStore, data_store: DataStore, alerts: AlertRecorder
) -> Callable[..., LifecycleController]:
    """Factory for controllers sharing the test's stores and alert recorder."""

    def _make(**kwargs: Any) -> LifecycleController:
        kwargs.setdefault("alert", alerts)
        kwargs.setdefault("default_enabled", {})
        return LifecycleController(settings, data_store, **kwargs)

    return _make


@pytest.fixture
def controller(make_controller: Callable[..., LifecycleController]) -> LifecycleController:
    """A controller with an empty default enabled set and no core plugins."""
    return make_controller()

