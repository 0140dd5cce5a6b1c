"""Canonical Pydantic models shared across plughost modules.

Two groups live here:

**Plugin models** -- the metadata contract every plugin must satisfy and the
lifecycle status reported for it:
    :class:`PluginMetadata` and :class:`PluginStatus`.

**Configuration models** -- serialised as JSON in the user's config
directory:
    :class:`OutputConfig`, :class:`PluginsConfig`, :class:`DataConfig` and
    :class:`GlobalConfig`.

The module also owns the well-known names shared by the controller, the
stores and the CLI (:data:`ENVIRONMENT_DEP`, :data:`ENABLED_PLUGINS_KEY`,
:data:`DEFAULT_ENABLED_PLUGINS`, :data:`CORE_PLUGINS`).
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Well-known names ---

ENVIRONMENT_DEP = "$environment"
"""Implicit dependency of every plugin, resolved with the host view.

``$`` is outside the plugin name pattern, so no plugin can shadow it.
"""

ENABLED_PLUGINS_KEY = "enabledPlugins"
"""Settings key holding the persisted enabled set."""

DEFAULT_ENABLED_PLUGINS: dict[str, bool] = {"Hello World": True}
"""Seed for the enabled set when nothing has been persisted yet."""

CORE_PLUGINS: frozenset[str] = frozenset()
"""Plugins that are always enabled and can never be disabled.

Hosts pass their own set to the controller; the stock CLI ships none.
"""

PLUGIN_NAME_PATTERN = r"^[A-Za-z0-9_ ]{3,20}$"


# --- Plugin models ---


class PluginStatus(str, enum.Enum):
    """Lifecycle state of a plugin as reported by ``status(name)``."""

    UNREGISTERED = "Unregistered"
    REGISTERED = "Registered"
    LOADING = "Loading"
    DISABLED = "Disabled"
    LOADED = "Loaded"


class PluginMetadata(BaseModel):
    """Validated plugin metadata.

    Field types are checked strictly: ``"2"`` is not a valid ``version`` and
    ``True`` is not a valid ``data_version``. Unknown keys are dropped here but
    survive in the registry's raw snapshot.

    Example::

        PluginMetadata.model_validate({"name": "Hello World", "dataVersion": 2})
    """

    model_config = ConfigDict(
        strict=True, frozen=True, extra="ignore", populate_by_name=True
    )

    name: str = Field(
        pattern=PLUGIN_NAME_PATTERN,
        description="Unique plugin name: 3-20 letters, digits, underscores or spaces",
    )
    version: int = Field(default=1, ge=1, description="Plugin release number")
    author: Optional[str] = None
    description: Optional[str] = None
    dependencies: list[str] = Field(
        default_factory=list, description="Names of plugins that must load first"
    )
    data_version: int = Field(
        default=1,
        ge=1,
        alias="dataVersion",
        description="Shape version of the plugin's persisted data",
    )


# --- Configuration models ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class PluginsConfig(BaseModel):
    """Plugin loading preferences stored in :class:`GlobalConfig`."""

    autoload: bool = Field(
        default=True, description="Register plugins found through entry points"
    )
    default_enabled: dict[str, bool] = Field(
        default_factory=lambda: dict(DEFAULT_ENABLED_PLUGINS),
        description="Enabled set used until the user enables or disables a plugin",
    )


class DataConfig(BaseModel):
    """Where per-plugin data is kept."""

    directory: Optional[str] = Field(
        default=None,
        description="Plugin data directory (default: <data dir>/plugin-data)",
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/plughost/config.json``.

    Loaded and saved by :func:`~plughost.config.load_global_config` and
    :func:`~plughost.config.save_global_config`.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    data: DataConfig = Field(default_factory=DataConfig)
