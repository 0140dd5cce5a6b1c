"""Entry-point discovery of installed plugins.

Packages advertise plugins under the ``plughost.plugins`` entry-point
group::

    [project.entry-points."plughost.plugins"]
    word-count = "word_count.plugin:WordCount"

Each entry point must resolve to a :class:`~plughost.plugins.base.Plugin`
subclass. :func:`discover` instantiates and registers them; the actual
loads happen once the host view is bound.
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import TYPE_CHECKING

from plughost.exceptions import ContractError, ValidationError
from plughost.plugins.base import Plugin, register_plugin

if TYPE_CHECKING:
    from plughost.plugins.controller import LifecycleController

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "plughost.plugins"
"""The entry-point group name used for plugin discovery."""


def discover(controller: "LifecycleController", group: str = ENTRY_POINT_GROUP) -> list[str]:
    """Register every plugin advertised under *group*.

    Entry points that fail to import, do not name a
    :class:`~plughost.plugins.base.Plugin` subclass, or carry invalid
    metadata are logged and skipped so one broken package cannot keep the
    others from registering. Errors raised while a plugin loads (which only
    happens here if the host view is already bound) propagate.

    Returns:
        Names of the plugins that were registered.
    """
    registered: list[str] = []
    for ep in importlib.metadata.entry_points(group=group):
        try:
            plugin_cls = ep.load()
        except Exception as exc:
            logger.warning("Failed to import plugin entry point '%s': %s", ep.name, exc)
            continue
        if not (isinstance(plugin_cls, type) and issubclass(plugin_cls, Plugin)):
            logger.warning("Entry point '%s' does not name a Plugin subclass; skipping", ep.name)
            continue
        try:
            registered.append(register_plugin(controller, plugin_cls()))
        except (ValidationError, ContractError) as exc:
            logger.warning("Rejected plugin from entry point '%s': %s", ep.name, exc)
    return registered
