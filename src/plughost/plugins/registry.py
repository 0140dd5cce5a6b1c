"""Plugin record table.

The registry is the single owner of :class:`PluginRecord` objects. Records
are keyed by plugin name; registering a name again swaps in the new record
without touching the old one (its value, if loaded, is simply dropped).
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

from plughost.models import PluginMetadata, PluginStatus

logger = logging.getLogger(__name__)

EnableCallback = Callable[[Any], Any]
DisableCallback = Callable[[Any], None]


@dataclass
class PluginRecord:
    """Immutable metadata plus the mutable runtime state of one plugin.

    Attributes:
        metadata: Validated metadata.
        raw_metadata: Deep copy of the mapping passed to ``register``.
        enable_callback: Activation function, called with a
            :class:`~plughost.plugins.api.PluginApi`.
        disable_callback: Optional deactivation function, called with the
            value returned by *enable_callback*.
        dependencies: Declared dependencies plus the environment dependency.
        status: Current lifecycle state.
        value: What *enable_callback* returned; only meaningful while
            ``status`` is ``Loaded``.
    """

    metadata: PluginMetadata
    raw_metadata: dict[str, Any]
    enable_callback: EnableCallback
    disable_callback: Optional[DisableCallback] = None
    dependencies: tuple[str, ...] = ()
    status: PluginStatus = PluginStatus.REGISTERED
    value: Any = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def is_loaded(self) -> bool:
        return self.status is PluginStatus.LOADED

    def mark_loaded(self, value: Any) -> None:
        self.value = value
        self.status = PluginStatus.LOADED

    def mark_disabled(self) -> None:
        self.value = None
        self.status = PluginStatus.DISABLED


class PluginRegistry:
    """Name-keyed table of :class:`PluginRecord` objects, in registration order."""

    def __init__(self) -> None:
        self._records: dict[str, PluginRecord] = {}

    def add(self, record: PluginRecord) -> Optional[PluginRecord]:
        """Store *record*, returning the record it replaced, if any."""
        previous = self._records.pop(record.name, None)
        if previous is not None:
            logger.warning(
                "Plugin '%s' registered again; replacing record in state %s",
                record.name,
                previous.status.value,
            )
        self._records[record.name] = record
        return previous

    def get(self, name: str) -> Optional[PluginRecord]:
        return self._records.get(name)

    def names(self) -> list[str]:
        return list(self._records)

    def status(self, name: str) -> PluginStatus:
        """Status of *name*; ``Unregistered`` when there is no record."""
        record = self._records.get(name)
        return record.status if record is not None else PluginStatus.UNREGISTERED

    def value(self, name: str) -> Any:
        """The live value of *name*, or ``None`` unless it is ``Loaded``."""
        record = self._records.get(name)
        if record is None or not record.is_loaded:
            return None
        return record.value

    def clear(self) -> None:
        self._records.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __iter__(self) -> Iterator[PluginRecord]:
        return iter(list(self._records.values()))

    def __len__(self) -> int:
        return len(self._records)


def snapshot(raw: Any) -> dict[str, Any]:
    """Deep copy of the caller's metadata mapping, kept for reference."""
    if isinstance(raw, PluginMetadata):
        return raw.model_dump(by_alias=True)
    try:
        return copy.deepcopy(dict(raw))
    except (TypeError, ValueError):
        return {}
