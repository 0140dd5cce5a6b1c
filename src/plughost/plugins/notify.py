"""Idempotent notifications."""

from __future__ import annotations

from typing import Callable


class OneShot:
    """Runs *action* the first time it is called and never again.

    Used for the per-capability ``panic`` and for the process-wide
    "refresh required" alert after unloading a plugin without a disable
    callback.

    Example::

        warn = OneShot(lambda: alert("Refresh to finish unloading"))
        warn()  # alerts
        warn()  # no-op
    """

    def __init__(self, action: Callable[[], None]) -> None:
        self._action = action
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def __call__(self) -> bool:
        """Run the action if it has not run yet. Returns whether it ran now."""
        if self._fired:
            return False
        # Set first so a re-entrant call from inside the action is a no-op.
        self._fired = True
        self._action()
        return True
