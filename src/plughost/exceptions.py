"""Exception hierarchy for plughost.

All exceptions inherit from :class:`PlughostError`, which carries an
``exit_code`` taken from :mod:`plughost.exit_codes`. The CLI entry point in
:func:`plughost.app.main` turns these into clean exits; anything else is
treated as a crash.

Subclass hierarchy::

    PlughostError (exit 1)
    +-- ValidationError        (exit 7)
    +-- ContractError          (exit 2)
    +-- DataVersionMismatch    (exit 8)
    +-- PluginNotFoundError    (exit 4)
    +-- ConfigError            (exit 1)
"""

from __future__ import annotations

from typing import Any, Optional

from plughost.exit_codes import (
    EXIT_CONTRACT_VIOLATION,
    EXIT_DATA_VERSION_MISMATCH,
    EXIT_GENERIC_FAILURE,
    EXIT_NOT_FOUND,
    EXIT_VALIDATION_ERROR,
)


class PlughostError(Exception):
    """Base exception for all plughost errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ValidationError(PlughostError):
    """Raised when plugin metadata does not satisfy the metadata schema.

    Attributes:
        errors: The schema violation details, one dict per failing field
            (``loc``, ``msg``, ``type`` keys as reported by pydantic).
    """

    exit_code = EXIT_VALIDATION_ERROR

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class ContractError(PlughostError):
    """Raised when a caller breaks the API contract.

    Registering without an activation callback, or binding the host view a
    second time in one session.
    """

    exit_code = EXIT_CONTRACT_VIOLATION


class DataVersionMismatch(PlughostError):
    """Raised when a plugin's stored data version differs from the declared one.

    There is no migration path: the plugin stays in the state it had before
    the load attempt.
    """

    exit_code = EXIT_DATA_VERSION_MISMATCH

    def __init__(self, name: str, stored: int, declared: int):
        super().__init__(
            f"Plugin '{name}' declares data version {declared} "
            f"but stored data has version {stored}"
        )
        self.name = name
        self.stored = stored
        self.declared = declared


class PluginNotFoundError(PlughostError):
    """Raised when a command refers to a plugin name that is not registered."""

    exit_code = EXIT_NOT_FOUND


class ConfigError(PlughostError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
