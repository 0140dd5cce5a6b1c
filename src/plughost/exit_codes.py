"""Numeric process exit codes for the ``plughost`` CLI.

Each constant is referenced by the matching
:class:`~plughost.exceptions.PlughostError` subclass so that shell wrappers
can tell failure classes apart without parsing stderr.

Example::

    $ plughost plugins enable "Spell Check"
    $ echo $?
    8   # EXIT_DATA_VERSION_MISMATCH -- stored plugin data is incompatible
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was called with bad arguments, such as an unknown config key."""

EXIT_CONTRACT_VIOLATION = EXIT_INVALID_USAGE
"""A caller broke the plugin API contract (e.g. no activation callback)."""

EXIT_NOT_FOUND = 4
"""The named plugin is not registered."""

EXIT_VALIDATION_ERROR = 7
"""Plugin metadata failed schema validation."""

EXIT_DATA_VERSION_MISMATCH = 8
"""Persisted plugin data has a different data version than the plugin declares."""
