"""Built-in CLI commands for plughost.

* ``plugins`` -- inspect plugins and toggle the enabled set
  (:mod:`plughost.commands.plugins`).
* ``config`` -- view and modify the global configuration
  (:mod:`plughost.commands.config`).
"""
