"""plughost -- Dependency-gated plugin lifecycle manager for host applications.

Extensions register themselves with validated metadata and an activation
callback. Activation waits until every declared dependency (and the host
view) is ready, is gated on a persisted enable/disable preference, and hands
the plugin a scoped :class:`~plughost.plugins.api.PluginApi` capability.

Typical embedding::

    from plughost.session import Session

    session = Session.from_config()
    session.controller.register({"name": "Hello World"}, enable)
    session.start(view)

Modules:
    app: Typer application and console-script entry point.
    models: Pydantic models (plugin metadata, status, global config).
    config: XDG-aware configuration directories and persistence.
    stores: Settings and per-plugin data stores.
    session: Composition root owning the process-wide controller.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.3.0"
