"""Plugin commands -- list, inspect, enable and disable plugins.

Every command starts the process-wide :class:`~plughost.session.Session`
(which registers installed plugins and binds the CLI view) before acting,
so statuses reflect a fully resolved session.
"""

from __future__ import annotations

import typer

from plughost.exceptions import PluginNotFoundError
from plughost.exit_codes import EXIT_CONTRACT_VIOLATION
from plughost.models import PluginStatus
from plughost.output import error, format_response, print_table, success, suggest, warning
from plughost.session import Session, get_session


plugins_app = typer.Typer(no_args_is_help=True)


def _session() -> Session:
    session = get_session()
    if not session.started:
        session.start()
    return session


@plugins_app.command("list")
def plugins_list() -> None:
    """List registered plugins with their status.

    Example::

        plughost plugins list
        plughost --json plugins list
    """
    controller = _session().controller
    rows = []
    for name in controller.get_plugin_names():
        record = controller.get_record(name)
        assert record is not None
        rows.append(
            [
                name,
                str(record.metadata.version),
                record.status.value,
                "core" if controller.is_core(name) else ("yes" if controller.is_enabled(name) else "no"),
                ", ".join(record.metadata.dependencies) or "-",
            ]
        )
    if not rows:
        suggest("No plugins registered. Install a package exposing 'plughost.plugins' entry points.")
        return
    print_table(["Name", "Version", "Status", "Enabled", "Dependencies"], rows, title="Plugins")


@plugins_app.command("status")
def plugins_status(name: str = typer.Argument(help="Plugin name.")) -> None:
    """Print the lifecycle status of a plugin.

    Unknown names report ``Unregistered``. A plugin stuck in ``Registered``
    is waiting for a dependency; the missing names are suggested.
    """
    controller = _session().controller
    status = controller.status(name)
    format_response(status.value)
    if status is PluginStatus.REGISTERED:
        waiting = controller.pending().get(name, [])
        if waiting:
            suggest(f"Waiting on: {', '.join(waiting)}")


@plugins_app.command("info")
def plugins_info(name: str = typer.Argument(help="Plugin name.")) -> None:
    """Show a plugin's metadata, status and stored data version.

    Exits with code 4 when no plugin of that name is registered.
    """
    controller = _session().controller
    record = controller.get_record(name)
    if record is None:
        raise PluginNotFoundError(f"Plugin '{name}' is not registered")
    format_response(
        {
            **record.metadata.model_dump(by_alias=True),
            "status": record.status.value,
            "enabled": controller.is_enabled(name),
            "core": controller.is_core(name),
            "storedDataVersion": controller.get_data_version(name),
        }
    )


@plugins_app.command("enable")
def plugins_enable(name: str = typer.Argument(help="Plugin name.")) -> None:
    """Enable a plugin and load it now if it is installed.

    Fails with exit code 8 if the plugin's stored data was written by an
    incompatible version.
    """
    controller = _session().controller
    controller.enable_plugin(name)
    status = controller.status(name)
    if status is PluginStatus.UNREGISTERED:
        warning(f"Plugin '{name}' is not installed; it will load once registered")
    success(f"Enabled {name} ({status.value})")


@plugins_app.command("disable")
def plugins_disable(name: str = typer.Argument(help="Plugin name.")) -> None:
    """Disable a plugin and unload it if it is running."""
    controller = _session().controller
    if controller.is_core(name):
        error(f"'{name}' is a core plugin and cannot be disabled")
        raise typer.Exit(code=EXIT_CONTRACT_VIOLATION)
    controller.disable_plugin(name)
    success(f"Disabled {name} ({controller.status(name).value})")


@plugins_app.command("pending")
def plugins_pending() -> None:
    """List plugins still waiting for dependencies.

    Missing and circular dependencies are never resolved automatically;
    this command only reports them.
    """
    controller = _session().controller
    pending = controller.pending()
    if not pending:
        success("No plugins are waiting for dependencies.")
        return
    print_table(
        ["Name", "Waiting on"],
        [[name, ", ".join(missing)] for name, missing in pending.items()],
        title="Pending plugins",
    )
    for cycle in controller.graph.cycles():
        warning(f"Circular dependency: {' -> '.join(cycle + cycle[:1])}")
