"""Typer application and CLI entry point for plughost.

Wires the root Typer app, registers the ``plugins`` and ``config`` command
groups, and maps errors to exit codes in :func:`main`, the console-script
entry point declared in ``pyproject.toml``. Unexpected exceptions are
written to a crash log under the data directory.
"""

from __future__ import annotations

import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

import typer
from rich.logging import RichHandler

from plughost import __version__
from plughost.commands.config import config_app
from plughost.commands.plugins import plugins_app
from plughost.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="plughost",
    help="Manage plugins of a plughost host application.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(plugins_app, name="plugins", help="Inspect, enable and disable plugins.")
app.add_typer(config_app, name="config", help="View and change the global configuration.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"plughost {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, console: Any) -> None:
    """Send ``plughost`` log records to stderr through Rich when verbose."""
    root = logging.getLogger("plughost")
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    if not verbose:
        return
    root.addHandler(RichHandler(console=console, show_path=False, rich_tracebacks=True))
    root.setLevel(logging.DEBUG)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output and logging."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmations."),
) -> None:
    """Apply global flags before any sub-command runs.

    Installs the global :class:`~plughost.output.OutputManager`, configures
    logging, and stores shared flags in ``ctx.obj``.
    """
    from plughost.config import load_global_config
    from plughost.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        try:
            fmt = OutputFormat(load_global_config().output.format)
        except ValueError:
            fmt = OutputFormat.AUTO

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _configure_logging(verbose, output.stderr_console)

    ctx.ensure_object(dict)
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


EXIT_INTERRUPTED = 130


def _save_crash_report(exc: BaseException) -> Path:
    """Write a traceback for *exc* under ``<data dir>/logs`` and return its path."""
    from plughost.config import get_data_dir

    report = get_data_dir() / "logs" / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    report.parent.mkdir(parents=True, exist_ok=True)
    header = f"plughost {__version__}\nargv: {' '.join(sys.argv)}\n\n"
    report.write_text(header + "".join(traceback.format_exception(exc)), encoding="utf-8")
    return report


def main() -> None:
    """CLI entry point invoked by the ``plughost`` console script.

    :class:`~plughost.exceptions.PlughostError` instances (including a
    plugin's data-version mismatch) exit with their ``exit_code``. Any
    other exception, such as one raised by plugin code, produces a crash
    report and a generic failure exit. The session is torn down either way.
    """
    from plughost.exceptions import PlughostError
    from plughost.output import error
    from plughost.session import reset_session

    try:
        app()
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)
    except PlughostError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error; details written to {_save_crash_report(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
    finally:
        reset_session()
