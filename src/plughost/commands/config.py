"""Config commands -- view and modify the global configuration.

``plughost config show|set|reset`` operate on the
:class:`~plughost.models.GlobalConfig` file. Keys are ``section.field``
(``plugins.autoload``, ``data.directory``); values are parsed as JSON when
possible and otherwise taken as plain strings, then validated by the
config models.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from pydantic import ValidationError as PydanticValidationError

from plughost.config import get_config_dir, load_global_config, save_global_config
from plughost.exit_codes import EXIT_INVALID_USAGE
from plughost.models import GlobalConfig
from plughost.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


def _parse_value(raw: str) -> Any:
    """JSON literal if *raw* is one (``false``, ``3``, ``{...}``), else the string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    info(f"Config directory: {get_config_dir()}")
    format_response(load_global_config().model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Setting as section.field, e.g. 'plugins.autoload'."),
    value: str = typer.Argument(help="New value; JSON literals are parsed."),
) -> None:
    """Change one configuration value.

    Example::

        plughost config set output.format json
        plughost config set plugins.autoload false
        plughost config set plugins.default_enabled '{"Hello World": false}'
    """
    section, _, field = key.partition(".")
    section_type = GlobalConfig.model_fields.get(section)
    if section_type is None or not field or field not in section_type.annotation.model_fields:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    data = load_global_config().model_dump(mode="json")
    data[section][field] = _parse_value(value)
    try:
        updated = GlobalConfig.model_validate(data)
    except PydanticValidationError as exc:
        problems = "; ".join(err["msg"] for err in exc.errors(include_url=False))
        error(f"Invalid value for {key}: {problems}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(updated)
    success(f"Set {key} = {getattr(getattr(updated, section), field)!r}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Restore the default configuration. Asks first unless ``--force`` is given."""
    forced = bool(ctx.obj and ctx.obj.get("force"))
    if not forced and not typer.confirm("Restore the default configuration?"):
        info("Nothing changed.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration restored to defaults.")
