"""Config commands -- view and modify settings.

Provides the ``yggauth config`` sub-command group for reading and updating
the user's :class:`~yggauth.config.Settings` file.  Environment overrides
(``YGGAUTH_*``) are applied on top of what ``show`` prints from disk.
"""

from __future__ import annotations

import json

import typer

from yggauth.output import error, get_output, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective settings.

    Example::

        yggauth config show
    """
    from yggauth.config import get_config_dir, load_settings
    from yggauth.exceptions import ConfigError

    try:
        settings = load_settings()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config directory: {get_config_dir()}")
    get_output().print_data(json.dumps(settings.model_dump(mode="json"), indent=2))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Setting name, e.g. 'timeout'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a setting and save it.

    The value is validated against :class:`~yggauth.config.Settings`
    before saving.

    Example::

        yggauth config set timeout 10
        yggauth config set keyring_service my-launcher
    """
    from pydantic import ValidationError

    from yggauth.config import Settings, load_settings, save_settings
    from yggauth.exceptions import ConfigError

    try:
        data = load_settings().model_dump(mode="json")
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if key not in data:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    data[key] = value
    try:
        settings = Settings.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_settings(settings)
    success(f"Set {key} = {getattr(settings, key)}")
