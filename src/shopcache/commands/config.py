"""Config commands -- view and modify global configuration.

``shopcache config show`` prints the effective settings (file plus
``SHOPCACHE_*`` overrides). ``set`` changes one setting in ``config.json``
and ``reset`` restores the defaults.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import BaseModel, ValidationError

from shopcache.commands import fail
from shopcache.exceptions import InvalidUsageError, ShopCacheError
from shopcache.models import GlobalConfig
from shopcache.output import format_response, info, success


config_app = typer.Typer(no_args_is_help=True)

_NULL_WORDS = ("null", "none")


def _is_section(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def apply_setting(config: GlobalConfig, key: str, raw: str) -> GlobalConfig:
    """Return a copy of *config* with the dotted *key* set from the string *raw*.

    Pydantic does the type conversion, so ``"3600"`` becomes an ``int`` and
    ``"false"`` a ``bool``. ``null`` or ``none`` clear an optional setting.

    Raises:
        InvalidUsageError: If *key* does not name a setting, or *raw* is not
            a valid value for it.
    """
    *sections, name = key.split(".")
    data = config.model_dump()
    target, model = data, GlobalConfig
    for section in sections:
        field = model.model_fields.get(section)
        if field is None or not _is_section(field.annotation):
            raise InvalidUsageError(f"Invalid config key: {key}")
        target, model = target[section], field.annotation

    field = model.model_fields.get(name)
    if field is None or _is_section(field.annotation):
        raise InvalidUsageError(f"Unknown config key: {key}")

    target[name] = None if raw.lower() in _NULL_WORDS else raw
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        reason = exc.errors()[0]["msg"]
        raise InvalidUsageError(f"Invalid value for {key}: {raw!r} ({reason})") from exc


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration.

    Example::

        shopcache config show
        shopcache --json config show
    """
    from shopcache.config import get_config_dir, resolve_config

    try:
        config = resolve_config()
    except ShopCacheError as exc:
        raise fail(exc) from None
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Setting in dot notation, e.g. 'store.ttl_seconds'."
    ),
    value: str = typer.Argument(help="New value; 'null' clears an optional setting."),
) -> None:
    """Change one setting in the config file.

    Example::

        shopcache config set store.backend memory
        shopcache config set store.ttl_seconds 3600
        shopcache config set token_source file:~/.shop-token
    """
    from shopcache.config import load_global_config, save_global_config

    try:
        updated = apply_setting(load_global_config(), key, value)
    except ShopCacheError as exc:
        raise fail(exc) from None

    save_global_config(updated)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Restore the default configuration."""
    from shopcache.config import save_global_config

    if not force and not typer.confirm("Reset all settings to their defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
