"""Typer application and console-script entry point for shopcache.

The root callback installs the :class:`~shopcache.output.OutputManager`;
``--json`` and ``--plain`` win over the ``output.format`` setting.
Commands report their own :class:`~shopcache.exceptions.ShopCacheError`
failures; :func:`main` catches any that escape and exits with the error's
code.
"""

from __future__ import annotations

import sys

import typer

from shopcache import __version__
from shopcache.commands.config import config_app
from shopcache.commands.shop import attributes_command, clear_command
from shopcache.exceptions import ShopCacheError
from shopcache.output import OutputFormat, OutputManager, error, set_output


app = typer.Typer(
    name="shopcache",
    help="Read-through cache for shop attributes.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("attributes")(attributes_command)
app.command("clear")(clear_command)
app.add_typer(config_app, name="config", help="Show or change settings.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"shopcache {__version__}")
        raise typer.Exit()


def _configured_format() -> OutputFormat:
    from shopcache.config import load_global_config

    try:
        return OutputFormat(load_global_config().output.format)
    except ShopCacheError:
        # An unreadable config file is reported by the command that resolves it.
        return OutputFormat.AUTO


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print attributes as JSON."),
    plain_output: bool = typer.Option(
        False, "--plain", help="Print attributes as name<TAB>value lines."
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only print data, warnings and errors."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show cache hits, misses, and requests."
    ),
) -> None:
    """Read-through cache for shop attributes."""
    if json_output and plain_output:
        raise typer.BadParameter("--json and --plain are mutually exclusive.")

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _configured_format()

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))


def main() -> None:
    """Entry point for the ``shopcache`` console script."""
    try:
        app()
    except ShopCacheError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
