"""Built-in CLI commands: ``attributes``, ``clear``, and the ``config`` group."""

from __future__ import annotations

import typer

from shopcache.exceptions import ErrorKind, ShopCacheError
from shopcache.exit_codes import EXIT_AUTH_FAILURE
from shopcache.output import error, suggest


def fail(exc: ShopCacheError) -> typer.Exit:
    """Report *exc* on stderr and return the ``typer.Exit`` carrying its exit code."""
    error(str(exc))
    if exc.kind == ErrorKind.UPSTREAM_STATUS and exc.exit_code == EXIT_AUTH_FAILURE:
        suggest("Check that the access token is valid and has access to the shop.")
    elif exc.kind == ErrorKind.CONFIG:
        suggest("Set the token source with --token-source or 'shopcache config set token_source'.")
    elif exc.kind == ErrorKind.USAGE:
        suggest("Run the command with --help for usage.")
    return typer.Exit(code=exc.exit_code)
