"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~shopcache.exceptions.ShopCacheError` subclass.
Shell wrappers can inspect the exit code to tell a rejected access token
from an unreachable shop without parsing stderr.

Example::

    $ shopcache attributes acme.myshopify.com
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the access token was rejected
"""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""The shop rejected the access token (HTTP 401 / 403)."""

EXIT_NOT_FOUND = 4
"""The shop endpoint was not found (HTTP 404)."""

EXIT_UPSTREAM_ERROR = 5
"""The shop answered with any other non-200 status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, TLS, connection refused)."""

EXIT_DECODE_ERROR = 7
"""The response body (or a stored entry) was not the expected JSON document."""

EXIT_STORE_ERROR = 8
"""The persistent key-value store failed."""
