"""Exception hierarchy for shopcache.

All exceptions inherit from :class:`ShopCacheError`, which carries two
class-level tags:

* ``kind`` -- an :class:`ErrorKind` so that callers (and
  :class:`~shopcache.cache.shop.AttributesResult`) can branch on the failure
  category without matching on exception types.
* ``exit_code`` -- a constant from :mod:`shopcache.exit_codes` used by the
  CLI entry point in :func:`shopcache.app.main`.

Subclass hierarchy::

    ShopCacheError         GENERIC          (exit 1)
    +-- TransportError     TRANSPORT        (exit 6)
    +-- RequestError       UPSTREAM_STATUS  (exit 3 / 4 / 5, by status)
    +-- DecodeError        DECODE           (exit 7)
    +-- StoreError         STORE            (exit 8)
    +-- ConfigError        CONFIG           (exit 1)
    +-- InvalidUsageError  USAGE            (exit 2)

None of these are ever cached: a failed fetch leaves both cache tiers
untouched.
"""

from __future__ import annotations

import enum

from shopcache.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_STORE_ERROR,
    EXIT_UPSTREAM_ERROR,
)


class ErrorKind(str, enum.Enum):
    """Failure categories surfaced by the cache."""

    TRANSPORT = "transport"
    UPSTREAM_STATUS = "upstream_status"
    DECODE = "decode"
    STORE = "store"
    CONFIG = "config"
    USAGE = "usage"
    GENERIC = "generic"


class ShopCacheError(Exception):
    """Base exception for all shopcache errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    kind: ErrorKind = ErrorKind.GENERIC
    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class TransportError(ShopCacheError):
    """Raised on network-level failures (timeout, DNS resolution, TLS, connection refused).

    The originating :mod:`httpx` exception is always chained as
    ``__cause__``.
    """

    kind = ErrorKind.TRANSPORT
    exit_code = EXIT_CONNECTION_ERROR


class RequestError(ShopCacheError):
    """Raised when the shop endpoint answers with any status other than 200.

    Args:
        status_code: The HTTP status code of the response.
        message: Optional message; defaults to ``invalid response code <status>``.
    """

    kind = ErrorKind.UPSTREAM_STATUS

    def __init__(self, status_code: int, message: str | None = None):
        self.status_code = status_code
        super().__init__(
            message or f"invalid response code {status_code}",
            exit_code=_exit_code_for_status(status_code),
        )


class DecodeError(ShopCacheError):
    """Raised for malformed JSON or a payload without the ``shop`` envelope."""

    kind = ErrorKind.DECODE
    exit_code = EXIT_DECODE_ERROR


class StoreError(ShopCacheError):
    """Raised when the persistent key-value store fails a get, set, or delete."""

    kind = ErrorKind.STORE
    exit_code = EXIT_STORE_ERROR


class ConfigError(ShopCacheError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    kind = ErrorKind.CONFIG
    exit_code = EXIT_GENERIC_FAILURE


class InvalidUsageError(ShopCacheError):
    """Raised for invalid CLI arguments: an unknown attribute or config key, or a bad value."""

    kind = ErrorKind.USAGE
    exit_code = EXIT_INVALID_USAGE


def _exit_code_for_status(status_code: int) -> int:
    if status_code in (401, 403):
        return EXIT_AUTH_FAILURE
    if status_code == 404:
        return EXIT_NOT_FOUND
    return EXIT_UPSTREAM_ERROR
