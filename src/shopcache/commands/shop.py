"""Shop commands -- read and invalidate cached shop attributes.

``shopcache attributes`` prints the attributes of a shop, going through the
configured persistent store so repeated invocations (from any process
sharing the store) skip the API. ``shopcache clear`` drops the stored entry.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional

import typer

from shopcache.cache import Cache, ShopCache
from shopcache.cache.shop import ATTRIBUTES_KEY
from shopcache.commands import fail
from shopcache.exceptions import InvalidUsageError, ShopCacheError
from shopcache.models import StoreConfig
from shopcache.output import format_response, success
from shopcache.store import KeyValueStore, open_store


@contextmanager
def _opened_store(config: StoreConfig) -> Iterator[KeyValueStore]:
    store = open_store(config)
    try:
        yield store
    finally:
        close = getattr(store, "close", None)
        if close is not None:
            close()


def _select(attributes: dict[str, Any], field: Optional[str], domain: str) -> Any:
    if field is None:
        return attributes
    if field not in attributes:
        raise InvalidUsageError(f"Unknown attribute '{field}' for {domain}")
    return attributes[field]


def attributes_command(
    domain: str = typer.Argument(help="The shop's myshopify domain."),
    refresh: bool = typer.Option(
        False, "--refresh", "-r", help="Clear the cache and fetch from the API."
    ),
    field: Optional[str] = typer.Option(
        None, "--field", help="Print only this attribute."
    ),
    token_source: Optional[str] = typer.Option(
        None, "--token-source", help="Access token source: env:VAR, file:/path, prompt."
    ),
) -> None:
    """Print the attributes of a shop.

    Example::

        shopcache attributes acme.myshopify.com
        shopcache --json attributes acme.myshopify.com --refresh
        shopcache --plain attributes acme.myshopify.com --field currency
    """
    from shopcache.config import resolve_config, resolve_credential

    try:
        config = resolve_config(token_source=token_source)
        access_token = resolve_credential(config.token_source)
        with _opened_store(config.store) as store:
            shop = ShopCache(domain, access_token, store=store, request_config=config.request)
            attributes = shop.refresh_attributes() if refresh else shop.attributes()
        format_response(_select(attributes, field, domain))
    except ShopCacheError as exc:
        raise fail(exc) from None


def clear_command(
    domain: str = typer.Argument(help="The shop's myshopify domain."),
) -> None:
    """Remove a shop's cached attributes from the persistent store.

    No access token is needed; only the configured store is touched.
    """
    from shopcache.config import resolve_config

    try:
        with _opened_store(resolve_config().store) as store:
            Cache(store).clear(ShopCache.namespace_for(domain), ATTRIBUTES_KEY)
    except ShopCacheError as exc:
        raise fail(exc) from None

    success(f"Cleared cached attributes for {domain}")
