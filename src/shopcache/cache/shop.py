"""Read-through cache for a shop's attributes.

:class:`ShopCache` layers a process-local memo over the generic
:class:`~shopcache.cache.cache.Cache`. A read goes:

1. memo (this instance only),
2. the persistent store under ``"shops:<domain>:attributes"``,
3. ``GET https://<domain>/admin/shop.json``, whose ``shop`` object is
   stored and memoized.

Failures never touch either tier. There is no locking: overlapping calls on
an unloaded instance may each fetch, and the last write wins.

If the store rejects the ``set`` after a successful fetch, the fetched value
is still returned and memoized. The memo is independent of store
durability.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from shopcache.cache.cache import Cache
from shopcache.client import build_http_client
from shopcache.exceptions import (
    DecodeError,
    ErrorKind,
    RequestError,
    ShopCacheError,
    TransportError,
)
from shopcache.models import RequestConfig
from shopcache.output import debug
from shopcache.store.base import KeyValueStore

ATTRIBUTES_KEY = "attributes"
ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"
SHOP_URL = "https://{domain}/admin/shop.json"


@dataclass(frozen=True)
class AttributesResult:
    """Outcome of :meth:`ShopCache.result`: either a value or a tagged error."""

    value: Optional[dict[str, Any]] = None
    error: Optional[ShopCacheError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        """The failure category, or ``None`` on success."""
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> dict[str, Any]:
        """Return the value, re-raising the error if there is one."""
        if self.error is not None:
            raise self.error
        if self.value is None:
            raise ValueError("AttributesResult holds neither a value nor an error")
        return self.value


class ShopCache:
    """Cached access to the attributes of one shop.

    Args:
        myshopify_domain: The shop's domain, e.g. ``acme.myshopify.com``.
            Also the cache namespace.
        access_token: Sent in the ``X-Shopify-Access-Token`` header.
        store: Persistent store shared with other processes and instances.
        http_client: Optional client used for the fetch. When ``None`` a
            client is built from *request_config* for each fetch and closed
            afterwards.
        request_config: Timeout and TLS settings for the built client.

    Example::

        shop = ShopCache("acme.myshopify.com", token, store=DiskStore(path))
        shop.attributes()["name"]
    """

    def __init__(
        self,
        myshopify_domain: str,
        access_token: str,
        store: KeyValueStore,
        http_client: Optional[httpx.Client] = None,
        request_config: Optional[RequestConfig] = None,
    ) -> None:
        self._myshopify_domain = myshopify_domain
        self._access_token = access_token
        self._cache = Cache(store)
        self._http_client = http_client
        self._request_config = request_config or RequestConfig()
        self._attributes: Optional[dict[str, Any]] = None

    @property
    def myshopify_domain(self) -> str:
        return self._myshopify_domain

    @property
    def access_token(self) -> str:
        return self._access_token

    @property
    def namespace(self) -> str:
        return self.namespace_for(self._myshopify_domain)

    @staticmethod
    def namespace_for(myshopify_domain: str) -> str:
        """Return the cache namespace for a shop domain."""
        return f"shops:{myshopify_domain}"

    def attributes(self) -> dict[str, Any]:
        """Get the shop attributes from the memo, the store, or the API.

        Returns:
            A copy of the attributes; mutating it does not affect the cache.

        Raises:
            RequestError: If the response status is not 200.
            TransportError: On network, TLS, or timeout failures.
            DecodeError: If the body cannot be decoded, or it (or a stored
                entry) is not a shop document.
            StoreError: If the store lookup fails.
        """
        if self._attributes is None:
            value = self._cache.get_or_compute(
                self.namespace, ATTRIBUTES_KEY, self._fetch_attributes
            )
            if not isinstance(value, dict):
                raise DecodeError(
                    f"Cached attributes for {self._myshopify_domain} are not an object"
                )
            self._attributes = value
        return copy.deepcopy(self._attributes)

    def refresh_attributes(self) -> dict[str, Any]:
        """Get the shop attributes from the API after clearing both cache tiers.

        Use this when accuracy matters more than latency.
        """
        self.clear()
        return self.attributes()

    def clear(self) -> None:
        """Drop the memo and delete the stored attributes."""
        self._attributes = None
        self._cache.clear(self.namespace, ATTRIBUTES_KEY)

    def result(self, refresh: bool = False) -> AttributesResult:
        """Like :meth:`attributes` (or :meth:`refresh_attributes`), but never raises.

        Any :class:`~shopcache.exceptions.ShopCacheError` is returned in the
        result instead, so callers can branch on ``result.kind``.
        """
        try:
            value = self.refresh_attributes() if refresh else self.attributes()
        except ShopCacheError as exc:
            return AttributesResult(error=exc)
        return AttributesResult(value=value)

    def _fetch_attributes(self) -> dict[str, Any]:
        url = SHOP_URL.format(domain=self._myshopify_domain)
        headers = {
            "Accept": "application/json",
            ACCESS_TOKEN_HEADER: self._access_token,
        }
        debug(f"GET {url}")

        try:
            if self._http_client is not None:
                response = self._http_client.get(url, headers=headers)
            else:
                with build_http_client(self._request_config) as client:
                    response = client.get(url, headers=headers)
        except httpx.TransportError as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc
        except httpx.DecodingError as exc:
            raise DecodeError(f"Undecodable response body from {url}: {exc}") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        status = response.status_code
        if status != 200:
            raise RequestError(status)

        return _parse_attributes(response.content)


def _parse_attributes(body: bytes) -> dict[str, Any]:
    """Extract the ``shop`` object from a response body."""
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(f"Invalid JSON in shop response: {exc}") from exc

    if not isinstance(payload, dict) or "shop" not in payload:
        raise DecodeError("Shop response is missing the 'shop' envelope")

    shop = payload["shop"]
    if not isinstance(shop, dict):
        raise DecodeError("Shop response 'shop' value is not an object")
    return shop
