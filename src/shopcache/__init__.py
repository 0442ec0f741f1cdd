"""shopcache -- a read-through, two-tier cache for shop attributes.

Fetching a shop's attributes means an HTTPS round-trip to
``https://<domain>/admin/shop.json``. The data rarely changes, so
:class:`~shopcache.cache.ShopCache` keeps it in a process-local memo on top
of a persistent key-value store shared between processes, and offers
:meth:`~shopcache.cache.ShopCache.refresh_attributes` for callers that need
fresh data.

Typical use::

    from shopcache import ShopCache
    from shopcache.store import DiskStore

    shop = ShopCache("acme.myshopify.com", token, store=DiskStore("/var/cache/shops"))
    shop.attributes()["name"]

Modules:
    cache: :class:`Cache` and :class:`ShopCache`.
    store: Persistent store protocol and backends.
    exceptions: Error taxonomy with exit-code mapping.
    models: Pydantic configuration models.
    config: XDG-aware configuration and credential resolution.
    output: stdout/stderr formatting with Rich.
    app: Typer CLI entry point.
"""

from shopcache.cache import AttributesResult, Cache, ShopCache

__version__ = "0.1.0"

__all__ = ["AttributesResult", "Cache", "ShopCache", "__version__"]
