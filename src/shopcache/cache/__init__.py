"""Two-tier read-through caching for shop attributes.

* :class:`Cache` -- generic get-or-compute over a persistent
  :class:`~shopcache.store.KeyValueStore`.
* :class:`ShopCache` -- one shop's attributes, with a process-local memo
  on top of :class:`Cache`.
"""

from shopcache.cache.cache import Cache
from shopcache.cache.shop import AttributesResult, ShopCache

__all__ = ["AttributesResult", "Cache", "ShopCache"]
