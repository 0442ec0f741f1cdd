"""The persistent key-value store interface consumed by :class:`~shopcache.cache.Cache`.

A store is anything with ``get``, ``set`` and ``delete`` over string keys
and ``bytes`` values. No TTL, versioning, or transactional semantics are
assumed; expiry, if any, is a policy of the concrete backend.

Backends should raise :class:`~shopcache.exceptions.StoreError` on failure.
Any other exception escaping a store call is wrapped into ``StoreError`` by
the cache.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal bytes-valued key-value store."""

    def get(self, key: str) -> Optional[bytes]:
        """Return the value stored under *key*, or ``None`` when absent."""
        ...

    def set(self, key: str, value: bytes) -> None:
        """Store *value* under *key*, replacing any previous value."""
        ...

    def delete(self, key: str) -> None:
        """Remove *key*. Deleting an absent key is not an error."""
        ...
