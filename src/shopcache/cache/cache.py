"""Generic read-through cache over a persistent key-value store.

:class:`Cache` knows nothing about what it caches. Entries are addressed by
a ``(namespace, subkey)`` pair joined into one store key,
``"<namespace>:<subkey>"``, and serialised as UTF-8 JSON bytes so any
JSON-representable value round-trips exactly.

There is no coordination between concurrent misses: two callers that miss
the same key at the same time will both compute, and the last ``set``
wins. Failed computes are never stored.

Store failures are surfaced as :class:`~shopcache.exceptions.StoreError`.
A failed ``get`` is never treated as a miss. A failed ``set`` after a
successful compute is reported as a warning and the computed value is
still returned.
"""

from __future__ import annotations

import json
from typing import Any, Callable, TypeVar

from shopcache.exceptions import DecodeError, StoreError
from shopcache.output import debug, warning
from shopcache.store.base import KeyValueStore

T = TypeVar("T")


class Cache:
    """Read-through cache backed by an injected :class:`KeyValueStore`.

    Args:
        store: The persistent store holding serialised entries.

    Example::

        from shopcache.cache import Cache
        from shopcache.store import MemoryStore

        cache = Cache(MemoryStore())
        cache.get_or_compute("shops:acme.myshopify.com", "attributes", lambda: {"name": "Acme"})
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @staticmethod
    def make_key(namespace: str, subkey: str) -> str:
        """Return the store key for ``(namespace, subkey)``."""
        return f"{namespace}:{subkey}"

    def get_or_compute(self, namespace: str, subkey: str, compute: Callable[[], T]) -> T:
        """Return the cached value, computing and storing it on a miss.

        Args:
            namespace: Key namespace, e.g. ``"shops:acme.myshopify.com"``.
            subkey: Field within the namespace, e.g. ``"attributes"``.
            compute: Zero-argument callable producing a JSON-serialisable
                value. Called at most once per invocation, and only on a miss.

        Returns:
            The stored value on a hit, otherwise the freshly computed one.

        Raises:
            StoreError: If the store lookup fails.
            DecodeError: If the stored entry is not valid JSON.
            Exception: Whatever *compute* raises; nothing is stored.
        """
        key = self.make_key(namespace, subkey)

        raw = self._call_store("get", key)
        if raw is not None:
            debug(f"Cache hit: {key}")
            return self.deserialize(raw, key)

        debug(f"Cache miss: {key}")
        value = compute()
        data = self.serialize(value)
        try:
            self._call_store("set", key, data)
        except StoreError as exc:
            warning(f"Could not store {key}: {exc}")
        else:
            debug(f"Cache store: {key} ({len(data)} bytes)")
        return value

    def clear(self, namespace: str, subkey: str) -> None:
        """Delete the entry for ``(namespace, subkey)``. Absent keys are ignored."""
        key = self.make_key(namespace, subkey)
        self._call_store("delete", key)
        debug(f"Cache clear: {key}")

    @staticmethod
    def serialize(value: Any) -> bytes:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    @staticmethod
    def deserialize(raw: bytes | str, key: str = "") -> Any:
        """Decode a stored entry.

        Raises:
            DecodeError: If *raw* is not UTF-8 JSON.
        """
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            return json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DecodeError(f"Corrupt cache entry '{key}': {exc}") from exc

    def _call_store(self, operation: str, key: str, *args: Any) -> Any:
        """Run a store operation, normalising failures to :class:`StoreError`."""
        try:
            return getattr(self._store, operation)(key, *args)
        except StoreError:
            raise
        except Exception as exc:
            raise StoreError(f"Store {operation} failed for '{key}': {exc}") from exc
