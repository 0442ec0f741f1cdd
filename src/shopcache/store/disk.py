"""Disk-backed key-value store built on :mod:`diskcache`.

diskcache keeps entries in a SQLite database under a directory, so several
processes on the same host pointing at the same directory share one store.
That makes it the default persistent tier for
:class:`~shopcache.cache.ShopCache`.

Optional expiry is applied per entry with ``ttl_seconds``; ``None`` keeps
entries until they are cleared.

See Also:
    :class:`~shopcache.models.StoreConfig` -- selects the directory and TTL.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

import diskcache

from shopcache.exceptions import StoreError

_STORE_ERRORS = (sqlite3.Error, diskcache.Timeout, OSError)


class DiskStore:
    """Key-value store persisted in a :class:`diskcache.Cache` directory.

    Args:
        directory: Directory holding the SQLite database. Created if missing.
        ttl_seconds: Expiry applied to every ``set``; ``None`` disables expiry.

    Example::

        with DiskStore("/tmp/shopcache") as store:
            store.set("shops:acme.myshopify.com:attributes", b'{"name": "Acme"}')
            store.get("shops:acme.myshopify.com:attributes")
    """

    def __init__(self, directory: str | Path, ttl_seconds: Optional[int] = None) -> None:
        self._directory = Path(directory)
        self._ttl_seconds = ttl_seconds
        try:
            self._cache = diskcache.Cache(str(self._directory))
        except _STORE_ERRORS as exc:
            raise StoreError(f"Cannot open disk store at {self._directory}: {exc}") from exc

    @property
    def directory(self) -> Path:
        return self._directory

    def get(self, key: str) -> Optional[bytes]:
        try:
            return self._cache.get(key)
        except _STORE_ERRORS as exc:
            raise StoreError(f"Disk store get failed for '{key}': {exc}") from exc

    def set(self, key: str, value: bytes) -> None:
        try:
            self._cache.set(key, value, expire=self._ttl_seconds)
        except _STORE_ERRORS as exc:
            raise StoreError(f"Disk store set failed for '{key}': {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._cache.delete(key)
        except _STORE_ERRORS as exc:
            raise StoreError(f"Disk store delete failed for '{key}': {exc}") from exc

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        self._cache.close()

    def __len__(self) -> int:
        return len(self._cache)

    def __enter__(self) -> DiskStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
