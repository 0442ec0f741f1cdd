"""Persistent key-value stores backing the shop cache.

This package provides the :class:`KeyValueStore` protocol plus two
backends:

* :class:`DiskStore` -- :mod:`diskcache` on the local filesystem, shared
  between processes on one host.
* :class:`MemoryStore` -- a locked dict, scoped to the process.

:func:`open_store` builds the backend selected by a
:class:`~shopcache.models.StoreConfig`.
"""

from __future__ import annotations

from pathlib import Path

from shopcache.models import StoreConfig
from shopcache.store.base import KeyValueStore
from shopcache.store.disk import DiskStore
from shopcache.store.memory import MemoryStore

__all__ = ["DiskStore", "KeyValueStore", "MemoryStore", "open_store"]


def open_store(config: StoreConfig) -> KeyValueStore:
    """Build the store described by *config*.

    The disk backend defaults to ``<cache_dir>/store`` when no directory is
    configured.
    """
    if config.backend == "memory":
        return MemoryStore()

    if config.directory:
        directory = Path(config.directory).expanduser()
    else:
        from shopcache.config import get_cache_dir

        directory = get_cache_dir() / "store"
    return DiskStore(directory, ttl_seconds=config.ttl_seconds)
