"""In-process key-value store.

Entries live only as long as the process. Useful for tests and for
single-process tools that still want the read-through behaviour of
:class:`~shopcache.cache.Cache`.
"""

from __future__ import annotations

import threading
from typing import Optional


class MemoryStore:
    """Dict-backed store guarded by a lock."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
