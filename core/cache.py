"""In-memory key/value cache with TTL, invalidation and single-flight fetch.

Host applications can pass any object exposing ``fetch``/``delete``/``clear``
instead; this is the default store.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


@dataclass
class CacheEntry:
    value: Any
    expires_at: Optional[float] = None

    def is_fresh(self, now: float) -> bool:
        return self.expires_at is None or self.expires_at > now


class MemoryCache:
    def __init__(self, ttl_seconds: Optional[float] = None):
        self.ttl_seconds = None if ttl_seconds is None else max(1.0, float(ttl_seconds))
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._key_locks: Dict[str, threading.Lock] = {}

    def _key_lock(self, key: str) -> threading.Lock:
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[key] = lock
            return lock

    def _lookup(self, key: str, now: float) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not entry.is_fresh(now):
                self._entries.pop(key, None)
                return None
            return entry

    def contains(self, key: str) -> bool:
        return self._lookup(key, time.time()) is not None

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._lookup(key, time.time())
        return default if entry is None else entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else float(ttl_seconds)
        expires_at = None if ttl is None else time.time() + ttl
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=expires_at)

    def fetch(self, key: str, compute: Callable[[], Any], ttl_seconds: Optional[float] = None) -> Any:
        """Return the cached value for ``key``, computing it on a miss.

        Concurrent misses on the same key run ``compute`` once; the other
        callers wait and read the stored result. A stored ``None`` is a hit.
        """
        entry = self._lookup(key, time.time())
        if entry is not None:
            return entry.value
        with self._key_lock(key):
            entry = self._lookup(key, time.time())
            if entry is not None:
                return entry.value
            value = compute()
            self.set(key, value, ttl_seconds=ttl_seconds)
            return value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
