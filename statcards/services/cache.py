"""
Cache for aggregated GitHub statistics, stored in Django's cache framework.
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)


class StatsCache:
    """
    Maps a key to a (value, expiry) pair kept in a Django cache backend.

    The clock is injectable so expiry can be tested without sleeping; the
    backend timeout only bounds how long stale entries are retained.
    Concurrent callers of get_or_compute() for the same missing key share a
    single computation.
    """

    def __init__(self, timeout: Optional[float] = None, clock: Callable[[], float] = time.time,
                 alias: Optional[str] = None, key_prefix: str = 'github_stats_'):
        if timeout is None:
            timeout = getattr(settings, 'GITHUB_CACHE_TIMEOUT', 3600)
        self.timeout = timeout
        self.clock = clock
        self.alias = alias or getattr(settings, 'GITHUB_STATS_CACHE', 'default')
        self.key_prefix = key_prefix
        self._lock = threading.Lock()
        # key -> [lock, number of callers holding or waiting on it]
        self._key_locks: Dict[str, List] = {}

    @property
    def backend(self):
        return caches[self.alias]

    def _cache_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str, default: Any = None) -> Any:
        entry = self.backend.get(self._cache_key(key))
        if entry is None:
            return default
        value, expires_at = entry
        if self.clock() >= expires_at:
            self.delete(key)
            return default
        return value

    def set(self, key: str, value: Any) -> None:
        expires_at = self.clock() + self.timeout
        self.backend.set(self._cache_key(key), (value, expires_at), timeout=self.timeout)

    def delete(self, key: str) -> None:
        self.backend.delete(self._cache_key(key))

    def clear(self) -> None:
        self.backend.clear()

    def _acquire_slot(self, key: str) -> threading.Lock:
        with self._lock:
            slot = self._key_locks.get(key)
            if slot is None:
                slot = self._key_locks[key] = [threading.Lock(), 0]
            slot[1] += 1
            return slot[0]

    def _release_slot(self, key: str) -> None:
        with self._lock:
            slot = self._key_locks[key]
            slot[1] -= 1
            if slot[1] == 0:
                del self._key_locks[key]

    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> Any:
        """
        Return the cached value for key, computing and storing it on a miss.

        A failing computation stores nothing and its exception propagates.
        """
        missing = object()
        value = self.get(key, missing)
        if value is not missing:
            return value

        lock = self._acquire_slot(key)
        try:
            with lock:
                # another caller may have filled the entry while we waited
                value = self.get(key, missing)
                if value is not missing:
                    return value
                logger.debug("Cache miss for %r", key)
                value = compute()
                self.set(key, value)
                return value
        finally:
            self._release_slot(key)
