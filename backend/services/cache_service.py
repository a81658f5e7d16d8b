"""
Cache Service - Parameter-keyed TTL cache with single-flight computation.

Protects the rollup queries behind /api/dashboard/top. The same filter
combination requested again within the TTL window is served from memory,
and concurrent requests for a key that is still being computed share that
one computation instead of stampeding the database.

Usage:
    from services.cache_service import TTLCache
    from utils.cache_key import get_cache_key

    cache = TTLCache(maxsize=1000, ttl=60)
    key = get_cache_key("dashboard-top", {"platform": "Shopee", "start": None})
    result = cache.cached(key, lambda: expensive_query(), ttl=60)

Each Flask app owns one instance (app.extensions['dashboard_cache']), so tests
can build isolated caches with a fake clock.
"""

import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from services.errors import CacheComputeError

logger = logging.getLogger('dashboard.cache')

_MISSING = object()


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """TTL cache with max size guard and per-key single-flight."""

    def __init__(
        self,
        maxsize: int = 1000,
        ttl: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._entries: Dict[str, CacheEntry] = {}
        self._in_flight: Dict[str, Future] = {}
        self._maxsize = maxsize
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._shared = 0
        self._store_failures = 0

    # ------------------------------------------------------------------
    # Plain get/set
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            value = self._get_live(key, self._clock())
        return default if value is _MISSING else value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        with self._lock:
            self._store(key, value, ttl)

    # ------------------------------------------------------------------
    # Single-flight computation
    # ------------------------------------------------------------------

    def cached(self, key: str, compute: Callable[[], Any], ttl: Optional[float] = None) -> Any:
        """
        Return the live cached value for key, or compute and cache it.

        If another thread is already computing the same key, wait for and
        return its result instead of calling compute a second time.

        Raises:
            CacheComputeError: compute raised. Nothing is cached; every caller
                sharing the failed computation receives the error. A
                BaseException such as KeyboardInterrupt reaches the owner
                unwrapped; waiters still get CacheComputeError.
        """
        with self._lock:
            value = self._get_live(key, self._clock())
            if value is not _MISSING:
                self._hits += 1
                logger.debug("cache_hit key=%s", key)
                return value

            flight = self._in_flight.get(key)
            is_owner = flight is None
            if is_owner:
                flight = Future()
                self._in_flight[key] = flight
                self._misses += 1
            else:
                self._shared += 1

        if not is_owner:
            logger.debug("cache_wait key=%s", key)
            return flight.result()

        logger.info("cache_miss key=%s", key)
        try:
            value = compute()
        except BaseException as e:
            # Interrupts included: the key must never stay in flight
            error = CacheComputeError(key, e)
            with self._lock:
                self._in_flight.pop(key, None)
            flight.set_exception(error)
            logger.warning("cache_compute_error key=%s err=%r", key, e)
            if not isinstance(e, Exception):
                raise
            raise error from e

        with self._lock:
            self._store(key, value, ttl)
            self._in_flight.pop(key, None)
        flight.set_result(value)
        return value

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------

    def clear(self, pattern: Optional[str] = None) -> int:
        """Drop all entries, or only those whose key contains pattern. Returns count removed."""
        with self._lock:
            if not pattern:
                removed = len(self._entries)
                self._entries.clear()
                return removed
            doomed = [k for k in self._entries if pattern in k]
            for k in doomed:
                del self._entries[k]
            return len(doomed)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'size': len(self._entries),
                'maxsize': self._maxsize,
                'ttl': self._ttl,
                'in_flight': len(self._in_flight),
                'hits': self._hits,
                'misses': self._misses,
                'shared': self._shared,
                'store_failures': self._store_failures,
                'keys': sorted(self._entries.keys()),
            }

    # ------------------------------------------------------------------
    # Internals (caller holds self._lock)
    # ------------------------------------------------------------------

    def _get_live(self, key: str, now: float) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        if now < entry.expires_at:
            return entry.value
        del self._entries[key]
        return _MISSING

    def _store(self, key: str, value: Any, ttl: Optional[float]) -> None:
        # A failed write only means the next call recomputes
        try:
            now = self._clock()
            if key not in self._entries and len(self._entries) >= self._maxsize:
                self._evict(now)
            self._entries[key] = CacheEntry(value, now + (self._ttl if ttl is None else ttl))
        except Exception as e:
            self._store_failures += 1
            logger.warning("cache_store_failed key=%s err=%s", key, e)

    def _evict(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for k in expired:
            del self._entries[k]
        if len(self._entries) >= self._maxsize:
            oldest_key = min(self._entries.keys(), key=lambda k: self._entries[k].expires_at)
            del self._entries[oldest_key]
