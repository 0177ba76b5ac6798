"""
In-process read cache with TTL expiry.

Services cache list/detail reads under ``<prefix>:<...>`` keys and call
:meth:`TTLCache.invalidate` with their prefix after every write, so a read
never outlives the write that changed it. Entries also expire after
``ttl`` seconds, and the oldest entry is dropped once ``max_size`` is
reached.

The event loop is single-threaded, so plain dict operations need no lock.
"""

import logging
import time
from typing import Any, Dict, Optional

from investpro.core.config import settings

logger = logging.getLogger(__name__)


class CacheEntry:
    """A cached value and the monotonic time it was stored."""

    __slots__ = ("value", "created_at")

    def __init__(self, value: Any):
        self.value = value
        self.created_at = time.monotonic()

    def is_expired(self, ttl: float) -> bool:
        return (time.monotonic() - self.created_at) > ttl


class TTLCache:
    """
    Dict-backed cache with TTL expiry and FIFO eviction.

    When ``enabled`` is False every operation is a no-op.
    """

    def __init__(self, ttl: float = 30.0, max_size: int = 1000, enabled: bool = True):
        self._store: Dict[str, CacheEntry] = {}
        self._ttl = ttl
        self._max_size = max_size
        self._enabled = enabled
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or ``None`` on a miss or expired entry."""
        if not self._enabled:
            return None

        entry = self._store.get(key)
        if entry is None or entry.is_expired(self._ttl):
            if entry is not None:
                del self._store[key]
            self._misses += 1
            return None

        self._hits += 1
        logger.debug("Cache hit: %s", key)
        return entry.value

    def set(self, key: str, value: Any) -> None:
        if not self._enabled:
            return

        if key not in self._store and len(self._store) >= self._max_size:
            oldest = next(iter(self._store))
            del self._store[oldest]
            logger.debug("Cache evicted %s (max_size=%d)", oldest, self._max_size)

        self._store[key] = CacheEntry(value)

    def invalidate(self, *prefixes: str) -> int:
        """Drop every key starting with one of ``prefixes``; return the count."""
        if not self._enabled:
            return 0

        stale = [k for k in self._store if k.startswith(prefixes)]
        for k in stale:
            del self._store[k]
        if stale:
            logger.debug("Cache invalidated %d entries for %s", len(stale), prefixes)
        return len(stale)

    def clear(self) -> None:
        self._store.clear()

    def get_stats(self) -> dict:
        """Counters for the health endpoint."""
        total = self._hits + self._misses
        return {
            "enabled": self._enabled,
            "size": len(self._store),
            "max_size": self._max_size,
            "ttl_seconds": self._ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": f"{(self._hits / total * 100):.1f}%" if total > 0 else "N/A",
        }


cache = TTLCache(
    ttl=settings.CACHE_TTL,
    max_size=settings.CACHE_MAX_SIZE,
    enabled=settings.CACHE_ENABLED,
)
