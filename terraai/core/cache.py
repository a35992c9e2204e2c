# terraai/core/cache.py
"""
Caching utilities
"""
import logging
import math
import threading
import time
from typing import Any, Callable, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)


class ResponseCache:
    """
    In-memory TTL cache shared by the provider clients.

    One instance is built at start-up and handed to every client that needs
    it. Entries expire ``ttl`` seconds after they were set; expiry is checked
    when an entry is read, there is no background sweep and no size bound.
    """

    def __init__(self, ttl: float = 1800, timer: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._cache: TTLCache = TTLCache(maxsize=math.inf, ttl=ttl, timer=timer)
        self._lock = threading.Lock()

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache, ``None`` on a miss or an expired entry"""
        with self._lock:
            value = self._cache.get(key)
        if value is not None:
            logger.debug(f"Cache hit for key: {key}")
        return value

    async def set(self, key: str, value: Any) -> None:
        """Store value, overwriting any previous entry and its timestamp"""
        with self._lock:
            self._cache[key] = value
        logger.debug(f"Cached value for key: {key} (ttl={self.ttl}s)")

    async def delete(self, key: str) -> None:
        """Delete value from cache"""
        with self._lock:
            self._cache.pop(key, None)

    async def clear(self) -> int:
        """Clear all cache, returns the number of entries dropped"""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
        logger.info(f"Cache cleared ({count} entries)")
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


def make_cache_key(dataset: str, longitude: float, latitude: float, *parts: Any) -> str:
    """Composite key: dataset, coordinates rounded to ~10 m, then any extra parts."""
    suffix = ":".join(str(p) for p in parts if p is not None)
    key = f"{dataset}:{round(longitude, 4)}:{round(latitude, 4)}"
    return f"{key}:{suffix}" if suffix else key
