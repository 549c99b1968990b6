"""
In-memory cache manager with TTL support
"""

import copy
import fnmatch
import logging
import time
from datetime import timedelta
from typing import Any, Callable, Dict, Optional

from ...domain.services.cache_manager import CacheManager
from ..utilities.constants import CacheSettings

logger = logging.getLogger(__name__)


class InMemoryCacheManager(CacheManager):
    """
    Process-local cache with per-entry expiry

    Values are deep-copied on the way in and out so callers never share
    mutable state with the cache.
    """

    def __init__(
        self,
        default_ttl: timedelta = timedelta(seconds=CacheSettings.DEFAULT_TTL_SECONDS),
        clock: Callable[[], float] = time.monotonic,
    ):
        self._cache: Dict[str, Dict[str, Any]] = {}
        self._default_ttl = default_ttl
        self._clock = clock
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "deletes": 0,
        }
        self._logger = logging.getLogger(self.__class__.__name__)

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        entry = self._cache.get(key)
        if entry is not None:
            if entry["expires_at"] > self._clock():
                self._stats["hits"] += 1
                return self._copy(entry["value"], key)
            # Remove expired entry
            del self._cache[key]

        self._stats["misses"] += 1
        return None

    async def set(self, key: str, value: Any, ttl: Optional[timedelta] = None) -> None:
        """Set value in cache"""
        ttl = ttl if ttl is not None else self._default_ttl
        if ttl.total_seconds() <= 0:
            self._cache.pop(key, None)
            return

        stored = self._copy(value, key)
        if stored is None and value is not None:
            return

        now = self._clock()
        self._cache[key] = {
            "value": stored,
            "expires_at": now + ttl.total_seconds(),
            "created_at": now,
        }
        self._stats["sets"] += 1

    async def remove(self, key: str) -> None:
        """Delete key from cache"""
        if self._cache.pop(key, None) is not None:
            self._stats["deletes"] += 1

    async def remove_pattern(self, pattern: str) -> None:
        """Delete every key matching a glob pattern"""
        matched = [key for key in self._cache if fnmatch.fnmatchcase(key, pattern)]
        for key in matched:
            del self._cache[key]
        self._stats["deletes"] += len(matched)
        if matched:
            self._logger.debug("Removed %d cache entries matching %s", len(matched), pattern)

    async def exists(self, key: str) -> bool:
        entry = self._cache.get(key)
        return entry is not None and entry["expires_at"] > self._clock()

    def clear(self) -> None:
        """Clear all cache entries"""
        self._cache.clear()
        self._stats = {k: 0 for k in self._stats}

    def cleanup_expired(self) -> int:
        """Remove expired entries and return count removed"""
        current_time = self._clock()
        expired_keys = [
            key
            for key, entry in self._cache.items()
            if entry["expires_at"] <= current_time
        ]

        for key in expired_keys:
            del self._cache[key]

        return len(expired_keys)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        total_requests = self._stats["hits"] + self._stats["misses"]
        hit_rate = (
            (self._stats["hits"] / total_requests * 100) if total_requests > 0 else 0
        )

        return {
            **self._stats,
            "total_requests": total_requests,
            "hit_rate": round(hit_rate, 2),
            "cache_size": len(self._cache),
        }

    def _copy(self, value: Any, key: str) -> Any:
        try:
            return copy.deepcopy(value)
        except (TypeError, copy.Error) as e:
            self._logger.warning("Cache value for %s cannot be copied: %s", key, e)
            return None
