"""
Cache Manager interface
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Optional


class CacheManager(ABC):
    """
    Key/value cache with TTL and pattern invalidation

    The cache is an optimization, never a source of truth: entries may vanish
    at any time and every backend failure degrades to a miss. Implementations
    must never raise from these methods.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on miss, expiry or failure"""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[timedelta] = None) -> None:
        """Store a value; without ttl the manager's default policy applies"""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Remove a single key"""

    @abstractmethod
    async def remove_pattern(self, pattern: str) -> None:
        """
        Remove every key matching a glob pattern such as 'customers:*'

        Best effort: not atomic across the matched keys.
        """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether a live entry exists for the key"""
