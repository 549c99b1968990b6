"""
Cache Infrastructure

In-memory and Redis implementations of the cache manager contract.
"""

from .cache_manager import InMemoryCacheManager
from .redis_cache_manager import RedisCacheManager

__all__ = ["InMemoryCacheManager", "RedisCacheManager"]
