"""
Redis cache manager

Stores JSON-serialized values in Redis. Every backend failure (connection
errors, timeouts, unserializable values) is logged and degrades to a cache
miss or a no-op.
"""

import asyncio
import json
import logging
from datetime import timedelta
from typing import Any, Awaitable, Optional, TypeVar

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from ...domain.exceptions import CacheError
from ...domain.services.cache_manager import CacheManager
from ..utilities.constants import CacheSettings

logger = logging.getLogger(__name__)
T = TypeVar("T")


class RedisCacheManager(CacheManager):
    """Redis-backed cache manager"""

    def __init__(
        self,
        redis_client: aioredis.Redis,
        default_ttl: timedelta = timedelta(seconds=CacheSettings.DEFAULT_TTL_SECONDS),
        operation_timeout: float = CacheSettings.OPERATION_TIMEOUT_SECONDS,
    ):
        self._redis = redis_client
        self._default_ttl = default_ttl
        self._operation_timeout = operation_timeout
        self._logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "RedisCacheManager":
        """Build a manager with its own connection pool"""
        client = aioredis.Redis.from_url(url, decode_responses=True)
        return cls(client, **kwargs)

    async def get(self, key: str) -> Optional[Any]:
        try:
            data = await self._run(self._redis.get(key), "get", key)
        except CacheError:
            return None
        if data is None:
            return None
        return self._deserialize(data, key)

    async def set(self, key: str, value: Any, ttl: Optional[timedelta] = None) -> None:
        ttl = ttl if ttl is not None else self._default_ttl
        seconds = int(ttl.total_seconds())
        if seconds <= 0:
            await self.remove(key)
            return

        try:
            data = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            self._logger.warning("Value for %s is not serializable: %s", key, e)
            return

        try:
            await self._run(self._redis.set(key, data, ex=seconds), "set", key)
        except CacheError:
            return

    async def remove(self, key: str) -> None:
        try:
            await self._run(self._redis.delete(key), "remove", key)
        except CacheError:
            return

    async def remove_pattern(self, pattern: str) -> None:
        try:
            removed = await self._run(self._delete_matching(pattern), "remove_pattern", pattern)
        except CacheError:
            return
        if removed:
            self._logger.debug("Removed %d cache entries matching %s", removed, pattern)

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._run(self._redis.exists(key), "exists", key))
        except CacheError:
            return False

    async def close(self) -> None:
        """Release the connection pool"""
        await self._redis.aclose()

    async def _delete_matching(self, pattern: str) -> int:
        removed = 0
        batch = []
        async for key in self._redis.scan_iter(match=pattern, count=CacheSettings.SCAN_BATCH_SIZE):
            batch.append(key)
            if len(batch) >= CacheSettings.SCAN_BATCH_SIZE:
                removed += await self._redis.delete(*batch)
                batch = []
        if batch:
            removed += await self._redis.delete(*batch)
        return removed

    async def _run(self, operation: Awaitable[T], name: str, key: str) -> T:
        """Await a redis call under the operation timeout"""
        try:
            return await asyncio.wait_for(operation, timeout=self._operation_timeout)
        except asyncio.TimeoutError as e:
            self._logger.warning("Cache %s timed out for %s", name, key)
            raise CacheError(f"Cache {name} timed out", key) from e
        except RedisError as e:
            self._logger.warning("Cache %s failed for %s: %s", name, key, e)
            raise CacheError(f"Cache {name} failed: {e}", key) from e

    def _deserialize(self, data: Any, key: str) -> Optional[Any]:
        try:
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            return json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self._logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None
