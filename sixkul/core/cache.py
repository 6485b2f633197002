# sixkul/core/cache.py
"""Redis caching implementation."""
import json
import logging
from typing import Any, Optional, Union
from datetime import timedelta
import redis.asyncio as redis
from ..core.config import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "sixkul"


class CacheManager:
    def __init__(self, url: Optional[str] = None, enabled: Optional[bool] = None):
        self.url = url or settings.redis_url
        self.enabled = settings.cache_enabled if enabled is None else enabled
        self.redis: Optional[redis.Redis] = None

    @staticmethod
    def make_key(*parts: Any) -> str:
        return ":".join([KEY_PREFIX] + [str(part) for part in parts])

    async def connect(self):
        """Initialize Redis connection."""
        if self.enabled and not self.redis:
            self.redis = redis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True
            )

    async def close(self):
        """Close Redis connection."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None

    async def ping(self) -> bool:
        if not self.enabled:
            return False
        await self.connect()
        try:
            return bool(await self.redis.ping())
        except redis.RedisError as e:
            logger.warning(f"Cache ping failed: {e}")
            return False

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        if not self.enabled:
            return None
        await self.connect()
        try:
            value = await self.redis.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None
        if value is None:
            return None
        return json.loads(value)

    async def set(
        self,
        key: str,
        value: Any,
        expire: Optional[Union[int, timedelta]] = None
    ) -> bool:
        """Set value in cache."""
        if not self.enabled:
            return False
        await self.connect()
        if expire is None:
            expire = settings.cache_default_ttl
        if isinstance(expire, timedelta):
            expire = int(expire.total_seconds())
        try:
            serialized = json.dumps(value, default=str)
            return bool(await self.redis.setex(key, expire, serialized))
        except redis.RedisError as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            return False

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern."""
        if not self.enabled:
            return 0
        await self.connect()
        deleted = 0
        try:
            batch = []
            async for key in self.redis.scan_iter(match=pattern, count=500):
                batch.append(key)
                if len(batch) >= 500:
                    deleted += await self.redis.delete(*batch)
                    batch = []
            if batch:
                deleted += await self.redis.delete(*batch)
        except redis.RedisError as e:
            logger.warning(f"Cache pattern delete failed for {pattern}: {e}")
        return deleted


# Global cache instance
cache_manager = CacheManager()
