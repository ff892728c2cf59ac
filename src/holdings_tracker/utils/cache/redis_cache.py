"""Redis cache backend."""

import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from .interface import CacheInterface, CacheStats

logger = logging.getLogger(__name__)


class RedisCache(CacheInterface):
    """Redis backed cache; values are stored as JSON strings with ``SET EX``."""

    def __init__(self, redis_url: str, default_ttl: int | None = 3600, key_prefix: str = ""):
        self.redis_url = redis_url
        self.default_ttl = default_ttl
        self.key_prefix = key_prefix
        self._client = redis.from_url(redis_url, decode_responses=True)
        self._stats = CacheStats("redis")

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> Any:
        try:
            raw = await self._client.get(self._key(key))
        except RedisError as e:
            self._stats.errors += 1
            logger.warning(f"⚠️ Redis get failed for {key}: {e}")
            return None
        if raw is None:
            self._stats.record(False)
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            self._stats.errors += 1
            logger.warning(f"⚠️ Corrupt Redis value for {key}: {e}")
            return None
        self._stats.record(True)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        ttl = self.default_ttl if ttl is None else ttl
        try:
            await self._client.set(self._key(key), json.dumps(value), ex=ttl or None)
        except RedisError as e:
            self._stats.errors += 1
            logger.error(f"❌ Redis set failed for {key}: {e}")
            return False
        self._stats.sets += 1
        return True

    async def delete(self, key: str) -> bool:
        try:
            removed = await self._client.delete(self._key(key))
        except RedisError as e:
            self._stats.errors += 1
            logger.error(f"❌ Redis delete failed for {key}: {e}")
            return False
        if removed:
            self._stats.deletes += 1
        return bool(removed)

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._client.exists(self._key(key)))
        except RedisError as e:
            self._stats.errors += 1
            logger.warning(f"⚠️ Redis exists failed for {key}: {e}")
            return False

    async def clear(self) -> bool:
        try:
            async for key in self._client.scan_iter(match=f"{self.key_prefix}*"):
                await self._client.delete(key)
        except RedisError as e:
            self._stats.errors += 1
            logger.error(f"❌ Redis clear failed: {e}")
            return False
        return True

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        if not keys:
            return {}
        try:
            values = await self._client.mget([self._key(k) for k in keys])
        except RedisError as e:
            self._stats.errors += 1
            logger.warning(f"⚠️ Redis mget failed: {e}")
            return {}
        result = {}
        for key, raw in zip(keys, values):
            if raw is None:
                self._stats.record(False)
                continue
            try:
                result[key] = json.loads(raw)
            except json.JSONDecodeError as e:
                self._stats.errors += 1
                logger.warning(f"⚠️ Corrupt Redis value for {key}: {e}")
                continue
            self._stats.record(True)
        return result

    async def set_many(self, mapping: dict[str, Any], ttl: int | None = None) -> bool:
        results = [await self.set(key, value, ttl=ttl) for key, value in mapping.items()]
        return all(results)

    async def close(self) -> None:
        await self._client.aclose()

    async def health_check(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    def get_stats(self) -> dict[str, Any]:
        return {**self._stats.as_dict(), "redis_url": self.redis_url}
