"""Redis-backed store for multi-process deployments."""

import logging
from typing import List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from wisdom.core.interfaces import IPersistentStore, StorageError

logger = logging.getLogger(__name__)


class RedisStore(IPersistentStore):
    """Stores documents as plain string values, optionally per-user prefixed."""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        key_prefix: str = "",
        client=None
    ):
        self.key_prefix = key_prefix
        self.client = client or redis.from_url(redis_url, decode_responses=True)
        logger.info("Redis store initialized")

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.client.get(self._key(key))
        except RedisError as e:
            raise StorageError(f"Redis get failed for {key}: {e}")

    async def set(self, key: str, value: str) -> None:
        try:
            await self.client.set(self._key(key), value)
        except RedisError as e:
            raise StorageError(f"Redis set failed for {key}: {e}")

    async def remove(self, key: str) -> None:
        await self.remove_many([key])

    async def remove_many(self, keys: List[str]) -> None:
        if not keys:
            return
        try:
            await self.client.delete(*[self._key(key) for key in keys])
        except RedisError as e:
            raise StorageError(f"Redis delete failed: {e}")

    async def close(self) -> None:
        await self.client.aclose()
