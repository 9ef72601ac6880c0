from __future__ import annotations

from stockwatch.infrastructure.redis_store.client import LazyRedisClient


class RedisSessionRevocationStore:
    def __init__(self, *, client: LazyRedisClient, key_prefix: str) -> None:
        self._client = client
        self._key_prefix = key_prefix.strip() or "stockwatch:sessions:revoked"

    async def revoke(self, *, token_id: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        client = await self._client.get()
        await client.set(self._key(token_id), b"1", ex=ttl_seconds)

    async def is_revoked(self, *, token_id: str) -> bool:
        client = await self._client.get()
        return bool(await client.exists(self._key(token_id)))

    def _key(self, token_id: str) -> str:
        return f"{self._key_prefix}:{token_id}"
