from __future__ import annotations

import asyncio

import redis.asyncio as redis


class LazyRedisClient:
    def __init__(self, *, redis_url: str) -> None:
        self._redis_url = redis_url
        self._client: redis.Redis | None = None
        self._lock = asyncio.Lock()

    async def get(self) -> redis.Redis:
        if self._client is not None:
            return self._client
        async with self._lock:
            if self._client is None:
                self._client = redis.from_url(self._redis_url, decode_responses=False)
            return self._client

    async def close(self) -> None:
        client = self._client
        self._client = None
        if client is not None:
            await client.aclose()
