from __future__ import annotations

import json

from stockwatch.infrastructure.redis_store.client import LazyRedisClient


class RedisViewInvalidationPublisher:
    """Announces that cached views of a path are stale for a user."""

    def __init__(self, *, client: LazyRedisClient, channel: str) -> None:
        self._client = client
        self._channel = channel

    async def invalidate(self, path: str, *, user_id: int | None = None) -> None:
        payload = {"type": "view.invalidated", "path": path, "user_id": user_id}
        message = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        client = await self._client.get()
        await client.publish(self._channel, message)
