from __future__ import annotations

import hashlib
import json
import logging
from typing import Any

from stockwatch.infrastructure.redis_store.client import LazyRedisClient

logger = logging.getLogger(__name__)


class RedisResponseCache:
    """JSON response bodies keyed by request URL, expiring after a per-entry TTL."""

    def __init__(self, *, client: LazyRedisClient, key_prefix: str) -> None:
        self._client = client
        self._key_prefix = key_prefix.strip() or "stockwatch:finnhub:cache"

    async def get(self, url: str) -> Any | None:
        client = await self._client.get()
        raw = await client.get(self._key(url))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (ValueError, UnicodeDecodeError):
            logger.warning("Discarding undecodable cached response", extra={"cache_key": self._key(url)})
            return None

    async def set(self, url: str, payload: Any, *, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        client = await self._client.get()
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        await client.set(self._key(url), body.encode("utf-8"), ex=ttl_seconds)

    def _key(self, url: str) -> str:
        # URLs carry the api token, so only a digest goes into the key.
        digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
        return f"{self._key_prefix}:{digest}"
