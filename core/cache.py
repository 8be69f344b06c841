"""
Redis-backed cache for expensive query results.

Cache entries expire via Redis TTL; no manual invalidation is needed for
normal operation. Any Redis failure is logged and treated as a miss, so the
caller always falls back to computing the result.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Any

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


def make_cache_key(prefix: str, params: dict[str, Any]) -> str:
    """Produce a deterministic cache key from query parameters."""
    raw = json.dumps(params, sort_keys=True, default=str)
    digest = hashlib.sha256(raw.encode()).hexdigest()[:16]
    return f"cache:{prefix}:{digest}"


class ResultCache:
    """JSON result cache over an async Redis client.

    Disabled (every lookup misses, every store is skipped) when no client is
    configured or ``ttl_seconds`` is not positive.
    """

    def __init__(self, client: aioredis.Redis | None, ttl_seconds: int = 0) -> None:
        self._client = client
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, redis_url: str, ttl_seconds: int) -> ResultCache:
        if not redis_url or ttl_seconds <= 0:
            return cls(None, 0)
        client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=2,
        )
        logger.info("Result cache enabled with %ds TTL", ttl_seconds)
        return cls(client, ttl_seconds)

    @property
    def enabled(self) -> bool:
        return self._client is not None and self.ttl_seconds > 0

    async def get(self, key: str) -> Any | None:
        if not self.enabled:
            return None
        try:
            hit = await self._client.get(key)
        except Exception:
            logger.debug("Redis cache read failed for %s", key, exc_info=True)
            return None
        return json.loads(hit) if hit is not None else None

    async def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        try:
            await self._client.set(
                key,
                json.dumps(value, default=str),
                ex=self.ttl_seconds,
            )
        except Exception:
            logger.debug("Redis cache write failed for %s", key, exc_info=True)

    async def close(self) -> None:
        """Close the Redis client (call during app shutdown)."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Result cache Redis client closed")
