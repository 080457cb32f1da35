# src/index/redis_index.py - v1
"""Redis-based side-index (SIDE_INDEX_BACKEND=redis).

Requires 'redis' package: pip install redis.
Suitable for distributed/multi-instance deployments.
"""

from __future__ import annotations

import logging

from filestorage.index.base_side_index import BaseSideIndex

logger = logging.getLogger(__name__)


class RedisSideIndex(BaseSideIndex):
    """Redis-backed side-index using HSET/HGET/HDEL."""

    def __init__(self, redis_url: str) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)

    def hash_set(self, name: str, field: str, value: str) -> None:
        self._client.hset(name, field, value)
        logger.debug("Side-index set %s[%s] (%d chars)", name, field, len(value))

    def hash_get(self, name: str, field: str) -> str | None:
        return self._client.hget(name, field)

    def hash_delete(self, name: str, field: str) -> None:
        self._client.hdel(name, field)

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
