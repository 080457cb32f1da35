# src/index/index_factory.py - v1
"""Factory for side-index instantiation."""

from __future__ import annotations

from filestorage.config.settings import ConfigurationError, Settings
from filestorage.index.base_side_index import BaseSideIndex


def create_side_index(settings: Settings) -> BaseSideIndex:
    """Instantiate the configured side-index backend.

    Args:
        settings: Application settings.

    Returns:
        Configured BaseSideIndex implementation.
    """
    backend = settings.side_index_backend

    if backend == "json":
        from filestorage.index.json_index import JsonSideIndex
        return JsonSideIndex(root=settings.side_index_root)

    if backend == "redis":
        from filestorage.index.redis_index import RedisSideIndex
        if not settings.side_index_redis_url:
            raise ConfigurationError(
                "SIDE_INDEX_REDIS_URL must be set when SIDE_INDEX_BACKEND=redis"
            )
        return RedisSideIndex(redis_url=settings.side_index_redis_url)

    raise ValueError(f"Unsupported side-index backend: {backend!r}")
