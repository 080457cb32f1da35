# tests/unit/index/test_redis_index.py - v1
"""Tests for index/redis_index.py - mocked Redis client."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock, patch

import pytest


class TestRedisSideIndex:
    def test_import_error_without_redis(self):
        """Clear ImportError when redis is not available."""
        redis_mod = sys.modules.get("redis")
        sys.modules["redis"] = None  # type: ignore[assignment]
        try:
            from filestorage.index.redis_index import RedisSideIndex
            with pytest.raises(ImportError, match="redis"):
                RedisSideIndex(redis_url="redis://localhost")
        finally:
            if redis_mod is not None:
                sys.modules["redis"] = redis_mod
            else:
                sys.modules.pop("redis", None)

    @pytest.fixture
    def mock_redis(self):
        from filestorage.index.redis_index import RedisSideIndex

        with patch("filestorage.index.redis_index.RedisSideIndex.__init__", return_value=None):
            idx = RedisSideIndex.__new__(RedisSideIndex)
            idx._client = MagicMock()
        return idx

    def test_hash_set(self, mock_redis):
        mock_redis.hash_set("session", "file_map", "{}")
        mock_redis._client.hset.assert_called_once_with("session", "file_map", "{}")

    def test_hash_get(self, mock_redis):
        mock_redis._client.hget.return_value = "{}"
        assert mock_redis.hash_get("session", "file_map") == "{}"
        mock_redis._client.hget.assert_called_once_with("session", "file_map")

    def test_hash_get_missing(self, mock_redis):
        mock_redis._client.hget.return_value = None
        assert mock_redis.hash_get("session", "file_map") is None

    def test_hash_delete(self, mock_redis):
        mock_redis.hash_delete("session", "file_map")
        mock_redis._client.hdel.assert_called_once_with("session", "file_map")

    def test_close(self, mock_redis):
        mock_redis.close()
        mock_redis._client.close.assert_called_once()

    def test_from_url(self):
        with patch("redis.Redis.from_url") as from_url:
            from filestorage.index.redis_index import RedisSideIndex
            RedisSideIndex("redis://cache:6379/2")
        from_url.assert_called_once_with("redis://cache:6379/2", decode_responses=True)
