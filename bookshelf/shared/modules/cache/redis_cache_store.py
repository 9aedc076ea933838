"""
Redis Cache Store

This module provides the Redis-backed CacheStore used by the catalog
repositories. The connection is owned by the application and passed in
explicitly; nothing here opens a connection at import time.
"""
import logging
import os
from typing import Optional

import redis

from shared.modules.cache.cache_store import CacheStore, CacheUnavailableError

logger = logging.getLogger(__name__)


class RedisCacheStore(CacheStore):
    """
    A CacheStore over a single long-lived redis-py client.
    """

    def __init__(self, url: Optional[str] = None, socket_timeout: Optional[float] = None, client=None):
        """
        Args:
            url (str): Redis connection URL. Defaults to $REDIS_URL.
            socket_timeout (float): Per-call client timeout in seconds.
            client: An already constructed redis client. When given, open() does not connect.
        """
        self.url = url or os.environ.get("REDIS_URL", "redis://localhost:6379/0")
        if socket_timeout is None:
            socket_timeout = float(os.environ.get("REDIS_SOCKET_TIMEOUT", 5))
        self.socket_timeout = socket_timeout
        self.redis_client = client

    def open(self) -> None:
        """Create the client if needed and check the connection."""
        if self.redis_client is None:
            self.redis_client = redis.Redis.from_url(
                self.url,
                decode_responses=True,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.socket_timeout,
            )
        try:
            self.redis_client.ping()
            logger.info(f"Redis cache store connected to {self.url}")
        except redis.exceptions.RedisError as e:
            # The catalog still serves from MongoDB without a cache
            logger.warning(f"Redis cache store could not reach {self.url}: {e}")

    def close(self) -> None:
        if self.redis_client is not None:
            self.redis_client.close()
            self.redis_client = None
            logger.info("Redis cache store closed")

    @property
    def client(self):
        if self.redis_client is None:
            raise CacheUnavailableError("Redis cache store is not open")
        return self.redis_client

    def exists(self, cache_key: str) -> bool:
        try:
            return bool(self.client.exists(cache_key))
        except redis.exceptions.RedisError as e:
            raise self._unavailable("exists", cache_key, e)

    def get(self, cache_key: str) -> Optional[str]:
        try:
            return self.client.get(cache_key)
        except redis.exceptions.RedisError as e:
            raise self._unavailable("get", cache_key, e)

    def set(self, cache_key: str, value: str, ttl_seconds: Optional[int] = None) -> bool:
        """
        Store a value. With a TTL the value and its expiry are written in a
        single SET ... EX command so the key is never left without one.
        """
        try:
            if ttl_seconds is not None:
                return bool(self.client.set(cache_key, value, ex=ttl_seconds))
            return bool(self.client.set(cache_key, value))
        except redis.exceptions.RedisError as e:
            raise self._unavailable("set", cache_key, e)

    def expire(self, cache_key: str, ttl_seconds: int) -> bool:
        try:
            return bool(self.client.expire(cache_key, ttl_seconds))
        except redis.exceptions.RedisError as e:
            raise self._unavailable("expire", cache_key, e)

    def delete(self, cache_key: str) -> bool:
        try:
            return bool(self.client.delete(cache_key))
        except redis.exceptions.RedisError as e:
            raise self._unavailable("delete", cache_key, e)

    @staticmethod
    def _unavailable(operation: str, cache_key: str, error: Exception) -> CacheUnavailableError:
        logger.warning(f"Redis {operation} failed for key '{cache_key}': {error}")
        return CacheUnavailableError(f"Redis {operation} failed for key '{cache_key}': {error}")
