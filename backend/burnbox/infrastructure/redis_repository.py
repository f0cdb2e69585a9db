"""
Redis Repository Base Class

Provides prefixed keys, JSON helpers and Lua script execution for the
Redis-backed repositories. Connection failures are translated into
TransientStoreError so callers never see redis-py exceptions.
"""

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import redis
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.retry import Retry

from burnbox.domain.errors import TransientStoreError

logger = logging.getLogger(__name__)


class RedisRepository:
    """Base Redis repository with key prefixing and atomic script execution."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    @contextmanager
    def translate_errors(self, operation: str):
        """
        Re-raise Redis outages as TransientStoreError.

        The pool has already retried with backoff by the time an error
        reaches this point.
        """
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.warning(f"Redis unavailable during {operation}: {e}")
            raise TransientStoreError(f"Record store unavailable during {operation}", e) from e

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Args:
            key: Redis key

        Returns:
            Dictionary if found and valid JSON, None otherwise
        """
        with self.translate_errors(f"get {key}"):
            data = self.redis.get(self._make_key(key))
        return self._decode_json(key, data)

    def get_many_json(self, keys: List[str]) -> List[Optional[Dict[str, Any]]]:
        """
        Get several JSON values in one round trip.

        Returns:
            One entry per key, None where the key is missing or invalid
        """
        if not keys:
            return []
        with self.translate_errors("mget"):
            values = self.redis.mget([self._make_key(key) for key in keys])
        return [self._decode_json(key, value) for key, value in zip(keys, values)]

    @staticmethod
    def _decode_json(key: str, data) -> Optional[Dict[str, Any]]:
        if data is None:
            return None
        try:
            if isinstance(data, bytes):
                data = data.decode('utf-8')
            return json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Error decoding JSON data for key {key}: {e}")
            return None

    def get_str(self, key: str) -> Optional[str]:
        with self.translate_errors(f"get {key}"):
            value = self.redis.get(self._make_key(key))
        if value is None:
            return None
        return value.decode('utf-8') if isinstance(value, bytes) else value

    def eval_script(self, script: str, keys: List[str], args: List[Any]):
        """
        Run a Lua script atomically.

        Args:
            script: Lua source
            keys: Unprefixed keys, passed as KEYS
            args: Script arguments, passed as ARGV

        Returns:
            Raw script result
        """
        redis_keys = [self._make_key(key) for key in keys]
        with self.translate_errors("script"):
            return self.redis.eval(script, len(redis_keys), *redis_keys, *args)

    def exists(self, key: str) -> bool:
        """
        Check if a key exists in Redis.

        Args:
            key: Redis key to check

        Returns:
            True if key exists, False otherwise
        """
        with self.translate_errors(f"exists {key}"):
            return self.redis.exists(self._make_key(key)) > 0


class RedisConnectionManager:
    """Manages Redis connection with connection pooling and bounded retries."""

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 password: Optional[str] = None, max_connections: int = 20,
                 socket_timeout: float = 2.0, retry_attempts: int = 3,
                 decode_responses: bool = False):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            socket_keepalive=True,
            retry=Retry(ExponentialBackoff(cap=1.0, base=0.05), retry_attempts),
            retry_on_error=[RedisConnectionError, RedisTimeoutError],
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(self.client.ping())
        except (RedisConnectionError, RedisTimeoutError):
            return False
