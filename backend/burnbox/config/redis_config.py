"""
Redis Configuration

Connection settings for the burn record store and the module-level
connection manager shared by every repository in the process.
"""

import os
from typing import Optional

import redis

from burnbox.infrastructure.redis_repository import RedisConnectionManager, RedisRepository


class RedisConfig:
    """
    Redis settings from environment variables.

    ``REDIS_URL`` (redis://[:password@]host:port/db) takes precedence over
    the individual ``REDIS_HOST``/``REDIS_PORT``/``REDIS_DB`` settings.
    """

    def __init__(self):
        url = os.getenv("REDIS_URL")
        parsed = redis.connection.parse_url(url) if url else {}

        self.url = url
        self.host = parsed.get("host") or os.getenv("REDIS_HOST", "localhost")
        self.port = int(parsed.get("port") or os.getenv("REDIS_PORT", 6379))
        self.db = int(parsed.get("db", os.getenv("REDIS_DB", 0)))
        self.password = parsed.get("password") or os.getenv("REDIS_PASSWORD")

        self.max_connections = int(os.getenv("REDIS_MAX_CONNECTIONS", 20))
        self.socket_timeout = float(os.getenv("REDIS_SOCKET_TIMEOUT", 2))
        self.retry_attempts = int(os.getenv("REDIS_RETRY_ATTEMPTS", 3))
        # Namespaces burn keys when the instance is shared with Celery
        self.key_prefix = os.getenv("REDIS_KEY_PREFIX", "burnbox")


_redis_manager: Optional[RedisConnectionManager] = None
_key_prefix: str = ""


def init_redis(config: Optional[RedisConfig] = None) -> RedisConnectionManager:
    """
    Create the process-wide connection manager.

    No connection is opened here; the pool connects on first command.
    """
    global _redis_manager, _key_prefix

    config = config or RedisConfig()
    _redis_manager = RedisConnectionManager(
        host=config.host,
        port=config.port,
        db=config.db,
        password=config.password,
        max_connections=config.max_connections,
        socket_timeout=config.socket_timeout,
        retry_attempts=config.retry_attempts,
    )
    _key_prefix = config.key_prefix
    return _redis_manager


def get_redis_client() -> redis.Redis:
    """
    Raises:
        RuntimeError: If init_redis() has not run
    """
    if _redis_manager is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_manager.client


def get_redis_repository(key_prefix: Optional[str] = None) -> RedisRepository:
    """Repository over the shared client, using the configured key prefix by default."""
    prefix = _key_prefix if key_prefix is None else key_prefix
    return RedisRepository(get_redis_client(), prefix)


def redis_health_check() -> bool:
    return _redis_manager is not None and _redis_manager.health_check()
