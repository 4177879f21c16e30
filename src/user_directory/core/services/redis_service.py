"""Redis connection service for managing Redis client lifecycle and health checks."""

from typing import Any

import redis.asyncio as redis_async
from loguru import logger
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff

from src.user_directory.runtime.config.config_data import RedisConfig


class RedisService:
    """Owns the shared async Redis client used by the search cache.

    When Redis is disabled or misconfigured the service stays inert and the
    cache falls back to its in-memory store.
    """

    def __init__(self, redis_config: RedisConfig, environment: str = "development"):
        logger.info("Setting up Redis service")
        self._enabled = redis_config.enabled
        self._client = None
        self._url = redis_config.url

        if not self._enabled:
            logger.info("Redis is disabled, service will not connect")
            return

        if not self._url:
            logger.warning("Redis URL not configured, service will not connect")
            self._enabled = False
            return

        try:
            logger.info(
                "Initializing Redis client with connection string: {}",
                redis_config.sanitized_connection_string,
            )
            retry = Retry(ExponentialBackoff(base=1, cap=10), retries=3)
            self._client = redis_async.from_url(
                redis_config.connection_string,
                encoding="utf-8",
                decode_responses=redis_config.decode_responses,
                encoding_errors="replace",
                max_connections=redis_config.max_connections,
                socket_timeout=redis_config.socket_timeout,
                socket_connect_timeout=redis_config.socket_connect_timeout,
                socket_keepalive=True,
                health_check_interval=30,
                retry=retry,
                client_name="user_directory_cache",
            )
        except Exception as e:
            logger.error(
                "Failed to initialize Redis client",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            self._enabled = False
            self._client = None
            if environment == "production":
                raise

    def get_client(self) -> Any | None:
        """Get the Redis async client instance, or None when unavailable."""
        if not self._enabled or not self._client:
            return None
        return self._client

    async def health_check(self) -> bool:
        """PING the server. Returns False when disabled or unreachable."""
        if not self._enabled or not self._client:
            return False

        try:
            await self._client.ping()
            return True
        except Exception as e:
            logger.error(
                "Redis health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    async def close(self) -> None:
        """Close the Redis connection and clean up resources."""
        if self._client:
            try:
                logger.info("Closing Redis connection")
                await self._client.aclose()
            except Exception as e:
                logger.error(
                    "Error closing Redis connection",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
            finally:
                self._client = None

    @property
    def is_enabled(self) -> bool:
        return self._enabled
