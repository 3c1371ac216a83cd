"""
Redis client singleton for the resolution cache.

This module provides a singleton Redis client configured for production reliability
with connection pooling, retry logic, and health checks.
"""

import logging
from functools import lru_cache

import redis.asyncio as redis
from redis import ConnectionError as RedisConnectionError

from shared.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache
def get_redis_client() -> "redis.Redis[str]":
    """
    Get cached Redis client instance with production-ready configuration.

    This function creates a singleton Redis client with:
    - Connection pooling (max 20 connections)
    - Automatic retry on timeout for transient failures
    - Health check pings every 30 seconds

    Returns:
        Redis async client configured with connection pool and retry logic

    Note:
        Uses @lru_cache to ensure only one Redis connection is created.
    """
    settings = get_settings()

    try:
        conn_kwargs = {
            "max_connections": 20,
            "decode_responses": True,
            "retry_on_timeout": True,
            "health_check_interval": 30,
        }

        if settings.REDIS_PASSWORD:
            conn_kwargs["password"] = settings.REDIS_PASSWORD

        client = redis.from_url(settings.REDIS_URL, **conn_kwargs)

        auth_status = "with password" if settings.REDIS_PASSWORD else "NO PASSWORD (insecure)"
        logger.info(
            f"Redis client initialized: {settings.REDIS_URL} "
            f"({auth_status}, max_connections=20, retry_on_timeout=True)"
        )
        return client

    except RedisConnectionError as e:
        logger.error(
            f"Redis connection failed: {e}. Resolution cache unavailable.",
            exc_info=True
        )
        raise
