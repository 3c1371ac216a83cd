"""
Moto Catalog - Resolution cache.

Optional Redis read-through cache for resolved components. Entries are only
ever dropped through ``invalidate(affected)`` with the affected set a
mutation returned; there is no broad "refresh everything".

Cache failures are logged and ignored: resolution always falls through to
the stores.
"""

import json
import logging
from collections.abc import Iterable

from catalog.schemas import AffectedEntity, EntityKind, ResolvedComponent
from database.models import ComponentType
from shared.config import get_settings
from shared.errors import ErrorCategory, get_error_logger
from shared.redis_keys import RedisKeys

logger = logging.getLogger(__name__)


def _report_cache_failure(error: Exception, operation: str, **context) -> None:
    get_error_logger().log_error(
        error=error,
        category=ErrorCategory.CACHE_ERROR,
        context={"operation": operation, **context},
        exc_info=False,
    )


class ResolutionCache:
    """Redis-backed cache of ResolvedComponent values."""

    def __init__(self, redis_client, ttl: int | None = None):
        self.redis = redis_client
        self.ttl = ttl or get_settings().RESOLUTION_CACHE_TTL

    async def get(self, cache_key: str) -> ResolvedComponent | None:
        try:
            cached = await self.redis.get(cache_key)
        except Exception as e:
            _report_cache_failure(e, "read", cache_key=cache_key)
            return None

        if not cached:
            return None
        if isinstance(cached, bytes):
            cached = cached.decode("utf-8")
        try:
            return ResolvedComponent.model_validate(json.loads(cached))
        except ValueError as e:
            logger.warning(f"Discarding malformed cache entry {cache_key}: {e}")
            return None

    async def set(self, cache_key: str, resolved: ResolvedComponent) -> None:
        try:
            await self.redis.setex(cache_key, self.ttl, resolved.model_dump_json())
        except Exception as e:
            _report_cache_failure(e, "write", cache_key=cache_key)

    async def invalidate(self, affected: Iterable[AffectedEntity]) -> int:
        """
        Drop the cached resolutions touched by a mutation.

        Component entries need no action: resolutions are keyed by the
        configuration or model they were computed for.

        Returns:
            Number of keys requested for deletion
        """
        keys: list[str] = []
        for entity in affected:
            if entity.kind is EntityKind.CONFIGURATION:
                keys.extend(RedisKeys.resolved_component(entity.id, t.value) for t in ComponentType)
            elif entity.kind is EntityKind.MODEL:
                keys.extend(RedisKeys.resolved_model_default(entity.id, t.value) for t in ComponentType)

        if not keys:
            return 0

        try:
            await self.redis.delete(*keys)
            logger.debug(f"Invalidated {len(keys)} resolution cache keys")
        except Exception as e:
            _report_cache_failure(e, "invalidate", key_count=len(keys))
        return len(keys)


def get_resolution_cache() -> ResolutionCache | None:
    """Build the cache when enabled in settings, otherwise None."""
    settings = get_settings()
    if not settings.RESOLUTION_CACHE_ENABLED:
        return None

    from shared.redis_client import get_redis_client

    return ResolutionCache(get_redis_client(), ttl=settings.RESOLUTION_CACHE_TTL)
