"""Tests for the Redis resolution cache and its invalidation contract."""

import logging
import uuid
from unittest.mock import AsyncMock

from catalog.schemas import EntityKind, Provenance, ResolvedComponent, affected
from catalog.services.assignment_store import ModelDefaultAssignmentStore
from catalog.services.resolution_cache import ResolutionCache
from catalog.services.resolution_service import ResolutionService
from database.models import ComponentType


class TestResolutionCache:
    async def test_cache_hit_skips_store(self, mock_redis):
        configuration_id = str(uuid.uuid4())
        cached = ResolvedComponent(
            component_type=ComponentType.ENGINE,
            component_id=str(uuid.uuid4()),
            provenance=Provenance.OVERRIDE,
        )
        mock_redis.get.return_value = cached.model_dump_json().encode("utf-8")
        session_factory = AsyncMock(side_effect=AssertionError("store must not be queried"))
        resolver = ResolutionService(session_factory, cache=ResolutionCache(mock_redis, ttl=60))

        result = await resolver.resolve(configuration_id, ComponentType.ENGINE)

        assert result == cached
        mock_redis.get.assert_called_once_with(f"resolution:configuration:{configuration_id}:engine")

    async def test_cache_miss_stores_result(self, mock_redis, session_factory, factory):
        model = await factory.model()
        engine = await factory.component(ComponentType.ENGINE)
        await factory.assign(model, ComponentType.ENGINE, engine)
        configuration = await factory.configuration(model)
        resolver = ResolutionService(session_factory, cache=ResolutionCache(mock_redis, ttl=60))

        result = await resolver.resolve(configuration.id, ComponentType.ENGINE)

        assert result.provenance is Provenance.INHERITED
        key, ttl, payload = mock_redis.setex.call_args.args
        assert key == f"resolution:configuration:{configuration.id}:engine"
        assert ttl == 60
        assert ResolvedComponent.model_validate_json(payload) == result

    async def test_redis_failure_falls_back_to_store(self, mock_redis, session_factory, factory, caplog):
        mock_redis.get.side_effect = ConnectionError("Redis connection failed")
        mock_redis.setex.side_effect = ConnectionError("Redis connection failed")
        model = await factory.model()
        configuration = await factory.configuration(model)
        resolver = ResolutionService(session_factory, cache=ResolutionCache(mock_redis, ttl=60))

        with caplog.at_level(logging.WARNING):
            result = await resolver.resolve(configuration.id, ComponentType.FRAME)

        assert result.provenance is Provenance.NONE
        operations = [
            r.context["operation"] for r in caplog.records if getattr(r, "error_category", None) == "cache_error"
        ]
        assert operations == ["read", "write"]

    async def test_malformed_entry_is_ignored(self, mock_redis):
        mock_redis.get.return_value = b"{not json"
        cache = ResolutionCache(mock_redis, ttl=60)

        assert await cache.get("resolution:configuration:x:engine") is None


class TestInvalidation:
    async def test_configuration_entity_drops_its_keys(self, mock_redis):
        cache = ResolutionCache(mock_redis, ttl=60)
        configuration_id = uuid.uuid4()

        count = await cache.invalidate({affected(EntityKind.CONFIGURATION, configuration_id)})

        assert count == len(ComponentType)
        keys = mock_redis.delete.call_args.args
        assert f"resolution:configuration:{configuration_id}:engine" in keys
        assert f"resolution:configuration:{configuration_id}:wheel" in keys

    async def test_component_entities_need_no_keys(self, mock_redis):
        cache = ResolutionCache(mock_redis, ttl=60)

        count = await cache.invalidate({affected(EntityKind.COMPONENT, uuid.uuid4())})

        assert count == 0
        mock_redis.delete.assert_not_called()

    async def test_default_change_invalidates_inheriting_configurations(
        self, mock_redis, session_factory, factory
    ):
        model = await factory.model()
        engine = await factory.component(ComponentType.ENGINE)
        configuration = await factory.configuration(model)
        resolver = ResolutionService(session_factory, cache=ResolutionCache(mock_redis, ttl=60))

        changed = await ModelDefaultAssignmentStore(session_factory).upsert(
            model.id, ComponentType.ENGINE, engine.id
        )
        await resolver.invalidate(changed)

        keys = mock_redis.delete.call_args.args
        assert f"resolution:configuration:{configuration.id}:engine" in keys
        assert f"resolution:model:{model.id}:engine" in keys

    async def test_invalidation_failure_is_swallowed(self, mock_redis, caplog):
        mock_redis.delete.side_effect = ConnectionError("Redis down")
        cache = ResolutionCache(mock_redis, ttl=60)

        with caplog.at_level(logging.WARNING):
            count = await cache.invalidate({affected(EntityKind.MODEL, uuid.uuid4())})

        assert count == len(ComponentType)
        records = [r for r in caplog.records if getattr(r, "error_category", None) == "cache_error"]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert records[0].context == {"operation": "invalidate", "key_count": len(ComponentType)}

    async def test_no_cache_is_a_noop(self, session_factory):
        resolver = ResolutionService(session_factory)

        await resolver.invalidate({affected(EntityKind.MODEL, uuid.uuid4())})
