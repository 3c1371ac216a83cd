"""
Tests for usage counting and the deletion guard.

"In use" must come back as a normal negative verdict with the blocking
references; a store that cannot be read must raise, never report zero usage.
"""

import uuid
from contextlib import asynccontextmanager

import pytest
from sqlalchemy.exc import OperationalError

from catalog.services.component_catalog import NOT_FOUND, ComponentCatalog
from catalog.services.deletion_guard import DeletionGuard
from catalog.services.usage_service import UsageService
from database.models import ComponentType
from shared.errors import CatalogUnavailableError, ComponentInUseError, RecordNotFoundError


def failing_session_factory(error: Exception):
    @asynccontextmanager
    async def session_scope():
        raise error
        yield  # pragma: no cover

    return session_scope


@pytest.fixture
def usage(session_factory):
    return UsageService(session_factory)


@pytest.fixture
def guard(session_factory):
    return DeletionGuard(UsageService(session_factory), ComponentCatalog(session_factory))


class TestUsage:
    async def test_model_default_counts(self, usage, factory):
        model = await factory.model("M")
        e1 = await factory.component(ComponentType.ENGINE, "E1")
        await factory.assign(model, ComponentType.ENGINE, e1)

        result = await usage.count_usage(e1.id, ComponentType.ENGINE)

        assert result.count == 1
        assert result.models == ["M"]
        assert result.configurations == []
        assert result.records[0].referenced_by == "model"
        assert result.records[0].id == str(model.id)

    async def test_override_counts_with_composite_name(self, usage, factory):
        model = await factory.model("Street Triple")
        engine = await factory.component(ComponentType.ENGINE)
        configuration = await factory.configuration(
            model, "RS", overrides={ComponentType.ENGINE: engine}
        )

        result = await usage.count_usage(engine.id, "engine")

        assert result.configurations == ["Street Triple – RS"]
        assert result.records[0].referenced_by == "configuration"
        assert result.records[0].id == str(configuration.id)

    async def test_flag_false_reference_is_not_counted(self, usage, factory):
        model = await factory.model()
        engine = await factory.component(ComponentType.ENGINE)
        await factory.configuration(model, engine_id=engine.id, engine_override=False)

        result = await usage.count_usage(engine.id, ComponentType.ENGINE)

        assert result.count == 0

    async def test_usage_is_scoped_to_type(self, usage, factory):
        model = await factory.model()
        engine = await factory.component(ComponentType.ENGINE)
        await factory.assign(model, ComponentType.ENGINE, engine)

        result = await usage.count_usage(engine.id, ComponentType.FRAME)

        assert result.count == 0

    async def test_count_matches_references(self, usage, factory):
        first = await factory.model("Speed Twin")
        second = await factory.model("Thruxton")
        wheel = await factory.component(ComponentType.WHEEL)
        await factory.assign(first, ComponentType.WHEEL, wheel)
        await factory.assign(second, ComponentType.WHEEL, wheel)
        await factory.configuration(first, "Bonneville", overrides={ComponentType.WHEEL: wheel})

        result = await usage.count_usage(wheel.id, ComponentType.WHEEL)

        assert result.count == 3
        assert result.count == len(result.models) + len(result.configurations)
        assert len(result.records) == result.count

    async def test_store_failure_raises(self):
        error = OperationalError("SELECT 1", {}, Exception("connection refused"))
        usage = UsageService(failing_session_factory(error))

        with pytest.raises(CatalogUnavailableError) as exc_info:
            await usage.count_usage(uuid.uuid4(), ComponentType.ENGINE)

        assert exc_info.value.retryable is True
        assert exc_info.value.status_code == 503

    async def test_connection_failure_raises(self):
        usage = UsageService(failing_session_factory(ConnectionRefusedError("db down")))

        with pytest.raises(CatalogUnavailableError):
            await usage.count_usage(uuid.uuid4(), ComponentType.ENGINE)


class TestCanDelete:
    async def test_default_blocks_deletion(self, guard, factory):
        model = await factory.model("M")
        e1 = await factory.component(ComponentType.ENGINE, "E1")
        e2 = await factory.component(ComponentType.ENGINE, "E2")
        await factory.assign(model, ComponentType.ENGINE, e1)
        await factory.configuration(model, "C", overrides={ComponentType.ENGINE: e2})

        check = await guard.can_delete(e1.id, ComponentType.ENGINE)

        assert check.can_delete is False
        assert check.usage.count >= 1
        assert check.usage.models == ["M"]
        assert check.usage.configurations == []

    async def test_unused_component_can_be_deleted(self, guard, factory):
        frame = await factory.component(ComponentType.FRAME)

        check = await guard.can_delete(frame.id, ComponentType.FRAME)

        assert check.can_delete is True
        assert check.usage.count == 0

    async def test_store_failure_is_not_a_verdict(self, factory, session_factory):
        engine = await factory.component(ComponentType.ENGINE)
        error = OperationalError("SELECT 1", {}, Exception("timeout"))
        guard = DeletionGuard(UsageService(failing_session_factory(error)), ComponentCatalog(session_factory))

        with pytest.raises(CatalogUnavailableError):
            await guard.can_delete(engine.id, ComponentType.ENGINE)

    def test_serialized_with_camel_case(self):
        from catalog.schemas import DeletionCheck, UsageResult

        data = DeletionCheck(can_delete=True, usage=UsageResult()).model_dump(by_alias=True)

        assert data["canDelete"] is True
        assert data["usage"]["count"] == 0


class TestDeleteIfUnused:
    async def test_deletes_unused_component(self, guard, factory, session_factory):
        suspension = await factory.component(ComponentType.SUSPENSION)

        affected = await guard.delete_if_unused(suspension.id, ComponentType.SUSPENSION)

        assert len(affected) == 1
        catalog = ComponentCatalog(session_factory)
        assert await catalog.get(ComponentType.SUSPENSION, suspension.id) is NOT_FOUND

    async def test_refuses_component_in_use(self, guard, factory, session_factory):
        model = await factory.model("M")
        brakes = await factory.component(ComponentType.BRAKE_SYSTEM)
        await factory.assign(model, ComponentType.BRAKE_SYSTEM, brakes)

        with pytest.raises(ComponentInUseError) as exc_info:
            await guard.delete_if_unused(brakes.id, ComponentType.BRAKE_SYSTEM)

        assert exc_info.value.usage.models == ["M"]
        catalog = ComponentCatalog(session_factory)
        assert await catalog.get(ComponentType.BRAKE_SYSTEM, brakes.id) is not NOT_FOUND

    async def test_unknown_component(self, guard):
        with pytest.raises(RecordNotFoundError):
            await guard.delete_if_unused(uuid.uuid4(), ComponentType.WHEEL)

    async def test_store_failure_keeps_component(self, factory, session_factory):
        wheel = await factory.component(ComponentType.WHEEL)
        catalog = ComponentCatalog(session_factory)
        guard = DeletionGuard(UsageService(failing_session_factory(ConnectionResetError())), catalog)

        with pytest.raises(CatalogUnavailableError):
            await guard.delete_if_unused(wheel.id, ComponentType.WHEEL)

        assert await catalog.get(ComponentType.WHEEL, wheel.id) is not NOT_FOUND
