"""
Tests for component resolution.

Covers the override / override-empty / inherited / none branches, the
trim-level scenario of a model default replaced by an override, and broken
hierarchies that must resolve without raising.
"""

import uuid
from contextlib import asynccontextmanager

import pytest
from sqlalchemy.exc import OperationalError

from catalog.schemas import Provenance
from catalog.services.assignment_store import ModelDefaultAssignmentStore
from catalog.services.override_store import ConfigurationOverrideStore
from catalog.services.resolution_service import ResolutionService
from database.models import ComponentType, ModelConfiguration
from shared.errors import CatalogUnavailableError


@pytest.fixture
def resolver(session_factory):
    return ResolutionService(session_factory)


@pytest.fixture
def overrides(session_factory):
    return ConfigurationOverrideStore(session_factory)


@pytest.fixture
def assignments(session_factory):
    return ModelDefaultAssignmentStore(session_factory)


class TestResolve:
    async def test_inherited_then_overridden(self, resolver, overrides, factory):
        model = await factory.model("M")
        e1 = await factory.component(ComponentType.ENGINE, "E1")
        e2 = await factory.component(ComponentType.ENGINE, "E2")
        await factory.assign(model, ComponentType.ENGINE, e1)
        configuration = await factory.configuration(model, "C")

        before = await resolver.resolve(configuration.id, "engine")
        assert before.component_id == str(e1.id)
        assert before.provenance is Provenance.INHERITED

        await overrides.set_override(configuration.id, ComponentType.ENGINE, e2.id, True)

        after = await resolver.resolve(configuration.id, "engine")
        assert after.component_id == str(e2.id)
        assert after.provenance is Provenance.OVERRIDE

    async def test_repeated_resolution_is_stable(self, resolver, factory):
        model = await factory.model()
        frame = await factory.component(ComponentType.FRAME)
        await factory.assign(model, ComponentType.FRAME, frame)
        configuration = await factory.configuration(model)

        first = await resolver.resolve(configuration.id, ComponentType.FRAME)
        second = await resolver.resolve(configuration.id, ComponentType.FRAME)

        assert first == second

    async def test_retoggle_without_component_is_override_empty(self, resolver, overrides, factory):
        # Turning the flag off clears the stored id, so turning it back on
        # without a component is an explicit "no component".
        model = await factory.model()
        default_engine = await factory.component(ComponentType.ENGINE)
        override_engine = await factory.component(ComponentType.ENGINE)
        await factory.assign(model, ComponentType.ENGINE, default_engine)
        configuration = await factory.configuration(model)

        await overrides.set_override(configuration.id, ComponentType.ENGINE, override_engine.id, True)
        await overrides.set_override(configuration.id, ComponentType.ENGINE, None, False)
        await overrides.set_override(configuration.id, ComponentType.ENGINE, None, True)

        resolved = await resolver.resolve(configuration.id, ComponentType.ENGINE)
        assert resolved.provenance is Provenance.OVERRIDE_EMPTY
        assert resolved.component_id is None

    async def test_override_empty_hides_model_default(self, resolver, factory):
        model = await factory.model()
        wheel = await factory.component(ComponentType.WHEEL)
        await factory.assign(model, ComponentType.WHEEL, wheel)
        configuration = await factory.configuration(model, overrides={ComponentType.WHEEL: None})

        resolved = await resolver.resolve(configuration.id, ComponentType.WHEEL)

        assert resolved.provenance is Provenance.OVERRIDE_EMPTY

    async def test_no_default_resolves_to_none(self, resolver, factory):
        model = await factory.model()
        configuration = await factory.configuration(model)

        resolved = await resolver.resolve(configuration.id, ComponentType.SUSPENSION)

        assert resolved.provenance is Provenance.NONE
        assert resolved.component_id is None

    async def test_default_change_reaches_inheriting_configuration(self, resolver, assignments, factory):
        model = await factory.model()
        old = await factory.component(ComponentType.ENGINE)
        new = await factory.component(ComponentType.ENGINE)
        await factory.assign(model, ComponentType.ENGINE, old)
        configuration = await factory.configuration(model)

        await assignments.upsert(model.id, ComponentType.ENGINE, new.id)

        resolved = await resolver.resolve(configuration.id, ComponentType.ENGINE)
        assert resolved.component_id == str(new.id)
        assert resolved.provenance is Provenance.INHERITED


class TestBrokenHierarchy:
    async def test_unknown_configuration(self, resolver):
        resolved = await resolver.resolve(uuid.uuid4(), ComponentType.ENGINE)

        assert resolved.provenance is Provenance.NONE

    async def test_malformed_configuration_id(self, resolver):
        resolved = await resolver.resolve("trim-42", ComponentType.ENGINE)

        assert resolved.provenance is Provenance.NONE

    async def test_missing_model_year(self, resolver, session_maker):
        orphan = ModelConfiguration(model_year_id=uuid.uuid4(), name="Orphan")
        async with session_maker() as session:
            session.add(orphan)
            await session.commit()

        resolved = await resolver.resolve_all(orphan.id)

        assert {r.provenance for r in resolved.values()} == {Provenance.NONE}

    async def test_override_still_applies_without_model_year(self, resolver, session_maker, factory):
        brakes = await factory.component(ComponentType.BRAKE_SYSTEM)
        orphan = ModelConfiguration(
            model_year_id=uuid.uuid4(),
            name="Orphan",
            brake_system_id=brakes.id,
            brake_system_override=True,
        )
        async with session_maker() as session:
            session.add(orphan)
            await session.commit()

        resolved = await resolver.resolve(orphan.id, ComponentType.BRAKE_SYSTEM)

        assert resolved.provenance is Provenance.OVERRIDE
        assert resolved.component_id == str(brakes.id)


class TestResolveAll:
    async def test_all_types_in_one_call(self, resolver, factory):
        model = await factory.model()
        engine = await factory.component(ComponentType.ENGINE)
        frame = await factory.component(ComponentType.FRAME)
        wheel = await factory.component(ComponentType.WHEEL)
        await factory.assign(model, ComponentType.ENGINE, engine)
        await factory.assign(model, ComponentType.FRAME, frame)
        configuration = await factory.configuration(
            model, overrides={ComponentType.WHEEL: wheel, ComponentType.SUSPENSION: None}
        )

        resolved = await resolver.resolve_all(configuration.id)

        assert set(resolved) == set(ComponentType)
        assert resolved[ComponentType.ENGINE].provenance is Provenance.INHERITED
        assert resolved[ComponentType.FRAME].component_id == str(frame.id)
        assert resolved[ComponentType.WHEEL].provenance is Provenance.OVERRIDE
        assert resolved[ComponentType.SUSPENSION].provenance is Provenance.OVERRIDE_EMPTY
        assert resolved[ComponentType.BRAKE_SYSTEM].provenance is Provenance.NONE

    async def test_model_level_resolution(self, resolver, factory):
        model = await factory.model()
        engine = await factory.component(ComponentType.ENGINE)
        await factory.assign(model, ComponentType.ENGINE, engine)

        engine_result = await resolver.resolve_for_model(model.id, "engine")
        frame_result = await resolver.resolve_for_model(model.id, "frame")

        assert engine_result.provenance is Provenance.INHERITED
        assert engine_result.component_id == str(engine.id)
        assert frame_result.provenance is Provenance.NONE


class TestStoreFailure:
    @staticmethod
    def broken_scope(error):
        @asynccontextmanager
        async def session_scope():
            raise error
            yield  # pragma: no cover

        return session_scope

    async def test_configuration_lookup_raises_unavailable(self):
        error = OperationalError("SELECT 1", {}, Exception("connection refused"))
        resolver = ResolutionService(self.broken_scope(error))

        with pytest.raises(CatalogUnavailableError) as exc_info:
            await resolver.resolve_all(uuid.uuid4())

        assert exc_info.value.retryable is True

    async def test_model_lookup_raises_unavailable(self):
        resolver = ResolutionService(self.broken_scope(ConnectionRefusedError("db down")))

        with pytest.raises(CatalogUnavailableError):
            await resolver.resolve_for_model(uuid.uuid4(), ComponentType.FRAME)

    async def test_malformed_id_never_touches_the_store(self):
        resolver = ResolutionService(self.broken_scope(ConnectionRefusedError("db down")))

        resolved = await resolver.resolve("trim-42", ComponentType.ENGINE)

        assert resolved.provenance is Provenance.NONE
