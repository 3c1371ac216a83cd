"""Tests for the component catalog store."""

import uuid

import pytest

from catalog.services.component_catalog import (
    NOT_FOUND,
    UNKNOWN_COMPONENT_NAME,
    ComponentCatalog,
    coerce_uuid,
    component_to_dict,
    parse_component_type,
)
from catalog.schemas import EntityKind
from database.models import ComponentType, Engine


@pytest.fixture
def catalog(session_factory):
    return ComponentCatalog(session_factory)


class TestLookup:
    async def test_unknown_id_returns_sentinel(self, catalog):
        result = await catalog.get(ComponentType.ENGINE, uuid.uuid4())

        assert result is NOT_FOUND
        assert not result
        assert catalog.display_name(result) == UNKNOWN_COMPONENT_NAME

    async def test_malformed_id_returns_sentinel(self, catalog):
        assert await catalog.get("engine", "not-a-uuid") is NOT_FOUND

    async def test_existing_component(self, catalog, factory):
        engine = await factory.component(ComponentType.ENGINE, "Triple 765", displacement_cc=765)

        result = await catalog.get("engine", str(engine.id))

        assert isinstance(result, Engine)
        assert result.displacement_cc == 765
        assert catalog.display_name(result) == "Triple 765"

    async def test_lookup_is_scoped_to_type(self, catalog, factory):
        engine = await factory.component(ComponentType.ENGINE)

        assert await catalog.get(ComponentType.FRAME, engine.id) is NOT_FOUND

    async def test_list_ordered_by_name(self, catalog, factory):
        await factory.component(ComponentType.WHEEL, "Spoked 21/18")
        await factory.component(ComponentType.WHEEL, "Cast 17/17")

        wheels = await catalog.list_components(ComponentType.WHEEL)

        assert [w.name for w in wheels] == ["Cast 17/17", "Spoked 21/18"]


class TestMutations:
    async def test_create_returns_affected_component(self, catalog):
        frame, affected = await catalog.create("frame", name="Tubular steel trellis", material="steel")

        assert frame.id is not None
        assert {(e.kind, e.id) for e in affected} == {(EntityKind.COMPONENT, str(frame.id))}
        assert (await catalog.get("frame", frame.id)).material == "steel"

    async def test_create_requires_name(self, catalog):
        with pytest.raises(ValueError, match="name"):
            await catalog.create("frame", material="aluminium")

    async def test_create_rejects_unknown_attributes(self, catalog):
        with pytest.raises(ValueError, match="horsepower"):
            await catalog.create("frame", name="Twin spar", horsepower=120)

    async def test_create_rejects_identity_columns(self, catalog):
        with pytest.raises(ValueError):
            await catalog.create("frame", name="Twin spar", id=uuid.uuid4())

    async def test_update_keeps_identity(self, catalog, factory):
        suspension = await factory.component(ComponentType.SUSPENSION, "Showa SFF-BP")

        updated, affected = await catalog.update(
            ComponentType.SUSPENSION, suspension.id, front_travel_mm=120.0
        )

        assert updated.id == suspension.id
        assert updated.front_travel_mm == 120.0
        assert len(affected) == 1

    async def test_update_unknown_component(self, catalog):
        updated, affected = await catalog.update("engine", uuid.uuid4(), name="Ghost")

        assert updated is NOT_FOUND
        assert affected == set()

    async def test_delete(self, catalog, factory):
        brakes = await factory.component(ComponentType.BRAKE_SYSTEM, "Brembo Stylema")

        affected = await catalog.delete("brake_system", brakes.id)

        assert len(affected) == 1
        assert await catalog.get("brake_system", brakes.id) is NOT_FOUND
        assert await catalog.delete("brake_system", brakes.id) == set()


class TestHelpers:
    def test_parse_component_type(self):
        assert parse_component_type("brake_system") is ComponentType.BRAKE_SYSTEM
        assert parse_component_type(ComponentType.WHEEL) is ComponentType.WHEEL

    def test_parse_unknown_component_type(self):
        with pytest.raises(ValueError, match="gearbox"):
            parse_component_type("gearbox")

    def test_coerce_uuid(self):
        value = uuid.uuid4()
        assert coerce_uuid(value) is value
        assert coerce_uuid(str(value)) == value
        assert coerce_uuid("nope") is None
        assert coerce_uuid(None) is None

    async def test_component_to_dict(self, factory):
        wheel = await factory.component(
            ComponentType.WHEEL, "Cast", tire_specs={"front": "120/70 ZR17"}
        )

        data = component_to_dict(wheel)

        assert data["id"] == str(wheel.id)
        assert data["tire_specs"] == {"front": "120/70 ZR17"}
        assert isinstance(data["created_at"], str)
