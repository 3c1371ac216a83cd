"""
Moto Catalog - Component Catalog.

Typed store of component records (engines, brake systems, frames,
suspensions, wheels), one table per kind, keyed by id.

Lookups never raise for unknown ids: they return the NOT_FOUND sentinel so
display-only callers can render "Unknown Component".
"""

import logging
import uuid
from typing import Any

from sqlalchemy import inspect, select

from catalog.schemas import AffectedEntity, EntityKind, affected
from database.connection import SessionFactory, get_async_session
from database.models import COMPONENT_MODELS, Base, ComponentType

logger = logging.getLogger(__name__)

UNKNOWN_COMPONENT_NAME = "Unknown Component"

# Columns managed by the store, never set from admin input
PROTECTED_COLUMNS = frozenset({"id", "created_at", "updated_at"})


class _NotFound:
    """Sentinel returned by ComponentCatalog.get for unknown ids."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


def parse_component_type(value: "ComponentType | str") -> ComponentType:
    """
    Normalize a component type given as enum or string.

    Raises:
        ValueError: if the value names no known component type
    """
    if isinstance(value, ComponentType):
        return value
    try:
        return ComponentType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in ComponentType)
        raise ValueError(f"Unknown component type '{value}'. Expected one of: {allowed}") from None


def coerce_uuid(value: Any) -> uuid.UUID | None:
    """Parse an id into a UUID, None when it is missing or malformed."""
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, AttributeError, TypeError):
        return None


def editable_columns(component_type: ComponentType) -> set[str]:
    """Attribute names an admin may set on a component of this kind."""
    mapper = inspect(COMPONENT_MODELS[component_type])
    return {column.key for column in mapper.column_attrs} - PROTECTED_COLUMNS


def component_to_dict(component: Base) -> dict[str, Any]:
    """Serialize a component row to a JSON-friendly dict."""
    mapper = inspect(type(component))
    data: dict[str, Any] = {}
    for column in mapper.column_attrs:
        value = getattr(component, column.key)
        if isinstance(value, uuid.UUID):
            value = str(value)
        elif hasattr(value, "isoformat"):
            value = value.isoformat()
        data[column.key] = value
    return data


class ComponentCatalog:
    """
    Service for reading and editing catalog components.

    Mutations return the set of affected (entity kind, id) pairs so callers
    can invalidate exactly what changed. Deletion is only reachable through
    the DeletionGuard.
    """

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory or get_async_session

    async def get(self, component_type: "ComponentType | str", component_id: Any) -> "Base | _NotFound":
        """
        Look up one component.

        Args:
            component_type: Kind of component
            component_id: Component UUID (str or UUID)

        Returns:
            The component row, or NOT_FOUND for unknown/malformed ids
        """
        component_type = parse_component_type(component_type)
        pk = coerce_uuid(component_id)
        if pk is None:
            return NOT_FOUND

        async with self._session_factory() as session:
            component = await session.get(COMPONENT_MODELS[component_type], pk)

        if component is None:
            logger.debug(
                f"Component not found: {component_type.value} {component_id}",
                extra={"component_id": str(component_id), "component_type": component_type.value},
            )
            return NOT_FOUND
        return component

    async def list_components(self, component_type: "ComponentType | str") -> list[Base]:
        """All components of one kind ordered by name."""
        component_type = parse_component_type(component_type)
        model_cls = COMPONENT_MODELS[component_type]

        async with self._session_factory() as session:
            result = await session.execute(select(model_cls).order_by(model_cls.name))
            return list(result.scalars().all())

    async def create(
        self,
        component_type: "ComponentType | str",
        **attributes: Any,
    ) -> tuple[Base, set[AffectedEntity]]:
        """
        Create a component.

        Raises:
            ValueError: on unknown attribute names or a missing name
        """
        component_type = parse_component_type(component_type)
        self._check_attributes(component_type, attributes)
        if not attributes.get("name"):
            raise ValueError("Component name is required")

        component = COMPONENT_MODELS[component_type](**attributes)

        async with self._session_factory() as session:
            session.add(component)
            await session.commit()

        logger.info(
            f"Created {component_type.value} component {component.id} ({component.name})",
            extra={"component_id": str(component.id), "component_type": component_type.value},
        )
        return component, {affected(EntityKind.COMPONENT, component.id)}

    async def update(
        self,
        component_type: "ComponentType | str",
        component_id: Any,
        **attributes: Any,
    ) -> tuple["Base | _NotFound", set[AffectedEntity]]:
        """
        Edit attributes of a component. Identity never changes.

        Returns:
            (component or NOT_FOUND, affected set; empty when not found)
        """
        component_type = parse_component_type(component_type)
        self._check_attributes(component_type, attributes)
        pk = coerce_uuid(component_id)
        if pk is None:
            return NOT_FOUND, set()

        async with self._session_factory() as session:
            component = await session.get(COMPONENT_MODELS[component_type], pk)
            if component is None:
                return NOT_FOUND, set()

            for key, value in attributes.items():
                setattr(component, key, value)
            await session.commit()

        return component, {affected(EntityKind.COMPONENT, pk)}

    async def delete(self, component_type: "ComponentType | str", component_id: Any) -> set[AffectedEntity]:
        """
        Remove a component row.

        Callers must have consulted the DeletionGuard first; use
        DeletionGuard.delete_if_unused instead of calling this directly.
        """
        component_type = parse_component_type(component_type)
        pk = coerce_uuid(component_id)
        if pk is None:
            return set()

        async with self._session_factory() as session:
            component = await session.get(COMPONENT_MODELS[component_type], pk)
            if component is None:
                return set()
            await session.delete(component)
            await session.commit()

        logger.info(
            f"Deleted {component_type.value} component {pk}",
            extra={"component_id": str(pk), "component_type": component_type.value},
        )
        return {affected(EntityKind.COMPONENT, pk)}

    @staticmethod
    def display_name(component: "Base | _NotFound") -> str:
        """Human-readable name, "Unknown Component" for NOT_FOUND."""
        if component is NOT_FOUND or component is None:
            return UNKNOWN_COMPONENT_NAME
        return getattr(component, "name", None) or UNKNOWN_COMPONENT_NAME

    @staticmethod
    def _check_attributes(component_type: ComponentType, attributes: dict[str, Any]) -> None:
        unknown = set(attributes) - editable_columns(component_type)
        if unknown:
            raise ValueError(
                f"Unknown {component_type.value} attribute(s): {', '.join(sorted(unknown))}"
            )


# Singleton instance
_component_catalog: ComponentCatalog | None = None


def get_component_catalog() -> ComponentCatalog:
    """Get or create the ComponentCatalog singleton."""
    global _component_catalog
    if _component_catalog is None:
        _component_catalog = ComponentCatalog()
    return _component_catalog
