"""
Moto Catalog - Model Default Assignment Store.

One default component per (model, component type). Writes are upserts:
an existing row for the pair is replaced in place, never duplicated. The
database backs this with UNIQUE(model_id, component_type).
"""

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.schemas import AffectedEntity, EntityKind, affected
from catalog.services.component_catalog import coerce_uuid, parse_component_type
from database.connection import SessionFactory, get_async_session
from database.models import (
    OVERRIDE_COLUMNS,
    ComponentType,
    ModelComponentAssignment,
    ModelConfiguration,
    ModelYear,
    MotorcycleModel,
)
from shared.errors import RecordNotFoundError

logger = logging.getLogger(__name__)


async def inheriting_configuration_ids(
    session: AsyncSession,
    model_id: uuid.UUID,
    component_type: ComponentType,
) -> list[uuid.UUID]:
    """Configurations of a model whose override flag for this type is off."""
    _, flag_column = OVERRIDE_COLUMNS[component_type]
    result = await session.execute(
        select(ModelConfiguration.id)
        .join(ModelYear, ModelConfiguration.model_year_id == ModelYear.id)
        .where(ModelYear.motorcycle_id == model_id)
        .where(getattr(ModelConfiguration, flag_column).is_(False))
    )
    return list(result.scalars().all())


class ModelDefaultAssignmentStore:
    """Reads and writes model-level default components."""

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory or get_async_session

    async def get(self, model_id: Any, component_type: "ComponentType | str") -> str | None:
        """Default component id for the pair, or None."""
        component_type = parse_component_type(component_type)
        pk = coerce_uuid(model_id)
        if pk is None:
            return None

        async with self._session_factory() as session:
            result = await session.execute(
                select(ModelComponentAssignment.component_id)
                .where(ModelComponentAssignment.model_id == pk)
                .where(ModelComponentAssignment.component_type == component_type.value)
            )
            component_id = result.scalar_one_or_none()

        return str(component_id) if component_id else None

    async def list_for_model(self, model_id: Any) -> dict[ComponentType, str]:
        """All defaults of a model keyed by component type."""
        pk = coerce_uuid(model_id)
        if pk is None:
            return {}

        async with self._session_factory() as session:
            result = await session.execute(
                select(ModelComponentAssignment)
                .where(ModelComponentAssignment.model_id == pk)
            )
            rows = result.scalars().all()

        return {ComponentType(row.component_type): str(row.component_id) for row in rows}

    async def upsert(
        self,
        model_id: Any,
        component_type: "ComponentType | str",
        component_id: Any,
        *,
        assignment_type: str = "standard",
        notes: str | None = None,
    ) -> set[AffectedEntity]:
        """
        Set the default component for a model/type, replacing any existing row.

        Returns:
            Affected set: the model, the old and new components, and every
            configuration of the model that currently inherits this type

        Raises:
            RecordNotFoundError: unknown model
            ValueError: malformed component id
        """
        component_type = parse_component_type(component_type)
        model_pk = coerce_uuid(model_id)
        component_pk = coerce_uuid(component_id)
        if component_pk is None:
            raise ValueError(f"Malformed component id '{component_id}'")
        if model_pk is None:
            raise RecordNotFoundError("Model", str(model_id))

        async with self._session_factory() as session:
            model = await session.get(MotorcycleModel, model_pk)
            if model is None:
                raise RecordNotFoundError("Model", str(model_pk))

            result = await session.execute(
                select(ModelComponentAssignment)
                .where(ModelComponentAssignment.model_id == model_pk)
                .where(ModelComponentAssignment.component_type == component_type.value)
            )
            existing = result.scalar_one_or_none()

            previous_component_id = None
            if existing is not None:
                previous_component_id = existing.component_id
                existing.component_id = component_pk
                existing.assignment_type = assignment_type
                existing.is_default = True
                existing.notes = notes
            else:
                session.add(
                    ModelComponentAssignment(
                        model_id=model_pk,
                        component_type=component_type.value,
                        component_id=component_pk,
                        assignment_type=assignment_type,
                        is_default=True,
                        notes=notes,
                    )
                )

            inheriting = await inheriting_configuration_ids(session, model_pk, component_type)
            await session.commit()

        logger.info(
            f"Model {model_pk} default {component_type.value} set to {component_pk}"
            + (f" (was {previous_component_id})" if previous_component_id else ""),
            extra={"model_id": str(model_pk), "component_type": component_type.value},
        )

        result_set = {
            affected(EntityKind.MODEL, model_pk),
            affected(EntityKind.COMPONENT, component_pk),
        }
        if previous_component_id is not None:
            result_set.add(affected(EntityKind.COMPONENT, previous_component_id))
        result_set.update(affected(EntityKind.CONFIGURATION, config_id) for config_id in inheriting)
        return result_set

    async def remove(self, model_id: Any, component_type: "ComponentType | str") -> set[AffectedEntity]:
        """
        Clear the default for a model/type. Removing a missing row is a no-op
        and returns an empty affected set.
        """
        component_type = parse_component_type(component_type)
        model_pk = coerce_uuid(model_id)
        if model_pk is None:
            return set()

        async with self._session_factory() as session:
            result = await session.execute(
                select(ModelComponentAssignment)
                .where(ModelComponentAssignment.model_id == model_pk)
                .where(ModelComponentAssignment.component_type == component_type.value)
            )
            existing = result.scalar_one_or_none()
            if existing is None:
                return set()

            previous_component_id = existing.component_id
            await session.delete(existing)
            inheriting = await inheriting_configuration_ids(session, model_pk, component_type)
            await session.commit()

        logger.info(
            f"Model {model_pk} default {component_type.value} cleared (was {previous_component_id})",
            extra={"model_id": str(model_pk), "component_type": component_type.value},
        )

        result_set = {
            affected(EntityKind.MODEL, model_pk),
            affected(EntityKind.COMPONENT, previous_component_id),
        }
        result_set.update(affected(EntityKind.CONFIGURATION, config_id) for config_id in inheriting)
        return result_set


# Singleton instance
_assignment_store: ModelDefaultAssignmentStore | None = None


def get_assignment_store() -> ModelDefaultAssignmentStore:
    """Get or create the ModelDefaultAssignmentStore singleton."""
    global _assignment_store
    if _assignment_store is None:
        _assignment_store = ModelDefaultAssignmentStore()
    return _assignment_store
