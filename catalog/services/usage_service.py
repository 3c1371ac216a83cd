"""
Moto Catalog - Usage Index.

Counts every live reference to a catalog component:
- model default assignments with a matching (component_type, component_id);
- configurations whose override flag for the type is on and whose stored
  id matches. Flag-off rows are inert and never counted.

Both reference shapes are normalized into one UsageRecord sequence.

Store failures raise CatalogUnavailableError. A usage count that could not
be computed is never reported as zero.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from catalog.schemas import UsageRecord, UsageResult
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
from shared.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)

UNKNOWN_MODEL_NAME = "Unknown Model"
CONFIGURATION_NAME_SEPARATOR = " – "


def configuration_display_name(model_name: str | None, configuration_name: str | None) -> str:
    """Composite "<model> – <configuration>" label."""
    return f"{model_name or UNKNOWN_MODEL_NAME}{CONFIGURATION_NAME_SEPARATOR}{configuration_name or 'Standard'}"


class UsageService:
    """Read-only index of component references."""

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory or get_async_session

    async def count_usage(self, component_id: Any, component_type: "ComponentType | str") -> UsageResult:
        """
        Collect the models and configurations referencing a component.

        Args:
            component_id: Component UUID
            component_type: Component kind

        Returns:
            UsageResult with count == len(models) + len(configurations)

        Raises:
            CatalogUnavailableError: if the store could not be read
        """
        component_type = parse_component_type(component_type)
        pk = coerce_uuid(component_id)
        if pk is None:
            # A malformed id cannot be referenced by any row
            return UsageResult()

        id_column, flag_column = OVERRIDE_COLUMNS[component_type]

        try:
            async with self._session_factory() as session:
                # Outer join: an assignment pointing at a vanished model still counts
                model_rows = await session.execute(
                    select(ModelComponentAssignment.model_id, MotorcycleModel.name)
                    .outerjoin(MotorcycleModel, ModelComponentAssignment.model_id == MotorcycleModel.id)
                    .where(ModelComponentAssignment.component_type == component_type.value)
                    .where(ModelComponentAssignment.component_id == pk)
                    .order_by(MotorcycleModel.name)
                )
                model_refs = model_rows.all()

                config_rows = await session.execute(
                    select(ModelConfiguration.id, ModelConfiguration.name, MotorcycleModel.name)
                    .outerjoin(ModelYear, ModelConfiguration.model_year_id == ModelYear.id)
                    .outerjoin(MotorcycleModel, ModelYear.motorcycle_id == MotorcycleModel.id)
                    .where(getattr(ModelConfiguration, flag_column).is_(True))
                    .where(getattr(ModelConfiguration, id_column) == pk)
                    .order_by(MotorcycleModel.name, ModelConfiguration.name)
                )
                config_refs = config_rows.all()
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            logger.error(
                f"Usage lookup failed for {component_type.value} {pk}: {e}",
                extra={"component_id": str(pk), "component_type": component_type.value},
                exc_info=True,
            )
            raise CatalogUnavailableError(
                f"Could not determine usage of {component_type.value} {pk}; the catalog store is unavailable"
            ) from e

        records = [
            UsageRecord(
                referenced_by="model",
                id=str(model_id),
                display_name=model_name or UNKNOWN_MODEL_NAME,
            )
            for model_id, model_name in model_refs
        ]
        records.extend(
            UsageRecord(
                referenced_by="configuration",
                id=str(config_id),
                display_name=configuration_display_name(model_name, config_name),
            )
            for config_id, config_name, model_name in config_refs
        )

        models = [r.display_name for r in records if r.referenced_by == "model"]
        configurations = [r.display_name for r in records if r.referenced_by == "configuration"]

        logger.debug(
            f"{component_type.value} {pk} referenced by {len(models)} models, "
            f"{len(configurations)} configurations",
            extra={"component_id": str(pk), "component_type": component_type.value},
        )

        return UsageResult(
            count=len(models) + len(configurations),
            models=models,
            configurations=configurations,
            records=records,
        )


# Singleton instance
_usage_service: UsageService | None = None


def get_usage_service() -> UsageService:
    """Get or create the UsageService singleton."""
    global _usage_service
    if _usage_service is None:
        _usage_service = UsageService()
    return _usage_service
