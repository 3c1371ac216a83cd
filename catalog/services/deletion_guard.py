"""
Moto Catalog - Deletion Guard.

The single gate on component deletion. "In use" is a normal negative
verdict carrying the usage detail; an unreachable store surfaces as
CatalogUnavailableError and never as "unused".
"""

import logging
from typing import Any

from catalog.schemas import AffectedEntity, DeletionCheck
from catalog.services.component_catalog import (
    NOT_FOUND,
    ComponentCatalog,
    get_component_catalog,
    parse_component_type,
)
from catalog.services.usage_service import UsageService, get_usage_service
from database.models import ComponentType
from shared.errors import ComponentInUseError, RecordNotFoundError

logger = logging.getLogger(__name__)


class DeletionGuard:
    """Decides whether a catalog component may be deleted."""

    def __init__(
        self,
        usage_service: UsageService | None = None,
        catalog: ComponentCatalog | None = None,
    ):
        self.usage_service = usage_service or get_usage_service()
        self.catalog = catalog or get_component_catalog()

    async def can_delete(self, component_id: Any, component_type: "ComponentType | str") -> DeletionCheck:
        """
        Check a component's usage.

        Returns:
            DeletionCheck with can_delete == (usage.count == 0)

        Raises:
            CatalogUnavailableError: usage could not be computed
        """
        component_type = parse_component_type(component_type)
        usage = await self.usage_service.count_usage(component_id, component_type)
        return DeletionCheck(can_delete=usage.count == 0, usage=usage)

    async def delete_if_unused(self, component_id: Any, component_type: "ComponentType | str") -> set[AffectedEntity]:
        """
        Delete a component only when nothing references it.

        Returns:
            Affected set of the deletion

        Raises:
            RecordNotFoundError: unknown component
            ComponentInUseError: the component is still referenced
            CatalogUnavailableError: usage could not be computed
        """
        component_type = parse_component_type(component_type)

        component = await self.catalog.get(component_type, component_id)
        if component is NOT_FOUND:
            raise RecordNotFoundError(f"Component ({component_type.value})", str(component_id))

        check = await self.can_delete(component_id, component_type)
        if not check.can_delete:
            logger.info(
                f"Refused to delete {component_type.value} {component_id}: "
                f"used by {check.usage.count} record(s)",
                extra={"component_id": str(component_id), "component_type": component_type.value},
            )
            raise ComponentInUseError(str(component_id), component_type.value, check.usage)

        return await self.catalog.delete(component_type, component_id)


# Singleton instance
_deletion_guard: DeletionGuard | None = None


def get_deletion_guard() -> DeletionGuard:
    """Get or create the DeletionGuard singleton."""
    global _deletion_guard
    if _deletion_guard is None:
        _deletion_guard = DeletionGuard()
    return _deletion_guard
