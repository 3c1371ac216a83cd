"""
Moto Catalog - Component API routes.

Usage lookup and guarded deletion of catalog components.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_catalog, get_guard, get_resolver
from api.models.catalog import ComponentDeleted
from catalog.schemas import DeletionCheck
from catalog.services.component_catalog import NOT_FOUND, ComponentCatalog
from catalog.services.deletion_guard import DeletionGuard
from catalog.services.resolution_service import ResolutionService
from database.models import ComponentType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Components"])


@router.get(
    "/components/{component_type}/{component_id}/usage",
    response_model=DeletionCheck,
    summary="Check where a component is used",
    description="Models and configurations that reference the component, and whether it can be deleted",
)
async def get_component_usage(
    component_type: ComponentType,
    component_id: UUID,
    catalog: ComponentCatalog = Depends(get_catalog),
    guard: DeletionGuard = Depends(get_guard),
):
    """Usage of one component. 503 when the store cannot be read."""
    component = await catalog.get(component_type, component_id)
    if component is NOT_FOUND:
        raise HTTPException(status_code=404, detail=f"{component_type.value} {component_id} not found")

    return await guard.can_delete(component_id, component_type)


@router.delete(
    "/components/{component_type}/{component_id}",
    response_model=ComponentDeleted,
    summary="Delete an unused component",
    description="Deletes the component only when no model or configuration references it (409 otherwise)",
)
async def delete_component(
    component_type: ComponentType,
    component_id: UUID,
    guard: DeletionGuard = Depends(get_guard),
    resolver: ResolutionService = Depends(get_resolver),
):
    """Guarded delete; ComponentInUseError becomes a 409 with the usage detail."""
    affected = await guard.delete_if_unused(component_id, component_type)
    await resolver.invalidate(affected)

    logger.info(
        f"Component deleted via API: {component_type.value} {component_id}",
        extra={"component_id": str(component_id), "component_type": component_type.value},
    )
    return ComponentDeleted.from_set(affected)
