"""
Moto Catalog - Model default component API routes.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_assignments, get_catalog, get_resolver
from api.models.catalog import DefaultAssignmentUpdate, MutationResponse
from catalog.services.assignment_store import ModelDefaultAssignmentStore
from catalog.services.component_catalog import NOT_FOUND, ComponentCatalog
from catalog.services.resolution_service import ResolutionService
from database.models import ComponentType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Model Defaults"])


@router.put(
    "/models/{model_id}/defaults/{component_type}",
    response_model=MutationResponse,
    summary="Set a model's default component",
    description="Upsert: replaces the existing default of this type, never adds a second one",
)
async def set_model_default(
    model_id: UUID,
    component_type: ComponentType,
    data: DefaultAssignmentUpdate,
    catalog: ComponentCatalog = Depends(get_catalog),
    assignments: ModelDefaultAssignmentStore = Depends(get_assignments),
    resolver: ResolutionService = Depends(get_resolver),
):
    """Assign a default component; 404 for unknown models or components."""
    component = await catalog.get(component_type, data.component_id)
    if component is NOT_FOUND:
        raise HTTPException(
            status_code=404,
            detail=f"{component_type.value} {data.component_id} not found",
        )

    affected = await assignments.upsert(
        model_id,
        component_type,
        data.component_id,
        assignment_type=data.assignment_type,
        notes=data.notes,
    )
    await resolver.invalidate(affected)
    return MutationResponse.from_set(affected)


@router.delete(
    "/models/{model_id}/defaults/{component_type}",
    response_model=MutationResponse,
    summary="Clear a model's default component",
)
async def clear_model_default(
    model_id: UUID,
    component_type: ComponentType,
    assignments: ModelDefaultAssignmentStore = Depends(get_assignments),
    resolver: ResolutionService = Depends(get_resolver),
):
    affected = await assignments.remove(model_id, component_type)
    await resolver.invalidate(affected)
    return MutationResponse.from_set(affected)
