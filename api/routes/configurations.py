"""
Moto Catalog - Configuration (trim level) API routes.

Override writes and the resolved component view of a configuration.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_catalog, get_overrides, get_resolver
from api.models.catalog import (
    ConfigurationComponents,
    MutationResponse,
    OverrideUpdate,
    ResolvedComponentView,
)
from catalog.services.component_catalog import NOT_FOUND, ComponentCatalog
from catalog.services.override_store import ConfigurationOverrideStore
from catalog.services.resolution_service import ResolutionService
from database.models import ComponentType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Configurations"])


@router.put(
    "/configurations/{configuration_id}/overrides/{component_type}",
    response_model=MutationResponse,
    summary="Set or clear a component override",
    description=(
        "overrideFlag=false clears the stored component and inherits the model default; "
        "overrideFlag=true without componentId means the trim level has no such component"
    ),
)
async def set_configuration_override(
    configuration_id: UUID,
    component_type: ComponentType,
    data: OverrideUpdate,
    catalog: ComponentCatalog = Depends(get_catalog),
    overrides: ConfigurationOverrideStore = Depends(get_overrides),
    resolver: ResolutionService = Depends(get_resolver),
):
    if data.override_flag and data.component_id is not None:
        component = await catalog.get(component_type, data.component_id)
        if component is NOT_FOUND:
            raise HTTPException(
                status_code=404,
                detail=f"{component_type.value} {data.component_id} not found",
            )

    affected = await overrides.set_override(
        configuration_id,
        component_type,
        data.component_id,
        data.override_flag,
    )
    await resolver.invalidate(affected)
    return MutationResponse.from_set(affected)


@router.get(
    "/configurations/{configuration_id}/components",
    response_model=ConfigurationComponents,
    summary="Effective components of a configuration",
    description="Each component type with the resolved component, its provenance and display name",
)
async def get_configuration_components(
    configuration_id: UUID,
    catalog: ComponentCatalog = Depends(get_catalog),
    resolver: ResolutionService = Depends(get_resolver),
):
    """
    Resolve all five component types.

    A configuration whose model cannot be found resolves every type to
    provenance "none" rather than failing.
    """
    resolved = await resolver.resolve_all(configuration_id)

    components = []
    for component_type in ComponentType:
        item = resolved[component_type]
        name = None
        if item.component_id:
            name = catalog.display_name(await catalog.get(component_type, item.component_id))
        components.append(
            ResolvedComponentView(
                component_type=component_type.value,
                component_id=item.component_id,
                provenance=item.provenance.value,
                name=name,
            )
        )

    return ConfigurationComponents(configuration_id=str(configuration_id), components=components)
