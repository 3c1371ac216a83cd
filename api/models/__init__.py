"""
Moto Catalog - API Models module.
"""

from api.models.catalog import (
    ASSIGNMENT_TYPES,
    ComponentDeleted,
    ConfigurationComponents,
    DefaultAssignmentUpdate,
    MutationResponse,
    OverrideUpdate,
    ResolvedComponentView,
)

__all__ = [
    "ASSIGNMENT_TYPES",
    "ComponentDeleted",
    "ConfigurationComponents",
    "DefaultAssignmentUpdate",
    "MutationResponse",
    "OverrideUpdate",
    "ResolvedComponentView",
]
