"""
Moto Catalog - Catalog services.

Business logic over the catalog tables. Every service takes an optional
session factory and otherwise uses the application database.
"""

from catalog.services.assignment_store import ModelDefaultAssignmentStore, get_assignment_store
from catalog.services.batch_service import BatchService, get_batch_service
from catalog.services.completeness_service import (
    CompletenessService,
    get_completeness_service,
    summarize_completeness,
)
from catalog.services.component_catalog import NOT_FOUND, ComponentCatalog, get_component_catalog
from catalog.services.deletion_guard import DeletionGuard, get_deletion_guard
from catalog.services.override_store import ConfigurationOverrideStore, get_override_store
from catalog.services.resolution_cache import ResolutionCache, get_resolution_cache
from catalog.services.resolution_service import ResolutionService, get_resolution_service
from catalog.services.usage_service import UsageService, get_usage_service

__all__ = [
    "NOT_FOUND",
    "ComponentCatalog",
    "get_component_catalog",
    "ModelDefaultAssignmentStore",
    "get_assignment_store",
    "ConfigurationOverrideStore",
    "get_override_store",
    "ResolutionCache",
    "get_resolution_cache",
    "ResolutionService",
    "get_resolution_service",
    "UsageService",
    "get_usage_service",
    "DeletionGuard",
    "get_deletion_guard",
    "CompletenessService",
    "get_completeness_service",
    "summarize_completeness",
    "BatchService",
    "get_batch_service",
]
