"""
Moto Catalog - API dependencies.

Service providers for the admin routes. Tests override
``get_session_factory`` and ``get_cache`` through
``app.dependency_overrides`` to point every service at their own database.
"""

from fastapi import Depends

from catalog.services.assignment_store import ModelDefaultAssignmentStore
from catalog.services.batch_service import BatchService
from catalog.services.completeness_service import CompletenessService
from catalog.services.component_catalog import ComponentCatalog
from catalog.services.deletion_guard import DeletionGuard
from catalog.services.override_store import ConfigurationOverrideStore
from catalog.services.resolution_cache import ResolutionCache, get_resolution_cache
from catalog.services.resolution_service import ResolutionService
from catalog.services.usage_service import UsageService
from database.connection import SessionFactory, get_async_session


def get_session_factory() -> SessionFactory:
    return get_async_session


def get_cache() -> ResolutionCache | None:
    return get_resolution_cache()


def get_catalog(session_factory: SessionFactory = Depends(get_session_factory)) -> ComponentCatalog:
    return ComponentCatalog(session_factory)


def get_assignments(
    session_factory: SessionFactory = Depends(get_session_factory),
) -> ModelDefaultAssignmentStore:
    return ModelDefaultAssignmentStore(session_factory)


def get_overrides(
    session_factory: SessionFactory = Depends(get_session_factory),
) -> ConfigurationOverrideStore:
    return ConfigurationOverrideStore(session_factory)


def get_resolver(
    session_factory: SessionFactory = Depends(get_session_factory),
    cache: ResolutionCache | None = Depends(get_cache),
) -> ResolutionService:
    return ResolutionService(session_factory, cache=cache)


def get_guard(
    session_factory: SessionFactory = Depends(get_session_factory),
    catalog: ComponentCatalog = Depends(get_catalog),
) -> DeletionGuard:
    return DeletionGuard(UsageService(session_factory), catalog)


def get_scorer(resolver: ResolutionService = Depends(get_resolver)) -> CompletenessService:
    return CompletenessService(resolver)


def get_batch(
    guard: DeletionGuard = Depends(get_guard),
    scorer: CompletenessService = Depends(get_scorer),
) -> BatchService:
    return BatchService(guard, scorer)
