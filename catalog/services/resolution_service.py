"""
Moto Catalog - Resolution Service.

Decides which concrete component a trim level actually uses.

Algorithm, per component type:
1. Read the configuration's override pair.
2. Flag on: the override id with provenance "override", or no id with
   "override-empty".
3. Flag off: walk configuration -> model year -> model and read the model
   default: provenance "inherited", or "none" when the model has no default.

An explicit two-step lookup over the override columns and the assignment
rows; nothing here depends on class inheritance between model-level and
trim-level data. A configuration whose hierarchy cannot be walked resolves
to "none" instead of raising, so placeholder records still render. A store
that cannot be read raises CatalogUnavailableError (retryable).
"""

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from catalog.schemas import AffectedEntity, Provenance, ResolvedComponent
from catalog.services.component_catalog import coerce_uuid, parse_component_type
from catalog.services.override_store import read_override_pair
from catalog.services.resolution_cache import ResolutionCache, get_resolution_cache
from database.connection import SessionFactory, get_async_session
from database.models import ComponentType, ModelComponentAssignment, ModelConfiguration
from shared.errors import CatalogUnavailableError
from shared.redis_keys import RedisKeys

logger = logging.getLogger(__name__)


def resolve_pair(
    component_type: ComponentType,
    configuration: Any,
    model_defaults: dict[str, str],
) -> ResolvedComponent:
    """Pure resolution step for one type given already-loaded records."""
    pair = read_override_pair(configuration, component_type)
    if pair.override_flag:
        if pair.override_component_id:
            return ResolvedComponent(
                component_type=component_type,
                component_id=pair.override_component_id,
                provenance=Provenance.OVERRIDE,
            )
        return ResolvedComponent(component_type=component_type, provenance=Provenance.OVERRIDE_EMPTY)

    return inherit(component_type, model_defaults)


def inherit(component_type: ComponentType, model_defaults: dict[str, str]) -> ResolvedComponent:
    default_id = model_defaults.get(component_type.value)
    if default_id:
        return ResolvedComponent(
            component_type=component_type,
            component_id=default_id,
            provenance=Provenance.INHERITED,
        )
    return ResolvedComponent(component_type=component_type, provenance=Provenance.NONE)


async def load_model_defaults(session: AsyncSession, model_id: uuid.UUID | None) -> dict[str, str]:
    """Model default component ids keyed by component type value."""
    if model_id is None:
        return {}
    result = await session.execute(
        select(ModelComponentAssignment.component_type, ModelComponentAssignment.component_id)
        .where(ModelComponentAssignment.model_id == model_id)
    )
    return {row.component_type: str(row.component_id) for row in result}


class ResolutionService:
    """
    Service resolving the effective component of a configuration.

    A pure function of current store state. When a ResolutionCache is given,
    results are cached and must be invalidated with the affected sets that
    mutations return.
    """

    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        cache: ResolutionCache | None = None,
    ):
        self._session_factory = session_factory or get_async_session
        self.cache = cache

    async def resolve(self, configuration_id: Any, component_type: "ComponentType | str") -> ResolvedComponent:
        """
        Effective component of one type for a configuration.

        Args:
            configuration_id: Configuration UUID
            component_type: Component kind

        Returns:
            ResolvedComponent with component_id and provenance
        """
        component_type = parse_component_type(component_type)

        if self.cache is not None:
            cached = await self.cache.get(RedisKeys.resolved_component(str(configuration_id), component_type.value))
            if cached is not None:
                logger.debug(f"Resolution cache hit for {configuration_id}/{component_type.value}")
                return cached

        resolved = (await self._resolve_configuration(configuration_id))[component_type]

        if self.cache is not None:
            await self.cache.set(
                RedisKeys.resolved_component(str(configuration_id), component_type.value),
                resolved,
            )
        return resolved

    async def resolve_all(self, configuration_id: Any) -> dict[ComponentType, ResolvedComponent]:
        """All five component types of a configuration in one store round trip."""
        if self.cache is not None:
            hits = {}
            for component_type in ComponentType:
                cached = await self.cache.get(
                    RedisKeys.resolved_component(str(configuration_id), component_type.value)
                )
                if cached is None:
                    break
                hits[component_type] = cached
            else:
                return hits

        resolved = await self._resolve_configuration(configuration_id)

        if self.cache is not None:
            for component_type, value in resolved.items():
                await self.cache.set(
                    RedisKeys.resolved_component(str(configuration_id), component_type.value),
                    value,
                )
        return resolved

    async def resolve_for_model(self, model_id: Any, component_type: "ComponentType | str") -> ResolvedComponent:
        """Effective component of a bare model (no trim level): its default or none."""
        component_type = parse_component_type(component_type)
        return (await self.resolve_all_for_model(model_id))[component_type]

    async def resolve_all_for_model(self, model_id: Any) -> dict[ComponentType, ResolvedComponent]:
        """Model defaults for all five component types."""
        if self.cache is not None:
            hits = {}
            for component_type in ComponentType:
                cached = await self.cache.get(RedisKeys.resolved_model_default(str(model_id), component_type.value))
                if cached is None:
                    break
                hits[component_type] = cached
            else:
                return hits

        try:
            async with self._session_factory() as session:
                defaults = await load_model_defaults(session, coerce_uuid(model_id))
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            raise self._unavailable("model", model_id, e) from e

        resolved = {component_type: inherit(component_type, defaults) for component_type in ComponentType}

        if self.cache is not None:
            for component_type, value in resolved.items():
                await self.cache.set(RedisKeys.resolved_model_default(str(model_id), component_type.value), value)
        return resolved

    async def invalidate(self, affected: set[AffectedEntity]) -> None:
        """Forward a mutation's affected set to the cache, if any."""
        if self.cache is not None:
            await self.cache.invalidate(affected)

    async def _resolve_configuration(self, configuration_id: Any) -> dict[ComponentType, ResolvedComponent]:
        pk = coerce_uuid(configuration_id)
        if pk is None:
            return self._unresolved(configuration_id, "malformed configuration id")

        try:
            async with self._session_factory() as session:
                configuration = await session.get(
                    ModelConfiguration,
                    pk,
                    options=[selectinload(ModelConfiguration.model_year)],
                )
                if configuration is None:
                    return self._unresolved(configuration_id, "configuration not found")

                model_id = configuration.model_year.motorcycle_id if configuration.model_year else None
                if model_id is None:
                    logger.warning(
                        f"Configuration {pk} has no model year; inherited components resolve to none",
                        extra={"configuration_id": str(pk)},
                    )
                defaults = await load_model_defaults(session, model_id)
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            raise self._unavailable("configuration", pk, e) from e

        return {
            component_type: resolve_pair(component_type, configuration, defaults)
            for component_type in ComponentType
        }

    @staticmethod
    def _unavailable(kind: str, record_id: Any, error: Exception) -> CatalogUnavailableError:
        logger.error(
            f"Resolution failed for {kind} {record_id}: {error}",
            extra={f"{kind}_id": str(record_id)},
            exc_info=True,
        )
        return CatalogUnavailableError(
            f"Could not resolve components of {kind} {record_id}; the catalog store is unavailable"
        )

    @staticmethod
    def _unresolved(configuration_id: Any, reason: str) -> dict[ComponentType, ResolvedComponent]:
        logger.warning(
            f"Cannot resolve components for configuration {configuration_id}: {reason}",
            extra={"configuration_id": str(configuration_id)},
        )
        return {
            component_type: ResolvedComponent(component_type=component_type, provenance=Provenance.NONE)
            for component_type in ComponentType
        }


# Singleton instance
_resolution_service: ResolutionService | None = None


def get_resolution_service() -> ResolutionService:
    """Get or create the ResolutionService singleton."""
    global _resolution_service
    if _resolution_service is None:
        _resolution_service = ResolutionService(cache=get_resolution_cache())
    return _resolution_service
