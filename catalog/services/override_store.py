"""
Moto Catalog - Configuration Override Store.

Per-(configuration, component type) override pair: an optional component id
plus an explicit override flag, stored as the ``<type>_id`` /
``<type>_override`` columns of model_configurations.

Write contract:
- flag -> false clears the stored id in the same write, so a later
  flag -> true never re-activates a stale override;
- flag -> true without an id stores "override to nothing", which is
  distinct from inheriting the model default.
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from catalog.schemas import AffectedEntity, EntityKind, OverridePair, affected
from catalog.services.component_catalog import coerce_uuid, parse_component_type
from database.connection import SessionFactory, get_async_session
from database.models import OVERRIDE_COLUMNS, ComponentType, ModelConfiguration
from shared.errors import RecordNotFoundError

logger = logging.getLogger(__name__)


def read_override_pair(configuration: Any, component_type: ComponentType) -> OverridePair:
    """
    Read the override pair of an in-memory configuration.

    Works on ORM rows and plain mappings. A false flag always reads back
    with no component id, whatever the column holds.
    """
    id_column, flag_column = OVERRIDE_COLUMNS[component_type]
    if isinstance(configuration, dict):
        flag = configuration.get(flag_column)
        component_id = configuration.get(id_column)
    else:
        flag = getattr(configuration, flag_column, None)
        component_id = getattr(configuration, id_column, None)

    if not flag:
        return OverridePair(override_flag=False, override_component_id=None)
    return OverridePair(
        override_flag=True,
        override_component_id=str(component_id) if component_id else None,
    )


class ConfigurationOverrideStore:
    """Reads and writes trim-level component overrides."""

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory or get_async_session

    async def get(self, configuration_id: Any, component_type: "ComponentType | str") -> OverridePair:
        """
        Current override pair; an unknown configuration reads as "inherit".
        """
        component_type = parse_component_type(component_type)
        pk = coerce_uuid(configuration_id)
        if pk is None:
            return OverridePair()

        async with self._session_factory() as session:
            configuration = await session.get(ModelConfiguration, pk)

        if configuration is None:
            return OverridePair()
        return read_override_pair(configuration, component_type)

    async def set_override(
        self,
        configuration_id: Any,
        component_type: "ComponentType | str",
        component_id: Any,
        override_flag: bool,
    ) -> set[AffectedEntity]:
        """
        Write the override pair of one configuration/type in a single commit.

        Args:
            configuration_id: Target configuration
            component_type: Component kind
            component_id: Override component, or None
            override_flag: True to override the model default

        Returns:
            Affected set: the configuration plus the previously and newly
            referenced components

        Raises:
            RecordNotFoundError: unknown configuration
            ValueError: malformed component id
        """
        component_type = parse_component_type(component_type)
        pk = coerce_uuid(configuration_id)
        if pk is None:
            raise RecordNotFoundError("Configuration", str(configuration_id))

        new_component_id = None
        if component_id is not None:
            new_component_id = coerce_uuid(component_id)
            if new_component_id is None:
                raise ValueError(f"Malformed component id '{component_id}'")

        if not override_flag and new_component_id is not None:
            logger.debug(
                f"Ignoring component id for cleared {component_type.value} override on {pk}",
                extra={"configuration_id": str(pk), "component_type": component_type.value},
            )
            new_component_id = None

        id_column, flag_column = OVERRIDE_COLUMNS[component_type]

        async with self._session_factory() as session:
            configuration = await session.get(ModelConfiguration, pk)
            if configuration is None:
                raise RecordNotFoundError("Configuration", str(pk))

            previous = read_override_pair(configuration, component_type)

            setattr(configuration, flag_column, bool(override_flag))
            setattr(configuration, id_column, new_component_id)
            try:
                await session.commit()
            except SQLAlchemyError:
                logger.error(
                    f"Failed to write {component_type.value} override for configuration {pk}",
                    extra={"configuration_id": str(pk)},
                    exc_info=True,
                )
                raise

        logger.info(
            f"Configuration {pk} {component_type.value} override set: "
            f"flag={bool(override_flag)}, component={new_component_id}",
            extra={"configuration_id": str(pk), "component_type": component_type.value},
        )

        result = {affected(EntityKind.CONFIGURATION, pk)}
        if previous.override_component_id:
            result.add(affected(EntityKind.COMPONENT, previous.override_component_id))
        if new_component_id is not None:
            result.add(affected(EntityKind.COMPONENT, new_component_id))
        return result


# Singleton instance
_override_store: ConfigurationOverrideStore | None = None


def get_override_store() -> ConfigurationOverrideStore:
    """Get or create the ConfigurationOverrideStore singleton."""
    global _override_store
    if _override_store is None:
        _override_store = ConfigurationOverrideStore()
    return _override_store
