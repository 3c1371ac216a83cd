"""
Pytest configuration and shared fixtures for all tests.

This file is automatically loaded by pytest and provides:
- An in-memory SQLite database (aiosqlite) per test
- A session factory the catalog services accept
- Factory helpers for brands, models, years, configurations and components
- Mock Redis client
- Async test support
"""

import inspect
import logging
import uuid
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from database.connection import build_session_scope
from database.models import (
    COMPONENT_MODELS,
    OVERRIDE_COLUMNS,
    Base,
    Brand,
    ComponentType,
    ModelComponentAssignment,
    ModelConfiguration,
    ModelYear,
    MotorcycleModel,
)


# =============================================================================
# ASYNC TEST SUPPORT
# =============================================================================

def pytest_collection_modifyitems(items):
    """Mark all async tests with pytest.mark.asyncio."""
    for item in items:
        if inspect.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def setup_logging():
    """Configure logging for tests."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Reduce noise from third-party loggers
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
async def db_engine():
    """Fresh in-memory database with the full catalog schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest.fixture
def session_factory(session_maker):
    """Session factory to inject into catalog services."""
    return build_session_scope(session_maker)


# =============================================================================
# TEST DATA FIXTURES
# =============================================================================

class CatalogFactory:
    """Creates catalog rows directly through the ORM."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def _save(self, *rows: Any) -> None:
        async with self._session_maker() as session:
            session.add_all(rows)
            await session.commit()

    async def brand(self, name: str | None = None, **fields: Any) -> Brand:
        brand = Brand(name=name or f"Brand {uuid.uuid4().hex[:6]}", **fields)
        await self._save(brand)
        return brand

    async def model(self, name: str = "Street Triple", **fields: Any) -> MotorcycleModel:
        model = MotorcycleModel(
            name=name,
            slug=f"{name.lower().replace(' ', '-')}-{uuid.uuid4().hex[:6]}",
            **fields,
        )
        await self._save(model)
        return model

    async def year(self, model: MotorcycleModel, year: int = 2024) -> ModelYear:
        model_year = ModelYear(motorcycle_id=model.id, year=year)
        await self._save(model_year)
        return model_year

    async def configuration(
        self,
        model: MotorcycleModel,
        name: str = "Standard",
        year: int = 2024,
        model_year: ModelYear | None = None,
        overrides: dict[ComponentType, Any] | None = None,
        **fields: Any,
    ) -> ModelConfiguration:
        """
        Configuration of a model.

        ``overrides`` maps a component type to a component (or None for an
        explicit "no component" override); listed types get the flag set.
        """
        model_year = model_year or await self.year(model, year)
        for component_type, component in (overrides or {}).items():
            id_column, flag_column = OVERRIDE_COLUMNS[component_type]
            fields[flag_column] = True
            fields[id_column] = component.id if component is not None else None

        configuration = ModelConfiguration(model_year_id=model_year.id, name=name, **fields)
        await self._save(configuration)
        return configuration

    async def component(self, component_type: ComponentType, name: str | None = None, **fields: Any):
        component = COMPONENT_MODELS[component_type](
            name=name or f"{component_type.value} {uuid.uuid4().hex[:6]}",
            **fields,
        )
        await self._save(component)
        return component

    async def assign(self, model: MotorcycleModel, component_type: ComponentType, component) -> ModelComponentAssignment:
        assignment = ModelComponentAssignment(
            model_id=model.id,
            component_type=component_type.value,
            component_id=component.id,
        )
        await self._save(assignment)
        return assignment


@pytest.fixture
def factory(session_maker) -> CatalogFactory:
    return CatalogFactory(session_maker)


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_redis():
    """Provide mock Redis client for tests."""
    from unittest.mock import AsyncMock, MagicMock

    redis_mock = MagicMock()
    redis_mock.get = AsyncMock(return_value=None)
    redis_mock.set = AsyncMock(return_value=True)
    redis_mock.delete = AsyncMock(return_value=1)
    redis_mock.setex = AsyncMock(return_value=True)

    return redis_mock


# =============================================================================
# MARKERS
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
