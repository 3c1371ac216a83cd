"""
Moto Catalog - Shared module.

This module contains shared utilities, configuration, and clients
used across the application.
"""

from shared.config import Settings, get_settings
from shared.logging_config import configure_logging
from shared.redis_client import get_redis_client
from shared.redis_keys import RedisKeys
from shared.errors import (
    ErrorCategory,
    APIErrorResponse,
    CatalogUnavailableError,
    ComponentInUseError,
    RecordNotFoundError,
    ErrorLogger,
    get_error_logger,
    map_status_to_category,
)
from shared.fastapi_errors import register_error_handlers

__all__ = [
    # Core utilities
    "Settings",
    "get_settings",
    "configure_logging",
    # Redis
    "get_redis_client",
    "RedisKeys",
    # Error handling
    "ErrorCategory",
    "APIErrorResponse",
    "CatalogUnavailableError",
    "ComponentInUseError",
    "RecordNotFoundError",
    "ErrorLogger",
    "get_error_logger",
    "map_status_to_category",
    "register_error_handlers",
]
