"""
Moto Catalog - Database module.

This module contains SQLAlchemy models and database connection utilities.
"""

from database.connection import (
    AsyncSessionLocal,
    SessionFactory,
    build_session_scope,
    close_db,
    engine,
    get_async_session,
    init_db,
)

__all__ = [
    "engine",
    "AsyncSessionLocal",
    "SessionFactory",
    "build_session_scope",
    "get_async_session",
    "init_db",
    "close_db",
]
