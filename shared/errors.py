"""
Unified Error Handling System for API and Catalog Services.

This module provides standardized error handling infrastructure for FastAPI
including error categories, Pydantic response models, HTTP status code mapping,
centralized error logging with structured context, and the domain exceptions
raised by the catalog services.

Usage:
    from shared.errors import ErrorCategory, APIErrorResponse, ErrorLogger

    logger = ErrorLogger()
    log_ref = logger.log_error(
        error=exc,
        category=ErrorCategory.DATABASE_ERROR,
        context={"component_id": component_id}
    )
"""

import logging
import uuid
from datetime import datetime, UTC
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Categories of errors for proper handling and logging.

    USER-FACING ERRORS (explained to the admin):
    - VALIDATION_ERROR: Invalid input
    - NOT_FOUND_ERROR: Requested resource not found
    - CONFLICT_ERROR: Business rule prevents the operation (component in use)

    SYSTEM ERRORS (logged internally, generic message to the admin):
    - DATABASE_ERROR: PostgreSQL/SQLAlchemy errors
    - CACHE_ERROR: Redis failures (logged as warnings; resolution falls back to the stores)
    - UNEXPECTED_ERROR: Unknown/unhandled exceptions
    """
    # User-facing errors
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND_ERROR = "not_found_error"
    CONFLICT_ERROR = "conflict_error"

    # System errors
    DATABASE_ERROR = "database_error"
    CACHE_ERROR = "cache_error"
    UNEXPECTED_ERROR = "unexpected_error"


class CatalogUnavailableError(Exception):
    """
    The catalog or assignment store could not be reached.

    Always retryable. Callers must never read this as "nothing found":
    a usage check that fails this way must not permit a deletion.
    """

    def __init__(self, message: str, status_code: int = 503, retryable: bool = True):
        self.message = message
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(self.message)


class RecordNotFoundError(LookupError):
    """A write targeted a model, configuration or component that does not exist."""

    def __init__(self, entity: str, record_id: str):
        self.entity = entity
        self.record_id = record_id
        self.status_code = 404
        super().__init__(f"{entity} {record_id} not found")


class ComponentInUseError(Exception):
    """A guarded deletion was refused because the component is still referenced."""

    def __init__(self, component_id: str, component_type: str, usage: Any):
        self.component_id = component_id
        self.component_type = component_type
        self.usage = usage
        self.status_code = 409
        super().__init__(
            f"{component_type} {component_id} is still used by "
            f"{getattr(usage, 'count', '?')} record(s)"
        )


class APIErrorResponse(BaseModel):
    """Standardized error response format for API endpoints.

    This format ensures consistency across all API endpoints and provides
    both admin-facing messages and optional context for debugging.
    """
    success: bool = Field(default=False, description="Always False for errors")
    error_category: ErrorCategory = Field(description="Error category for classification")
    error_code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Admin-facing message")
    guidance: str | None = Field(default=None, description="Optional guidance for resolution")
    retryable: bool = Field(default=False, description="Whether repeating the request may succeed")
    log_ref: str | None = Field(default=None, description="Reference ID for log correlation")
    context: dict[str, Any] | None = Field(default=None, description="Additional context for debugging")


class ErrorLogger:
    """Centralized error logging with structured context.

    Provides consistent error logging with full context including
    endpoint path, request method, stack traces, and more.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.ErrorLogger")

    def _generate_log_ref(self) -> str:
        """Generate unique reference ID for error correlation."""
        return f"err_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}"

    def log_error(
        self,
        error: Exception,
        category: ErrorCategory,
        *,
        endpoint: str | None = None,
        method: str | None = None,
        context: dict[str, Any] | None = None,
        exc_info: bool = True,
    ) -> str:
        """Log error with full structured context.

        Args:
            error: The exception that occurred
            category: Error category for classification
            endpoint: Optional endpoint path where error occurred
            method: Optional HTTP method (GET, POST, etc.)
            context: Additional context data
            exc_info: Whether to include stack trace

        Returns:
            log_ref: Unique reference ID for this error instance
        """
        log_ref = self._generate_log_ref()

        log_data = {
            "log_ref": log_ref,
            "error_category": category.value,
            "error_type": type(error).__name__,
            "error_message": str(error),
            "endpoint": endpoint,
            "method": method,
            "context": context or {},
            "timestamp": datetime.now(UTC).isoformat(),
        }

        # Log with appropriate level based on category
        if category in [
            ErrorCategory.DATABASE_ERROR,
            ErrorCategory.UNEXPECTED_ERROR,
        ]:
            self.logger.error(
                f"[{log_ref}] {category.value}: {error}",
                extra=log_data,
                exc_info=exc_info,
            )
        else:
            self.logger.warning(
                f"[{log_ref}] {category.value}: {error}",
                extra=log_data,
                exc_info=exc_info,
            )

        return log_ref

    def _build_guidance(self, category: ErrorCategory) -> str | None:
        """Build admin guidance based on error category."""
        guidance_map = {
            ErrorCategory.VALIDATION_ERROR: "Check the submitted data and correct the errors.",
            ErrorCategory.NOT_FOUND_ERROR: "Check that the requested record exists.",
            ErrorCategory.CONFLICT_ERROR: "Remove the listed model defaults and trim overrides first, then retry.",
            ErrorCategory.DATABASE_ERROR: "The catalog store is unavailable. Please retry in a few moments.",
            ErrorCategory.UNEXPECTED_ERROR: "An unexpected error occurred. Please retry or contact support.",
        }
        return guidance_map.get(category)


# Global error logger instance
_error_logger = ErrorLogger()


def get_error_logger() -> ErrorLogger:
    """Get the global error logger instance."""
    return _error_logger


# HTTP status code to ErrorCategory mapping
STATUS_TO_CATEGORY: dict[int, ErrorCategory] = {
    400: ErrorCategory.VALIDATION_ERROR,
    404: ErrorCategory.NOT_FOUND_ERROR,
    409: ErrorCategory.CONFLICT_ERROR,
    422: ErrorCategory.VALIDATION_ERROR,
    500: ErrorCategory.UNEXPECTED_ERROR,
    503: ErrorCategory.DATABASE_ERROR,
}


def map_status_to_category(status_code: int) -> ErrorCategory:
    """Map HTTP status code to ErrorCategory.

    Args:
        status_code: HTTP status code

    Returns:
        Corresponding ErrorCategory
    """
    return STATUS_TO_CATEGORY.get(status_code, ErrorCategory.UNEXPECTED_ERROR)
