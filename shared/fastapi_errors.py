"""
FastAPI Error Handlers for Unified Error Handling System.

This module provides exception handlers for FastAPI applications to convert
exceptions into standardized APIErrorResponse format with proper HTTP status
codes and admin-facing messages.

Usage:
    from fastapi import FastAPI
    from shared.fastapi_errors import register_error_handlers

    app = FastAPI()
    register_error_handlers(app)
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from shared.errors import (
    APIErrorResponse,
    CatalogUnavailableError,
    ComponentInUseError,
    ErrorCategory,
    RecordNotFoundError,
    get_error_logger,
    map_status_to_category,
)


logger = logging.getLogger(__name__)


def _request_context(request: Request, **extra: Any) -> dict[str, Any]:
    context: dict[str, Any] = {
        "path": str(request.url.path),
        "method": request.method,
    }
    context.update(extra)
    return context


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Convert HTTPException to standardized APIErrorResponse.

    Args:
        request: FastAPI request object
        exc: HTTPException that was raised

    Returns:
        JSONResponse with APIErrorResponse body
    """
    error_logger = get_error_logger()
    category = map_status_to_category(exc.status_code)

    context = _request_context(request, status_code=exc.status_code)
    if request.url.query:
        context["query_params"] = str(request.url.query)

    log_ref = error_logger.log_error(
        error=exc,
        category=category,
        endpoint=str(request.url.path),
        method=request.method,
        context=context,
        exc_info=False,  # HTTPException is expected, no stack trace needed
    )

    response = APIErrorResponse(
        success=False,
        error_category=category,
        error_code=f"HTTP_{exc.status_code}",
        message=str(exc.detail),
        guidance=error_logger._build_guidance(category),
        log_ref=log_ref,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(mode="json")
    )


async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Convert Pydantic ValidationError to standardized APIErrorResponse (400)."""
    error_logger = get_error_logger()

    errors = jsonable_encoder(exc.errors(), custom_encoder={Exception: str})

    log_ref = error_logger.log_error(
        error=exc,
        category=ErrorCategory.VALIDATION_ERROR,
        endpoint=str(request.url.path),
        method=request.method,
        context=_request_context(request, validation_errors=errors),
        exc_info=False,  # Validation errors are expected
    )

    if len(errors) == 1:
        error_detail = errors[0]
        field = ".".join(str(loc) for loc in error_detail["loc"])
        message = f"Validation error in '{field}': {error_detail['msg']}"
    else:
        message = f"Validation errors in {len(errors)} fields. Check the submitted data."

    response = APIErrorResponse(
        success=False,
        error_category=ErrorCategory.VALIDATION_ERROR,
        error_code="VALIDATION_ERROR",
        message=message,
        guidance="Check the submitted data and correct the validation errors.",
        log_ref=log_ref,
        context={"validation_errors": errors},
    )

    return JSONResponse(
        status_code=400,
        content=response.model_dump(mode="json")
    )


async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailableError) -> JSONResponse:
    """Convert store outages to a retryable 503.

    A usage lookup that fails this way must reach the admin as an error,
    never as an empty usage list.
    """
    error_logger = get_error_logger()

    log_ref = error_logger.log_error(
        error=exc,
        category=ErrorCategory.DATABASE_ERROR,
        endpoint=str(request.url.path),
        method=request.method,
        context=_request_context(request),
        exc_info=True,
    )

    response = APIErrorResponse(
        success=False,
        error_category=ErrorCategory.DATABASE_ERROR,
        error_code="CATALOG_UNAVAILABLE",
        message=exc.message,
        guidance=error_logger._build_guidance(ErrorCategory.DATABASE_ERROR),
        retryable=exc.retryable,
        log_ref=log_ref,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(mode="json"),
        headers={"Retry-After": "5"},
    )


async def component_in_use_handler(request: Request, exc: ComponentInUseError) -> JSONResponse:
    """Convert a refused deletion to a 409 carrying the blocking references."""
    error_logger = get_error_logger()

    usage = exc.usage.model_dump(mode="json", by_alias=True) if hasattr(exc.usage, "model_dump") else exc.usage

    log_ref = error_logger.log_error(
        error=exc,
        category=ErrorCategory.CONFLICT_ERROR,
        endpoint=str(request.url.path),
        method=request.method,
        context=_request_context(request, component_id=exc.component_id),
        exc_info=False,
    )

    response = APIErrorResponse(
        success=False,
        error_category=ErrorCategory.CONFLICT_ERROR,
        error_code="COMPONENT_IN_USE",
        message=str(exc),
        guidance=error_logger._build_guidance(ErrorCategory.CONFLICT_ERROR),
        log_ref=log_ref,
        context={
            "component_id": exc.component_id,
            "component_type": exc.component_type,
            "usage": usage,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(mode="json"),
    )


async def record_not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    """Convert a write against a missing record to a 404."""
    error_logger = get_error_logger()

    log_ref = error_logger.log_error(
        error=exc,
        category=ErrorCategory.NOT_FOUND_ERROR,
        endpoint=str(request.url.path),
        method=request.method,
        context=_request_context(request, entity=exc.entity, record_id=exc.record_id),
        exc_info=False,
    )

    response = APIErrorResponse(
        success=False,
        error_category=ErrorCategory.NOT_FOUND_ERROR,
        error_code="NOT_FOUND",
        message=str(exc),
        guidance=error_logger._build_guidance(ErrorCategory.NOT_FOUND_ERROR),
        log_ref=log_ref,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(mode="json"),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert unhandled exceptions to a generic 500 with full stack trace logging."""
    error_logger = get_error_logger()

    log_ref = error_logger.log_error(
        error=exc,
        category=ErrorCategory.UNEXPECTED_ERROR,
        endpoint=str(request.url.path),
        method=request.method,
        context=_request_context(request, exception_type=type(exc).__name__),
        exc_info=True,
    )

    response = APIErrorResponse(
        success=False,
        error_category=ErrorCategory.UNEXPECTED_ERROR,
        error_code="INTERNAL_SERVER_ERROR",
        message="Internal server error. Please retry.",
        guidance="If the problem persists, contact support.",
        log_ref=log_ref,
    )

    return JSONResponse(
        status_code=500,
        content=response.model_dump(mode="json")
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register custom error handlers with FastAPI app.

    Registers handlers for:
    - HTTPException (400, 404, etc.)
    - ValidationError (Pydantic validation)
    - CatalogUnavailableError (503, retryable)
    - ComponentInUseError (409)
    - RecordNotFoundError (404)
    - Exception (all unhandled exceptions)

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(CatalogUnavailableError, catalog_unavailable_handler)
    app.add_exception_handler(ComponentInUseError, component_in_use_handler)
    app.add_exception_handler(RecordNotFoundError, record_not_found_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Registered unified error handlers for FastAPI")
