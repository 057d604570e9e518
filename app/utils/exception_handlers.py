"""
Centralized exception handlers for the Budget API.

Every error body carries a top-level ``message`` so API clients can surface it
without knowing the error code layout.
"""
import logging
import traceback
from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from app.utils.exceptions import BudgetAppException

logger = logging.getLogger(__name__)


def create_error_response(
    error_code: str,
    message: str,
    details: Dict[str, Any] = None,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    request_id: str = None
) -> JSONResponse:
    """Create a standardized error response."""
    response_data = {
        "success": False,
        "message": message,
        "error": {
            "code": error_code,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    }

    if details:
        response_data["error"]["details"] = details

    if request_id:
        response_data["error"]["request_id"] = request_id

    return JSONResponse(
        status_code=status_code,
        content=response_data
    )


async def budget_app_exception_handler(request: Request, exc: BudgetAppException) -> JSONResponse:
    """Handle custom application exceptions."""
    request_id = getattr(request.state, 'request_id', None)

    logger.error(
        f"Application Exception: {exc.error_code} - {exc.message}",
        extra={
            "error_code": exc.error_code,
            "details": exc.details,
            "request_id": request_id,
            "path": str(request.url),
            "method": request.method
        }
    )

    return create_error_response(
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
        status_code=exc.status_code,
        request_id=request_id
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions raised by routes and by routing itself (404, 405)."""
    request_id = getattr(request.state, 'request_id', None)

    error_code = "HTTP_ERROR"
    if exc.status_code == 401:
        error_code = "AUTHENTICATION_ERROR"
    elif exc.status_code == 403:
        error_code = "AUTHORIZATION_ERROR"
    elif exc.status_code == 404:
        error_code = "NOT_FOUND"
    elif exc.status_code == 422:
        error_code = "VALIDATION_ERROR"

    logger.warning(
        f"HTTP Exception: {exc.status_code} - {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "request_id": request_id,
            "path": str(request.url),
            "method": request.method
        }
    )

    return create_error_response(
        error_code=error_code,
        message=str(exc.detail),
        status_code=exc.status_code,
        request_id=request_id
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle FastAPI request validation errors."""
    request_id = getattr(request.state, 'request_id', None)

    validation_errors = []
    for error in exc.errors():
        validation_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(
        f"Validation Error: {len(validation_errors)} validation errors",
        extra={
            "validation_errors": validation_errors,
            "request_id": request_id,
            "path": str(request.url),
            "method": request.method
        }
    )

    return create_error_response(
        error_code="VALIDATION_ERROR",
        message="Input validation failed",
        details={"validation_errors": validation_errors},
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        request_id=request_id
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle SQLAlchemy database errors."""
    request_id = getattr(request.state, 'request_id', None)

    error_code = "DATABASE_ERROR"
    message = "Database operation failed"

    if isinstance(exc, IntegrityError):
        error_code = "CONFLICT_ERROR"
        message = "Data integrity constraint violation"

        if hasattr(exc, 'orig') and exc.orig:
            orig_error = str(exc.orig).lower()
            if "duplicate key" in orig_error or "unique constraint" in orig_error:
                message = "Duplicate entry found"
            elif "foreign key" in orig_error:
                message = "Referenced record not found"

    logger.error(
        f"Database Error: {type(exc).__name__} - {str(exc)}",
        extra={
            "error_type": type(exc).__name__,
            "request_id": request_id,
            "path": str(request.url),
            "method": request.method,
            "traceback": traceback.format_exc()
        }
    )

    return create_error_response(
        error_code=error_code,
        message=message,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        request_id=request_id
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    request_id = getattr(request.state, 'request_id', None)

    logger.error(
        f"Unhandled Exception: {type(exc).__name__} - {str(exc)}",
        extra={
            "error_type": type(exc).__name__,
            "request_id": request_id,
            "path": str(request.url),
            "method": request.method,
            "traceback": traceback.format_exc()
        }
    )

    # Don't expose internal error details
    return create_error_response(
        error_code="INTERNAL_ERROR",
        message="An unexpected error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        request_id=request_id
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(BudgetAppException, budget_app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
