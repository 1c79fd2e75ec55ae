from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from datetime import datetime, timezone
from typing import Any, Dict
import logging
import uuid

from polly.core.constants import ErrorCodes, ErrorMessages
from polly.core.errors import ServiceError

logger = logging.getLogger(__name__)


def _request_id() -> str:
    return str(uuid.uuid4())[:8]


def _envelope(request: Request, request_id: str, content: Dict[str, Any]) -> Dict[str, Any]:
    """Add the fields every error response carries."""
    return {
        "success": False,
        **content,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": str(request.url.path),
        "request_id": request_id,
    }


async def service_exception_handler(request: Request, exc: ServiceError):
    """
    Handler for errors raised by the service layer.

    The error already knows its status and code; server-side failures are
    logged as errors, rule violations as warnings.
    """
    request_id = _request_id()
    client_ip = request.client.host if request.client else "unknown"

    if exc.status_code >= 500:
        logger.error(
            f"Service failure [ID: {request_id}] - "
            f"Path: {request.url.path} - "
            f"Error: {type(exc).__name__}: {exc.message}"
        )
    else:
        logger.warning(
            f"Request rejected [ID: {request_id}] - "
            f"Status: {exc.status_code} - "
            f"Path: {request.url.path} - "
            f"IP: {client_ip} - "
            f"Reason: {exc.message}"
        )

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(request, request_id, jsonable_encoder(exc.to_dict())),
        headers=headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError | ValidationError):
    """Custom handler for request and Pydantic validation errors"""
    # Generate unique request ID for tracing
    request_id = _request_id()
    client_ip = request.client.host if request.client else "unknown"
    errors = jsonable_encoder(exc.errors())

    logger.warning(
        f"Validation error [ID: {request_id}] - "
        f"Path: {request.url.path} - "
        f"IP: {client_ip} - "
        f"Errors: {len(errors)} - "
        f"Details: {errors}"
    )

    return JSONResponse(
        status_code=422,
        content=_envelope(request, request_id, {
            "message": ErrorMessages.VALIDATION_ERROR,
            "error_code": ErrorCodes.VALIDATION_ERROR,
            "errors": errors,
        })
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Enhanced HTTP exception handler"""
    request_id = _request_id()
    client_ip = request.client.host if request.client else "unknown"

    # Enhanced logging based on error severity
    if exc.status_code >= 500:
        logger.error(
            f"Server error [ID: {request_id}] - "
            f"Status: {exc.status_code} - "
            f"Path: {request.url.path} - "
            f"IP: {client_ip} - "
            f"Detail: {exc.detail}"
        )
    elif exc.status_code >= 400:
        logger.warning(
            f"Client error [ID: {request_id}] - "
            f"Status: {exc.status_code} - "
            f"Path: {request.url.path} - "
            f"IP: {client_ip}"
        )

    # Format response based on detail type
    if isinstance(exc.detail, dict):
        content = {"error_code": ErrorCodes.HTTP_ERROR, **exc.detail}
    else:
        content = {"message": str(exc.detail), "error_code": ErrorCodes.HTTP_ERROR}

    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(request, request_id, content),
        headers=getattr(exc, "headers", None),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handler for database errors that escaped the service layer"""
    request_id = _request_id()

    logger.error(
        f"Database error [ID: {request_id}] - "
        f"Path: {request.url.path} - "
        f"Error: {str(exc)} - "
        f"Type: {type(exc).__name__}"
    )

    return JSONResponse(
        status_code=500,
        content=_envelope(request, request_id, {
            "message": ErrorMessages.DATABASE_ERROR,
            "error_code": ErrorCodes.DATABASE_ERROR,
            "details": {"hint": "Please try again later or contact support"},
        })
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler for unexpected errors"""
    request_id = _request_id()

    logger.critical(
        f"Unexpected error [ID: {request_id}] - "
        f"Path: {request.url.path} - "
        f"Error: {str(exc)} - "
        f"Type: {type(exc).__name__}",
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content=_envelope(request, request_id, {
            "message": ErrorMessages.INTERNAL_ERROR,
            "error_code": ErrorCodes.INTERNAL_ERROR,
        })
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    # also catches routing errors (404/405) raised by Starlette itself
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
