"""
Common reusable response definitions for FastAPI endpoints.

Every error response shares the envelope produced by polly.core.exception;
these helpers document it once per status code.
"""

from typing import Any, Dict, Optional

from polly.core.constants import ErrorCodes, ErrorMessages
from polly.schemas.error import ErrorResponse, ValidationErrorResponse

# Constants for common values
CONTENT_TYPE_JSON = "application/json"
EXAMPLE_TIMESTAMP = "2024-01-01T12:00:00+00:00"
EXAMPLE_API_PATH = "/api/v1/endpoint"
EXAMPLE_REQUEST_ID = "3f9c2a1b"


def error_example(message: str, error_code: str, path: str = EXAMPLE_API_PATH,
                  **extra: Any) -> Dict[str, Any]:
    """Example body of an error response."""
    return {
        "success": False,
        "message": message,
        "error_code": error_code,
        **extra,
        "timestamp": EXAMPLE_TIMESTAMP,
        "path": path,
        "request_id": EXAMPLE_REQUEST_ID,
    }


def error_response(description: str, message: str, error_code: str, path: str = EXAMPLE_API_PATH,
                   model: Optional[type] = None) -> Dict[str, Any]:
    return {
        "description": description,
        "model": model or ErrorResponse,
        "content": {CONTENT_TYPE_JSON: {"example": error_example(message, error_code, path)}},
    }


def get_validation_error_response(path: str = EXAMPLE_API_PATH, field: str = "title",
                                  msg: str = "Poll title is required") -> Dict[str, Any]:
    """Generate validation error response with context-specific path."""
    return {
        "description": "Validation error",
        "model": ValidationErrorResponse,
        "content": {
            CONTENT_TYPE_JSON: {
                "example": error_example(
                    ErrorMessages.VALIDATION_ERROR,
                    ErrorCodes.VALIDATION_ERROR,
                    path,
                    errors=[{"loc": [field], "msg": msg, "type": "value_error"}],
                )
            }
        },
    }


def get_auth_error_response(path: str = EXAMPLE_API_PATH) -> Dict[str, Any]:
    return error_response("Authentication required", ErrorMessages.AUTH_REQUIRED, ErrorCodes.AUTH_ERROR, path)


def get_server_error_response(path: str = EXAMPLE_API_PATH) -> Dict[str, Any]:
    return error_response("Database or server error", ErrorMessages.DATABASE_ERROR, ErrorCodes.DATABASE_ERROR, path)


def get_not_found_response(message: str, path: str = EXAMPLE_API_PATH) -> Dict[str, Any]:
    return error_response("Resource not found", message, ErrorCodes.RESOURCE_NOT_FOUND, path)


def get_forbidden_response(message: str, path: str = EXAMPLE_API_PATH) -> Dict[str, Any]:
    return error_response("Not allowed", message, ErrorCodes.INSUFFICIENT_PERMISSIONS, path)
