"""
Typed errors raised by the service layer.

Each error carries the HTTP status and error code the API boundary should
report, so callers never need to inspect messages to learn the error kind.
"""

from typing import Any, Dict, List, Optional

from polly.core.constants import ErrorCodes, ErrorMessages


class ServiceError(Exception):
    """Base class for every expected failure of a service operation."""

    status_code = 500
    error_code = ErrorCodes.INTERNAL_ERROR
    default_message = ErrorMessages.INTERNAL_ERROR

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "success": False,
            "message": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ServiceError):
    """Malformed or missing input. Never retried."""

    status_code = 422
    error_code = ErrorCodes.VALIDATION_ERROR
    default_message = ErrorMessages.VALIDATION_ERROR

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.errors = errors or []
        super().__init__(message, details)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class AuthenticationError(ServiceError):
    """No resolvable user identity."""

    status_code = 401
    error_code = ErrorCodes.AUTH_ERROR
    default_message = ErrorMessages.AUTH_REQUIRED


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password."""

    error_code = ErrorCodes.INVALID_CREDENTIALS
    default_message = ErrorMessages.INVALID_CREDENTIALS


class AuthorizationError(ServiceError):
    """Authenticated, but not permitted to act on the resource."""

    status_code = 403
    error_code = ErrorCodes.INSUFFICIENT_PERMISSIONS
    default_message = "Not authorized to perform this action"


class DuplicateVoteError(ServiceError):
    """The voter already has a vote on this poll."""

    status_code = 409
    error_code = ErrorCodes.DUPLICATE_VOTE
    default_message = ErrorMessages.ALREADY_VOTED


class NotFoundError(ServiceError):
    """A referenced poll, option, comment or user does not exist."""

    status_code = 404
    error_code = ErrorCodes.RESOURCE_NOT_FOUND
    default_message = "Resource not found"


class StorageError(ServiceError):
    """The store is unreachable or failed unexpectedly. Callers may retry."""

    status_code = 500
    error_code = ErrorCodes.DATABASE_ERROR
    default_message = ErrorMessages.DATABASE_ERROR
