"""
Authentication and user administration response definitions.
"""

from polly.core.constants import ErrorCodes, ErrorMessages

from .common_responses import (
    error_response,
    get_auth_error_response,
    get_forbidden_response,
    get_not_found_response,
    get_server_error_response,
    get_validation_error_response,
)

# Constants for auth paths
AUTH_BASE_PATH = "/api/v1/auth"
REGISTER_PATH = f"{AUTH_BASE_PATH}/register"
LOGIN_PATH = f"{AUTH_BASE_PATH}/login"
TOKEN_PATH = f"{AUTH_BASE_PATH}/token"
USERS_PATH = "/api/v1/users"


def get_registration_responses():
    return {
        422: get_validation_error_response(REGISTER_PATH, "email", ErrorMessages.DUPLICATE_EMAIL),
        500: get_server_error_response(REGISTER_PATH),
    }


def get_login_responses(path: str = LOGIN_PATH):
    return {
        401: error_response("Invalid credentials", ErrorMessages.INVALID_CREDENTIALS,
                            ErrorCodes.INVALID_CREDENTIALS, path),
        422: get_validation_error_response(path, "password", "Field required"),
        500: get_server_error_response(path),
    }


def get_token_responses():
    return get_login_responses(TOKEN_PATH)


def get_authenticated_responses(path: str = AUTH_BASE_PATH):
    return {401: get_auth_error_response(path)}


def get_admin_responses(path: str = USERS_PATH):
    return {
        401: get_auth_error_response(path),
        403: get_forbidden_response(ErrorMessages.ADMIN_REQUIRED, path),
        404: get_not_found_response(ErrorMessages.USER_NOT_FOUND, path),
        500: get_server_error_response(path),
    }
