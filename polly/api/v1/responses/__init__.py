"""
Response definitions for FastAPI endpoints.

This module provides centralized response configurations for OpenAPI documentation,
promoting reusability and maintainability across all API endpoints.
"""

from .common_responses import (
    get_auth_error_response,
    get_validation_error_response,
    get_server_error_response,
    get_not_found_response,
    get_forbidden_response,
)

from .poll_responses import (
    get_poll_list_responses,
    get_poll_create_responses,
    get_single_poll_responses,
    get_poll_update_responses,
    get_poll_delete_responses,
    get_poll_vote_responses,
    get_comment_responses,
)

from .auth_responses import (
    get_registration_responses,
    get_login_responses,
    get_token_responses,
    get_authenticated_responses,
    get_admin_responses,
)

__all__ = [
    # Common responses
    "get_auth_error_response",
    "get_validation_error_response",
    "get_server_error_response",
    "get_not_found_response",
    "get_forbidden_response",

    # Poll, vote and comment responses
    "get_poll_list_responses",
    "get_poll_create_responses",
    "get_single_poll_responses",
    "get_poll_update_responses",
    "get_poll_delete_responses",
    "get_poll_vote_responses",
    "get_comment_responses",

    # Auth and user administration responses
    "get_registration_responses",
    "get_login_responses",
    "get_token_responses",
    "get_authenticated_responses",
    "get_admin_responses",
]
