"""
Poll, vote and comment response definitions for OpenAPI documentation.
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

# Constants for poll paths
POLLS_BASE_PATH = "/api/v1/polls"
POLL_PATH = f"{POLLS_BASE_PATH}/1"
VOTES_PATH = f"{POLL_PATH}/votes"
COMMENTS_PATH = f"{POLL_PATH}/comments"


def get_poll_list_responses():
    return {
        422: get_validation_error_response(POLLS_BASE_PATH, "size", "Input should be less than or equal to 100"),
        500: get_server_error_response(POLLS_BASE_PATH),
    }


def get_poll_create_responses():
    """Generate complete response set for poll creation endpoint."""
    return {
        401: get_auth_error_response(POLLS_BASE_PATH),
        422: get_validation_error_response(POLLS_BASE_PATH, "options", ErrorMessages.DUPLICATE_OPTION),
        500: get_server_error_response(POLLS_BASE_PATH),
    }


def get_single_poll_responses():
    return {
        404: get_not_found_response(ErrorMessages.POLL_NOT_FOUND, POLL_PATH),
        500: get_server_error_response(POLL_PATH),
    }


def get_poll_update_responses():
    return {
        401: get_auth_error_response(POLL_PATH),
        403: get_forbidden_response(ErrorMessages.NOT_AUTHORIZED_UPDATE, POLL_PATH),
        404: get_not_found_response(ErrorMessages.POLL_NOT_FOUND, POLL_PATH),
        422: get_validation_error_response(POLL_PATH, "options", "At least 2 options are required"),
        500: get_server_error_response(POLL_PATH),
    }


def get_poll_delete_responses():
    return {
        401: get_auth_error_response(POLL_PATH),
        403: get_forbidden_response(ErrorMessages.NOT_AUTHORIZED_DELETE, POLL_PATH),
        404: get_not_found_response(ErrorMessages.POLL_NOT_FOUND, POLL_PATH),
        500: get_server_error_response(POLL_PATH),
    }


def get_poll_vote_responses():
    return {
        401: get_auth_error_response(VOTES_PATH),
        404: get_not_found_response(ErrorMessages.POLL_NOT_FOUND, VOTES_PATH),
        409: error_response("Already voted", ErrorMessages.ALREADY_VOTED, ErrorCodes.DUPLICATE_VOTE, VOTES_PATH),
        422: get_validation_error_response(VOTES_PATH, "option_id", ErrorMessages.OPTION_NOT_IN_POLL),
        500: get_server_error_response(VOTES_PATH),
    }


def get_comment_responses():
    return {
        401: get_auth_error_response(COMMENTS_PATH),
        403: get_forbidden_response(ErrorMessages.NOT_AUTHORIZED_COMMENT, COMMENTS_PATH),
        404: get_not_found_response(ErrorMessages.COMMENT_NOT_FOUND, COMMENTS_PATH),
        422: get_validation_error_response(COMMENTS_PATH, "content", "Comment cannot be empty"),
        500: get_server_error_response(COMMENTS_PATH),
    }
