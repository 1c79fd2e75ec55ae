from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import Optional
import logging

from polly.db.database import get_db
from polly.models.user import User
from polly.schemas.common import PaginatedResponse
from polly.schemas.poll import (
    PollCreate,
    PollDeleteResponse,
    PollDetail,
    PollMutationResponse,
    PollSummary,
    PollUpdate,
)
from polly.services import polls as poll_service
from polly.api.v1.endpoints.dependencies import get_current_user
from polly.api.v1.utils.pagination import PaginationParams, get_pagination_params, create_paginated_response
from polly.api.v1.responses import (
    get_poll_list_responses,
    get_poll_create_responses,
    get_single_poll_responses,
    get_poll_update_responses,
    get_poll_delete_responses,
)

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/polls", tags=["polls"])


@router.get(
    "",
    response_model=PaginatedResponse[PollSummary],
    summary="Get paginated list of polls",
    description="Newest polls first, each with its number of options and votes.",
    responses=get_poll_list_responses()
)
def get_polls(
    db: Session = Depends(get_db),
    pagination: PaginationParams = Depends(get_pagination_params),
    search: Optional[str] = Query(None, description="Search in poll titles"),
    owner_id: Optional[int] = Query(None, description="Filter by owner ID")
):
    """
    Get paginated list of polls.

    - **page**: Page number (starts from 1)
    - **size**: Number of polls per page (1-100)
    - **search**: Search text in poll titles (case-insensitive)
    - **owner_id**: Filter polls by specific owner
    """
    summaries, total = poll_service.list_polls(db, pagination, search=search, owner_id=owner_id)
    return create_paginated_response(summaries, total, pagination)


@router.get(
    "/my-polls",
    response_model=PaginatedResponse[PollSummary],
    summary="Get polls of the current user",
    responses=get_poll_list_responses()
)
def get_my_polls(
    db: Session = Depends(get_db),
    pagination: PaginationParams = Depends(get_pagination_params),
    search: Optional[str] = Query(None, description="Search in poll titles"),
    current_user: User = Depends(get_current_user)
):
    summaries, total = poll_service.list_polls(db, pagination, search=search, owner_id=current_user.id)
    return create_paginated_response(summaries, total, pagination)


@router.post(
    "",
    response_model=PollMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new poll",
    description="Create a poll with 2-10 distinct options. The authenticated user becomes the owner.",
    responses=get_poll_create_responses()
)
def create_poll(
    poll: PollCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    created = poll_service.create_poll(db, current_user.id, poll.title, poll.description, poll.options)
    return PollMutationResponse(
        message="Poll created successfully",
        poll=poll_service.get_poll_detail(db, created.id),
    )


@router.get(
    "/{poll_id}",
    response_model=PollDetail,
    summary="Get a poll with its results",
    responses=get_single_poll_responses()
)
def get_poll(poll_id: int, db: Session = Depends(get_db)):
    return poll_service.get_poll_detail(db, poll_id)


@router.put(
    "/{poll_id}",
    response_model=PollMutationResponse,
    summary="Edit a poll",
    description="Replace title, description and the complete option set. All existing votes are removed.",
    responses=get_poll_update_responses()
)
def update_poll(
    poll_id: int,
    poll: PollUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    poll_service.update_poll(db, poll_id, current_user.id, poll.title, poll.description, poll.options)
    return PollMutationResponse(
        message="Poll updated successfully",
        poll=poll_service.get_poll_detail(db, poll_id),
    )


@router.delete(
    "/{poll_id}",
    response_model=PollDeleteResponse,
    summary="Delete a poll",
    description="Delete a poll together with its options, votes and comments. Only the owner can delete.",
    responses=get_poll_delete_responses()
)
def delete_poll(
    poll_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    poll_service.delete_poll(db, poll_id, current_user.id)
    return PollDeleteResponse(
        message="Poll deleted successfully",
        poll_id=poll_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
