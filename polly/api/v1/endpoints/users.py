from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
import logging

from polly.db.database import get_db
from polly.models.user import User
from polly.schemas.common import PaginatedResponse
from polly.schemas.user import RoleUpdate, UserRead
from polly.services import users as user_service
from polly.api.v1.endpoints.dependencies import require_admin
from polly.api.v1.utils.pagination import PaginationParams, get_pagination_params, create_paginated_response
from polly.api.v1.responses import get_admin_responses

# Setup logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=PaginatedResponse[UserRead], responses=get_admin_responses())
def list_users(
    pagination: PaginationParams = Depends(get_pagination_params),
    search: Optional[str] = Query(None, description="Search in names and emails"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List all accounts. Administrators only."""
    users, total = user_service.list_users(db, pagination, search)
    return create_paginated_response(
        [UserRead.model_validate(user) for user in users], total, pagination
    )


@router.put("/{user_id}/role", response_model=UserRead, responses=get_admin_responses())
def update_user_role(
    user_id: int,
    role_update: RoleUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Promote a user to administrator or demote them. Administrators only."""
    logger.info(f"Admin {admin.id} setting role of user {user_id} to '{role_update.role}'")
    return user_service.set_user_role(db, user_id, role_update.role)
