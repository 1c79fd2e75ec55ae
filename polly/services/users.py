"""User administration: listing accounts and changing roles."""

from typing import List, Tuple
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from polly.api.v1.utils.pagination import PaginationParams, apply_pagination, apply_search
from polly.core.constants import AuthConfig, ErrorMessages
from polly.core.errors import NotFoundError, StorageError, ValidationError
from polly.models.user import User

logger = logging.getLogger(__name__)


def list_users(db: Session, pagination: PaginationParams, search: str = None) -> Tuple[List[User], int]:
    query = apply_search(db.query(User), search, [User.name, User.email])
    total = query.count()
    users = apply_pagination(query.order_by(User.id), pagination).all()
    return users, total


def set_user_role(db: Session, user_id: int, role: str) -> User:
    if role not in AuthConfig.ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(AuthConfig.ROLES)}")

    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(ErrorMessages.USER_NOT_FOUND)

    user.role = role
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error changing role of user {user_id}: {e}")
        raise StorageError() from e

    db.refresh(user)
    logger.info(f"User {user_id} now has role '{role}'")
    return user
