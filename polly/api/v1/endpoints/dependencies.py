from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Optional
import logging

from polly.core.constants import AuthConfig, ErrorMessages
from polly.core.errors import AuthenticationError, AuthorizationError
from polly.db.database import get_db
from polly.models.user import User
from polly.services.identity import resolve_user

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=AuthConfig.TOKEN_URL, auto_error=False)


def get_token(token: Optional[str] = Depends(oauth2_scheme)) -> str:
    """The bearer token of the request; missing tokens are rejected with our own error envelope."""
    if not token:
        raise AuthenticationError()
    return token


def get_current_user(db: Session = Depends(get_db), token: str = Depends(get_token)) -> User:
    """Get the current user from the database.
    Any endpoint that requires authentication can use this dependency.
    """
    user = resolve_user(db, token)
    if user is None:
        raise AuthenticationError(ErrorMessages.INVALID_TOKEN)
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        logger.warning(f"User {current_user.id} attempted an administrator action")
        raise AuthorizationError(ErrorMessages.ADMIN_REQUIRED)
    return current_user
