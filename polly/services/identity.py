"""
Identity adapter: sign-up, sign-in, sign-out and resolving the current user.

Sessions are stateless JWTs. Each token carries a unique ``jti``; signing out
records it in the revoked_tokens table, after which the token no longer
resolves to a user.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from polly.core.config import settings
from polly.core.constants import AuthConfig, BusinessLimits, ErrorMessages
from polly.core.errors import AuthenticationError, InvalidCredentialsError, StorageError, ValidationError
from polly.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from polly.db.constraints import USER_EMAIL, is_unique_violation
from polly.models.user import RevokedToken, User
from polly.schemas.user import AuthSession

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    """The stored form of an address; raises EmailNotValidError for malformed input."""
    email = (email or "").strip().lower()
    return validate_email(email, check_deliverability=False).normalized


def sign_up(db: Session, name: str, email: str, password: str) -> User:
    """Register a new account.

    Raises ValidationError for a blank name, a malformed or taken email and
    passwords outside the allowed length.
    """
    name = (name or "").strip()
    errors = []
    if not name or len(name) > BusinessLimits.MAX_NAME_LENGTH:
        errors.append({"loc": ["name"], "msg": f"Name must be 1-{BusinessLimits.MAX_NAME_LENGTH} characters",
                       "type": "value_error"})
    try:
        email = _normalize_email(email)
    except EmailNotValidError as e:
        errors.append({"loc": ["email"], "msg": str(e), "type": "value_error"})
    if not AuthConfig.MIN_PASSWORD_LENGTH <= len(password or "") <= AuthConfig.MAX_PASSWORD_LENGTH:
        errors.append({
            "loc": ["password"],
            "msg": f"Password must be {AuthConfig.MIN_PASSWORD_LENGTH}-{AuthConfig.MAX_PASSWORD_LENGTH} characters",
            "type": "value_error",
        })
    if errors:
        raise ValidationError("Invalid registration data", errors=errors)

    logger.info(f"Registration attempt for email: {email}")
    user = User(name=name, email=email, hashed_password=get_password_hash(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e, USER_EMAIL):
            logger.warning(f"Registration failed: Email '{email}' already exists")
            raise ValidationError(
                ErrorMessages.DUPLICATE_EMAIL,
                errors=[{"loc": ["email"], "msg": ErrorMessages.DUPLICATE_EMAIL, "type": "value_error"}],
            ) from e
        logger.error(f"Database integrity error during registration: {e}")
        raise StorageError() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error during registration: {e}")
        raise StorageError() from e

    db.refresh(user)
    logger.info(f"User registered successfully: ID {user.id}, email: {user.email}")
    return user


def sign_in(db: Session, email: str, password: str) -> AuthSession:
    """Check credentials and issue an access token."""
    try:
        email = _normalize_email(email)
    except EmailNotValidError:
        logger.warning(f"Failed login attempt with malformed email: {email}")
        raise InvalidCredentialsError()
    user = db.query(User).filter(User.email == email).first()

    if user is None or not verify_password(password or "", user.hashed_password):
        logger.warning(f"Failed login attempt for email: {email}")
        raise InvalidCredentialsError()
    if not user.is_active:
        logger.warning(f"Login attempt for inactive account: {email}")
        raise AuthenticationError(ErrorMessages.ACCOUNT_INACTIVE)

    lifetime = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expires_at = datetime.now(timezone.utc) + lifetime
    token = create_access_token({"sub": str(user.id), "email": user.email}, expires_delta=lifetime)

    logger.info(f"Login successful for user: {user.email}")
    return AuthSession(access_token=token, expires_at=expires_at)


def sign_out(db: Session, token: str) -> None:
    """Revoke ``token``. Signing out twice with the same token is harmless."""
    claims = decode_access_token(token)
    if not claims or not claims.get("jti") or not claims.get("sub"):
        raise AuthenticationError(ErrorMessages.INVALID_TOKEN)

    jti = claims["jti"]
    if db.get(RevokedToken, jti) is not None:
        return

    db.add(RevokedToken(jti=jti, user_id=int(claims["sub"])))
    try:
        db.commit()
    except IntegrityError:
        # revoked concurrently by another request
        db.rollback()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error during sign-out: {e}")
        raise StorageError() from e

    logger.info(f"User {claims['sub']} signed out")


def resolve_user(db: Session, token: Optional[str]) -> Optional[User]:
    """The active user a token belongs to, or None for any token that does not authenticate."""
    if not token:
        return None

    claims = decode_access_token(token)
    if not claims:
        return None

    subject, jti = claims.get("sub"), claims.get("jti")
    if subject is None or jti is None:
        return None
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        return None

    if db.get(RevokedToken, jti) is not None:
        logger.debug(f"Rejected revoked token of user {user_id}")
        return None

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user
