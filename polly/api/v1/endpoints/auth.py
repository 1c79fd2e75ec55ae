from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from polly.db.database import get_db
from polly.models.user import User
from polly.schemas.common import ActionResponse
from polly.schemas.user import AuthSession, CurrentUser, LoginRequest, UserCreate, UserRead
from polly.services import identity
from polly.api.v1.endpoints.dependencies import get_current_user, get_token
from polly.api.v1.responses import (
    get_registration_responses,
    get_login_responses,
    get_token_responses,
    get_authenticated_responses,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED,
             responses=get_registration_responses())
def register_user(user: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user account.

    The email must not be registered yet; the password is stored as a bcrypt hash.
    """
    return identity.sign_up(db, user.name, user.email, user.password)


@router.post("/token", response_model=AuthSession, responses=get_token_responses())
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return a JWT token. Uses OAuth2 compatible form data.

    IMPORTANT: enter the user's EMAIL ADDRESS in the 'username' field.
    """
    return identity.sign_in(db, form_data.username, form_data.password)


@router.post("/login", response_model=AuthSession, responses=get_login_responses())
def simple_login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """
    Simple login endpoint - easier to use than OAuth2 form.

    Just provide email and password in JSON format.
    """
    return identity.sign_in(db, login_data.email, login_data.password)


@router.post("/logout", response_model=ActionResponse, responses=get_authenticated_responses())
def logout(
    token: str = Depends(get_token),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Revoke the token used for this request."""
    identity.sign_out(db, token)
    return ActionResponse(message="Signed out successfully")


@router.get("/me", response_model=CurrentUser, responses=get_authenticated_responses())
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user
