from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from polly.core.constants import AuthConfig, BusinessLimits


# Define a schema for signing up
class UserCreate(BaseModel):
    name: str = Field(..., description=f"Display name (1-{BusinessLimits.MAX_NAME_LENGTH} characters)")
    email: EmailStr
    password: str = Field(..., max_length=AuthConfig.MAX_PASSWORD_LENGTH)


class LoginRequest(BaseModel):
    email: str
    password: str


# Define a schema for reading user data
class UserRead(BaseModel):
    id: int
    name: str
    email: str
    role: str
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CurrentUser(BaseModel):
    """What the identity adapter exposes about the signed-in user"""
    id: int
    email: str
    name: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class RoleUpdate(BaseModel):
    role: Literal["user", "admin"]


class AuthSession(BaseModel):
    """Credentials handed out by a successful sign-in"""
    access_token: str
    token_type: str = AuthConfig.TOKEN_TYPE
    expires_at: datetime
