"""Authentication request/response schemas"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from storefront.models.enums import Role
from storefront.schemas.common import CamelModel


class SignupRequest(BaseModel):
    """Body of POST /api/auth/signup. Unknown keys are rejected."""

    email: str
    username: str
    password: str
    role: Optional[Role] = None

    class Config:
        extra = "forbid"


class LoginRequest(BaseModel):
    email: str
    password: str

    class Config:
        extra = "forbid"


class UserResponse(CamelModel):
    """User as returned to clients (never includes the password hash)"""

    id: str
    email: str
    username: str
    role: str
    created_at: datetime
    updated_at: datetime


class AuthData(BaseModel):
    user: UserResponse
    token: str


class ProfileData(BaseModel):
    user: UserResponse
