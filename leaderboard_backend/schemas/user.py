"""
User and account schemas
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, field_validator
from pydantic_core import PydanticCustomError

from leaderboard_backend.models.user import UserRole
from leaderboard_backend.utils.validators import Password, Username


class RegisterRequest(BaseModel):
    """Account registration schema"""
    username: Username
    email: EmailStr
    password: Password


class LoginRequest(BaseModel):
    """User login schema"""
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Token response schema"""
    token: str


class RecoverAccountRequest(BaseModel):
    username: str
    email: EmailStr


class ChangePasswordRequest(BaseModel):
    password: Password


class UpdateUserRequest(BaseModel):
    """Administrative role change; only confirming or banning is allowed"""
    role: UserRole

    @field_validator("role")
    @classmethod
    def check_assignable(cls, v: UserRole) -> UserRole:
        if v not in (UserRole.CONFIRMED, UserRole.BANNED):
            raise PydanticCustomError("role_not_assignable", "Role must be confirmed or banned")
        return v


class UserView(BaseModel):
    """Public user schema"""
    id: uuid.UUID
    username: str
    role: UserRole
    created_at: datetime

    class Config:
        from_attributes = True
