"""Pydantic schemas for user endpoints."""

from datetime import datetime

from pydantic import BaseModel

from app.models.user import Role


class UserResponse(BaseModel):
    """Public view of a user. Never carries the password hash or refresh token."""

    id: int
    email: str
    full_name: str
    role: Role
    avatar_url: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class RegisterRequest(BaseModel):
    email: str | None = None
    full_name: str | None = None
    password: str | None = None


class AddUserRequest(RegisterRequest):
    role: Role = Role.USER


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class RefreshRequest(BaseModel):
    refresh_token: str | None = None


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str


class UpdateUserRequest(BaseModel):
    full_name: str | None = None
    email: str | None = None


class TokenPairResponse(BaseModel):
    access_token: str
    refresh_token: str


class LoginResponse(TokenPairResponse):
    user: UserResponse
