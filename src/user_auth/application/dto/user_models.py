"""Pydantic models for auth and user HTTP endpoints."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from user_auth.application.dto.public_user import PublicUserView
from user_auth.domain.auth.credentials import normalize_user_email, require_user_password
from user_auth.domain.auth.roles import Role


class StrictModel(BaseModel):
    """Base model with strict unknown-field rejection and camelCase wire names."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class LoginRequest(StrictModel):
    """Credentials submitted to the login endpoint."""

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserResponse(StrictModel):
    """Public user representation; carries no password field."""

    id: UUID
    email: str
    first_name: str
    last_name: str
    role: Role
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_view(cls, view: PublicUserView) -> UserResponse:
        return cls(
            id=view.user_id,
            email=view.email,
            first_name=view.first_name,
            last_name=view.last_name,
            role=view.role,
            is_active=view.is_active,
            created_at=view.created_at,
            updated_at=view.updated_at,
        )


class LoginResponse(StrictModel):
    """Successful login payload."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse


class UserCreateRequest(StrictModel):
    """Registration payload."""

    email: EmailStr
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return normalize_user_email(email=value)

    @field_validator("password")
    @classmethod
    def _reject_blank_password(cls, value: str) -> str:
        return require_user_password(password=value)


class UserUpdateRequest(StrictModel):
    """Partial user update payload."""

    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8)
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    is_active: bool | None = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return normalize_user_email(email=value)

    @field_validator("password")
    @classmethod
    def _reject_blank_password(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return require_user_password(password=value)


class UserListResponse(StrictModel):
    """Paginated user listing."""

    items: list[UserResponse]
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
