"""Port for user persistence operations used by the user directory."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from user_auth.domain.auth.roles import Role


class DuplicateUserEmailError(ValueError):
    """Raised when the store rejects a row because its email is already taken."""


@dataclass(frozen=True)
class UserRecord:
    """User persistence model."""

    user_id: UUID
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: Role
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class UserCreateInput:
    """Input payload for inserting one user row."""

    user_id: UUID
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: Role
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class UserUpdateInput:
    """Partial update payload; ``None`` fields are left untouched.

    When `expected_password_hash` is set the row is only changed if its stored
    digest still equals it.
    """

    updated_at: datetime
    email: str | None = None
    password_hash: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: Role | None = None
    is_active: bool | None = None
    expected_password_hash: str | None = None


class UserRepositoryPort(Protocol):
    """User repository contract."""

    async def get_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return user by id or None."""

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by normalized email or None."""

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Persist one user row, raising DuplicateUserEmailError on email conflict."""

    async def update_user(self, *, user_id: UUID, payload: UserUpdateInput) -> UserRecord | None:
        """Apply partial update and return the new row, or None when no row matched."""

    async def delete_user(self, *, user_id: UUID) -> bool:
        """Permanently delete one user row and return whether it existed."""

    async def list_users(self, *, offset: int, limit: int) -> list[UserRecord]:
        """Return one deterministic page of users ordered by creation time."""

    async def count_users(self) -> int:
        """Return total persisted user count."""
