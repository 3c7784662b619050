"""Outward-facing user projection without credential material."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from user_auth.application.ports.user_repository_port import UserRecord
from user_auth.domain.auth.roles import Role


@dataclass(frozen=True)
class PublicUserView:
    """User profile safe to return from any outward-facing operation."""

    user_id: UUID
    email: str
    first_name: str
    last_name: str
    role: Role
    is_active: bool
    created_at: datetime
    updated_at: datetime


def to_public_view(record: UserRecord) -> PublicUserView:
    """Project a persisted user row, dropping the password hash."""

    return PublicUserView(
        user_id=record.user_id,
        email=record.email,
        first_name=record.first_name,
        last_name=record.last_name,
        role=record.role,
        is_active=record.is_active,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )
