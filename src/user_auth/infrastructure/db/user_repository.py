"""SQLAlchemy adapter for user persistence."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, cast
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from user_auth.application.ports.user_repository_port import (
    DuplicateUserEmailError,
    UserCreateInput,
    UserRecord,
    UserRepositoryPort,
    UserUpdateInput,
)
from user_auth.domain.auth.roles import Role
from user_auth.infrastructure.db.metadata import users

_USER_COLUMNS = (
    users.c.id,
    users.c.email,
    users.c.password_hash,
    users.c.first_name,
    users.c.last_name,
    users.c.role,
    users.c.is_active,
    users.c.created_at,
    users.c.updated_at,
)


def _is_duplicate_email_error(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "email" in message


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return user by id or None."""

        statement = sa.select(*_USER_COLUMNS).where(users.c.id == user_id).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by normalized email or None."""

        statement = sa.select(*_USER_COLUMNS).where(users.c.email == email).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert one user row and return the persisted record."""

        statement = (
            sa.insert(users)
            .values(
                id=payload.user_id,
                email=payload.email,
                password_hash=payload.password_hash,
                first_name=payload.first_name,
                last_name=payload.last_name,
                role=payload.role.value,
                is_active=payload.is_active,
                created_at=payload.created_at,
                updated_at=payload.created_at,
            )
            .returning(*_USER_COLUMNS)
        )

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                row = result.mappings().one()
                await session.commit()
            except IntegrityError as error:
                await session.rollback()
                if _is_duplicate_email_error(error):
                    raise DuplicateUserEmailError("duplicate user email") from error
                raise

        return _to_user_record(row)

    async def update_user(self, *, user_id: UUID, payload: UserUpdateInput) -> UserRecord | None:
        """Apply non-null fields of the payload and return the updated row."""

        values: dict[str, Any] = {"updated_at": payload.updated_at}
        if payload.email is not None:
            values["email"] = payload.email
        if payload.password_hash is not None:
            values["password_hash"] = payload.password_hash
        if payload.first_name is not None:
            values["first_name"] = payload.first_name
        if payload.last_name is not None:
            values["last_name"] = payload.last_name
        if payload.role is not None:
            values["role"] = payload.role.value
        if payload.is_active is not None:
            values["is_active"] = payload.is_active

        condition = users.c.id == user_id
        if payload.expected_password_hash is not None:
            condition = sa.and_(condition, users.c.password_hash == payload.expected_password_hash)

        statement = sa.update(users).where(condition).values(**values).returning(*_USER_COLUMNS)

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                row = result.mappings().first()
                await session.commit()
            except IntegrityError as error:
                await session.rollback()
                if _is_duplicate_email_error(error):
                    raise DuplicateUserEmailError("duplicate user email") from error
                raise

        if row is None:
            return None
        return _to_user_record(row)

    async def delete_user(self, *, user_id: UUID) -> bool:
        """Hard-delete one user row and return whether a row was removed."""

        statement = sa.delete(users).where(users.c.id == user_id)

        async with self._session_factory() as session:
            result = await session.execute(statement)
            await session.commit()

        return int(cast(Any, result).rowcount or 0) > 0

    async def list_users(self, *, offset: int, limit: int) -> list[UserRecord]:
        """Return one page of users ordered by creation time then id."""

        statement = (
            sa.select(*_USER_COLUMNS)
            .order_by(users.c.created_at.asc(), users.c.id.asc())
            .offset(offset)
            .limit(limit)
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [_to_user_record(row) for row in result.mappings().all()]

    async def count_users(self) -> int:
        """Return the total number of persisted users."""

        async with self._session_factory() as session:
            result = await session.execute(sa.select(sa.func.count()).select_from(users))

        return int(result.scalar_one())


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    raw_user_id = row["id"]
    user_id = raw_user_id if isinstance(raw_user_id, UUID) else UUID(str(raw_user_id))
    return UserRecord(
        user_id=user_id,
        email=cast(str, row["email"]),
        password_hash=cast(str, row["password_hash"]),
        first_name=cast(str, row["first_name"]),
        last_name=cast(str, row["last_name"]),
        role=Role(cast(str, row["role"])),
        is_active=bool(row["is_active"]),
        created_at=_as_aware(cast(datetime, row["created_at"])),
        updated_at=_as_aware(cast(datetime, row["updated_at"])),
    )
