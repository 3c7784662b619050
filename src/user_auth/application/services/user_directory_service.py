"""Application service owning user identity invariants."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4

from user_auth.application.dto.public_user import PublicUserView, to_public_view
from user_auth.application.ports.password_hasher_port import PasswordHasherPort
from user_auth.application.ports.user_repository_port import (
    DuplicateUserEmailError,
    UserCreateInput,
    UserRecord,
    UserRepositoryPort,
    UserUpdateInput,
)
from user_auth.domain.auth.credentials import normalize_user_email, require_user_password
from user_auth.domain.auth.roles import Role
from user_auth.domain.pagination import resolve_page_window

logger = logging.getLogger(__name__)


class UserNotFoundError(LookupError):
    """Raised when a target user cannot be found."""

    def __init__(self, *, user_id: UUID | None = None) -> None:
        super().__init__("user not found")
        self.user_id = user_id


class EmailAlreadyInUseError(ValueError):
    """Raised when an email is already owned by another user."""

    field = "email"

    def __init__(self) -> None:
        super().__init__("email already in use")


@dataclass(frozen=True)
class UserProfileInput:
    """Profile fields supplied at registration."""

    email: str
    first_name: str
    last_name: str


@dataclass(frozen=True)
class UserPatch:
    """Fields a caller may change on an existing user; ``None`` means unchanged."""

    email: str | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    is_active: bool | None = None


@dataclass(frozen=True)
class UserPage:
    """One page of public user views with the true total count."""

    items: list[PublicUserView]
    total: int
    page: int
    limit: int


class UserDirectoryService:
    """Create, read, update, delete and list users without exposing hashes."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_hasher: PasswordHasherPort,
        now: Callable[[], datetime] | None = None,
        default_role: Role = Role.USER,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._now = now or (lambda: datetime.now(tz=UTC))
        self._default_role = default_role

    async def lookup_by_email(self, *, email: str) -> UserRecord | None:
        """Return full user record by email for internal auth use."""

        return await self._users.get_by_email(email=normalize_user_email(email=email))

    async def lookup_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return full user record by id for internal auth use."""

        return await self._users.get_by_id(user_id=user_id)

    async def get_user(self, *, user_id: UUID) -> PublicUserView:
        """Return public view of one user or raise UserNotFoundError."""

        record = await self._users.get_by_id(user_id=user_id)
        if record is None:
            raise UserNotFoundError(user_id=user_id)
        return to_public_view(record)

    async def create_user(self, *, profile: UserProfileInput, password: str) -> PublicUserView:
        """Register one user with a hashed password.

        The store's uniqueness constraint is authoritative: a duplicate
        reported by the repository maps to EmailAlreadyInUseError even when
        the pre-check found no conflict.
        """

        email = normalize_user_email(email=profile.email)
        require_user_password(password=password)
        if await self._users.get_by_email(email=email) is not None:
            raise EmailAlreadyInUseError()

        password_hash = await asyncio.to_thread(self._password_hasher.hash_password, password)
        try:
            created = await self._users.create_user(
                UserCreateInput(
                    user_id=uuid4(),
                    email=email,
                    password_hash=password_hash,
                    first_name=profile.first_name,
                    last_name=profile.last_name,
                    role=self._default_role,
                    is_active=True,
                    created_at=self._now(),
                )
            )
        except DuplicateUserEmailError as exc:
            raise EmailAlreadyInUseError() from exc

        logger.info("user_created user_id=%s", created.user_id)
        return to_public_view(created)

    async def update_user(
        self,
        *,
        user_id: UUID,
        patch: UserPatch,
        actor_id: UUID | None = None,
    ) -> PublicUserView:
        """Apply a partial update, re-hashing any new password."""

        existing = await self._users.get_by_id(user_id=user_id)
        if existing is None:
            raise UserNotFoundError(user_id=user_id)

        email: str | None = None
        if patch.email is not None:
            email = normalize_user_email(email=patch.email)
            if email != existing.email:
                owner = await self._users.get_by_email(email=email)
                if owner is not None and owner.user_id != user_id:
                    raise EmailAlreadyInUseError()

        password_hash: str | None = None
        if patch.password is not None:
            require_user_password(password=patch.password)
            password_hash = await asyncio.to_thread(
                self._password_hasher.hash_password,
                patch.password,
            )

        try:
            updated = await self._users.update_user(
                user_id=user_id,
                payload=UserUpdateInput(
                    updated_at=self._now(),
                    email=email,
                    password_hash=password_hash,
                    first_name=patch.first_name,
                    last_name=patch.last_name,
                    is_active=patch.is_active,
                ),
            )
        except DuplicateUserEmailError as exc:
            raise EmailAlreadyInUseError() from exc
        if updated is None:
            raise UserNotFoundError(user_id=user_id)

        logger.info(
            "user_updated user_id=%s actor_id=%s password_changed=%s",
            user_id,
            actor_id,
            password_hash is not None,
        )
        return to_public_view(updated)

    async def refresh_password_hash(self, *, user: UserRecord, password: str) -> bool:
        """Re-hash a verified password when its digest uses an outdated cost.

        Returns whether a new digest was stored. `updated_at` is left as is
        because the profile did not change. The write only lands while the
        stored digest is still the one that was verified, so a password
        changed in the meantime is never overwritten.
        """

        if not self._password_hasher.needs_rehash(user.password_hash):
            return False
        password_hash = await asyncio.to_thread(self._password_hasher.hash_password, password)
        updated = await self._users.update_user(
            user_id=user.user_id,
            payload=UserUpdateInput(
                updated_at=user.updated_at,
                password_hash=password_hash,
                expected_password_hash=user.password_hash,
            ),
        )
        return updated is not None

    async def remove_user(self, *, user_id: UUID, actor_id: UUID | None = None) -> None:
        """Permanently delete one user or raise UserNotFoundError."""

        deleted = await self._users.delete_user(user_id=user_id)
        if not deleted:
            raise UserNotFoundError(user_id=user_id)
        logger.info("user_removed user_id=%s actor_id=%s", user_id, actor_id)

    async def list_users(self, *, page: int | None = None, limit: int | None = None) -> UserPage:
        """Return one clamped page of users; out-of-range pages are empty."""

        window = resolve_page_window(page=page, limit=limit)
        total = await self._users.count_users()
        records: list[UserRecord] = []
        if window.offset < total:
            records = await self._users.list_users(offset=window.offset, limit=window.limit)
        return UserPage(
            items=[to_public_view(record) for record in records],
            total=total,
            page=window.page,
            limit=window.limit,
        )
