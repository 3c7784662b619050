"""Application authentication service for credential login."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum

from user_auth.application.dto.public_user import PublicUserView, to_public_view
from user_auth.application.ports.password_hasher_port import PasswordHasherPort
from user_auth.application.ports.token_service_port import IssuedToken, TokenServicePort
from user_auth.application.ports.user_repository_port import UserRecord
from user_auth.application.services.user_directory_service import UserDirectoryService
from user_auth.domain.auth.credentials import normalize_user_email

logger = logging.getLogger(__name__)


class AuthOutcome(StrEnum):
    """Supported authentication outcomes."""

    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"


@dataclass(frozen=True)
class AuthResult:
    """Authentication result model."""

    outcome: AuthOutcome
    token: IssuedToken | None = None
    user: PublicUserView | None = None


class AuthService:
    """Verify credentials and issue bearer tokens.

    Unknown emails, wrong passwords and lookup failures all end in the same
    ``INVALID_CREDENTIALS`` outcome. When no user is found the password is
    still checked against a dummy digest so both failure paths cost one
    hash verification.
    """

    def __init__(
        self,
        *,
        user_directory: UserDirectoryService,
        password_hasher: PasswordHasherPort,
        token_service: TokenServicePort,
    ) -> None:
        self._user_directory = user_directory
        self._password_hasher = password_hasher
        self._token_service = token_service
        self._dummy_hash: str | None = None

    async def authenticate(self, *, email: str, password: str) -> AuthResult:
        """Authenticate credentials and issue a token on success."""

        user = await self._lookup_user(email=email)
        password_hash = user.password_hash if user is not None else await self._get_dummy_hash()
        is_valid = await asyncio.to_thread(
            self._password_hasher.verify_password,
            password=password,
            password_hash=password_hash,
        )

        if user is None or not is_valid:
            logger.info(
                "user_login_failed reason=%s",
                "unknown_email" if user is None else "password_mismatch",
            )
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS)

        await self._refresh_password_hash(user=user, password=password)
        token = self._token_service.issue(subject_id=user.user_id, email=user.email)
        logger.info("user_login_succeeded user_id=%s", user.user_id)
        return AuthResult(outcome=AuthOutcome.SUCCESS, token=token, user=to_public_view(user))

    async def _lookup_user(self, *, email: str) -> UserRecord | None:
        """Return user for the email, treating any lookup failure as not found."""

        try:
            normalized = normalize_user_email(email=email)
        except ValueError:
            return None
        try:
            return await self._user_directory.lookup_by_email(email=normalized)
        except Exception:
            logger.exception("user_login_lookup_failed")
            return None

    async def _refresh_password_hash(self, *, user: UserRecord, password: str) -> None:
        try:
            refreshed = await self._user_directory.refresh_password_hash(
                user=user,
                password=password,
            )
        except Exception:
            logger.exception("user_password_rehash_failed user_id=%s", user.user_id)
            return
        if refreshed:
            logger.info("user_password_rehashed user_id=%s", user.user_id)

    async def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = await asyncio.to_thread(
                self._password_hasher.hash_password,
                "dummy-password-for-timing",
            )
        return self._dummy_hash
