from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from user_auth.application.ports.token_service_port import IssuedToken, TokenClaims
from user_auth.application.ports.user_repository_port import UserRecord, UserUpdateInput
from user_auth.application.services.auth_service import AuthOutcome, AuthService
from user_auth.application.services.user_directory_service import UserDirectoryService
from user_auth.domain.auth.roles import Role


@dataclass
class FakeUserRepository:
    user: UserRecord | None
    lookup_error: Exception | None = None
    lookups: list[str] = field(default_factory=list)
    updates: list[tuple[UUID, UserUpdateInput]] = field(default_factory=list)
    update_error: Exception | None = None

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        self.lookups.append(email)
        if self.lookup_error is not None:
            raise self.lookup_error
        if self.user is None or self.user.email != email:
            return None
        return self.user

    async def update_user(self, *, user_id: UUID, payload: UserUpdateInput) -> UserRecord | None:
        if self.update_error is not None:
            raise self.update_error
        self.updates.append((user_id, payload))
        return self.user


class FakePasswordHasher:
    def __init__(self, *, should_verify: bool, stale: bool = False) -> None:
        self.should_verify = should_verify
        self.stale = stale
        self.verify_calls: list[tuple[str, str]] = []

    def hash_password(self, password: str) -> str:
        return f"hashed::{password}"

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        self.verify_calls.append((password, password_hash))
        return self.should_verify

    def needs_rehash(self, password_hash: str) -> bool:
        return self.stale


class FakeTokenService:
    def __init__(self) -> None:
        self.issued: list[tuple[UUID, str]] = []

    def issue(self, *, subject_id: UUID, email: str) -> IssuedToken:
        self.issued.append((subject_id, email))
        now = datetime(2026, 3, 1, tzinfo=UTC)
        return IssuedToken(
            token="signed-token",
            issued_at=now,
            expires_at=now + timedelta(hours=24),
        )

    def verify(self, token: str) -> TokenClaims:
        raise NotImplementedError


def _user() -> UserRecord:
    now = datetime.now(tz=UTC)
    return UserRecord(
        user_id=uuid4(),
        email="ana@example.org",
        password_hash="hashed::pw",
        first_name="Ana",
        last_name="Silva",
        role=Role.USER,
        is_active=True,
        created_at=now,
        updated_at=now,
    )


def _service(
    users: FakeUserRepository,
    hasher: FakePasswordHasher,
    tokens: FakeTokenService,
) -> AuthService:
    return AuthService(
        user_directory=UserDirectoryService(users=users, password_hasher=hasher),
        password_hasher=hasher,
        token_service=tokens,
    )


@pytest.mark.asyncio
async def test_authenticate_success_issues_token_and_public_view() -> None:
    user = _user()
    hasher = FakePasswordHasher(should_verify=True)
    tokens = FakeTokenService()
    service = _service(FakeUserRepository(user=user), hasher, tokens)

    result = await service.authenticate(email=user.email, password="pw")

    assert result.outcome is AuthOutcome.SUCCESS
    assert result.token is not None
    assert result.token.token == "signed-token"
    assert result.user is not None
    assert result.user.user_id == user.user_id
    assert not hasattr(result.user, "password_hash")
    assert hasher.verify_calls == [("pw", "hashed::pw")]
    assert tokens.issued == [(user.user_id, user.email)]


@pytest.mark.asyncio
async def test_authenticate_normalizes_email_before_lookup() -> None:
    user = _user()
    users = FakeUserRepository(user=user)
    service = _service(users, FakePasswordHasher(should_verify=True), FakeTokenService())

    result = await service.authenticate(email="  ANA@Example.org ", password="pw")

    assert result.outcome is AuthOutcome.SUCCESS
    assert users.lookups == ["ana@example.org"]


@pytest.mark.asyncio
async def test_authenticate_wrong_password_returns_invalid_credentials() -> None:
    user = _user()
    hasher = FakePasswordHasher(should_verify=False)
    tokens = FakeTokenService()
    service = _service(FakeUserRepository(user=user), hasher, tokens)

    result = await service.authenticate(email=user.email, password="wrong")

    assert result.outcome is AuthOutcome.INVALID_CREDENTIALS
    assert result.token is None
    assert result.user is None
    assert hasher.verify_calls == [("wrong", "hashed::pw")]
    assert tokens.issued == []


@pytest.mark.asyncio
async def test_authenticate_unknown_email_still_verifies_against_dummy_digest() -> None:
    hasher = FakePasswordHasher(should_verify=True)
    tokens = FakeTokenService()
    service = _service(FakeUserRepository(user=None), hasher, tokens)

    result = await service.authenticate(email="missing@example.org", password="pw")

    assert result.outcome is AuthOutcome.INVALID_CREDENTIALS
    assert result.token is None
    assert len(hasher.verify_calls) == 1
    assert hasher.verify_calls[0][1].startswith("hashed::")
    assert tokens.issued == []


@pytest.mark.asyncio
async def test_unknown_email_and_wrong_password_have_identical_outcomes() -> None:
    user = _user()
    missing = await _service(
        FakeUserRepository(user=None),
        FakePasswordHasher(should_verify=False),
        FakeTokenService(),
    ).authenticate(email="missing@example.org", password="pw")
    mismatch = await _service(
        FakeUserRepository(user=user),
        FakePasswordHasher(should_verify=False),
        FakeTokenService(),
    ).authenticate(email=user.email, password="wrong")

    assert missing == mismatch


@pytest.mark.asyncio
async def test_lookup_failure_fails_closed(caplog: pytest.LogCaptureFixture) -> None:
    users = FakeUserRepository(user=_user(), lookup_error=RuntimeError("db down"))
    tokens = FakeTokenService()
    service = _service(users, FakePasswordHasher(should_verify=True), tokens)

    with caplog.at_level(logging.ERROR):
        result = await service.authenticate(email="ana@example.org", password="pw")

    assert result.outcome is AuthOutcome.INVALID_CREDENTIALS
    assert tokens.issued == []
    assert "user_login_lookup_failed" in caplog.text


@pytest.mark.asyncio
async def test_login_logs_never_contain_password(caplog: pytest.LogCaptureFixture) -> None:
    user = _user()
    service = _service(
        FakeUserRepository(user=user),
        FakePasswordHasher(should_verify=True),
        FakeTokenService(),
    )

    with caplog.at_level(logging.DEBUG):
        await service.authenticate(email=user.email, password="plaintext-secret")

    assert "user_login_succeeded" in caplog.text
    assert "plaintext-secret" not in caplog.text
    assert "hashed::pw" not in caplog.text


@pytest.mark.asyncio
async def test_login_with_stale_digest_cost_rehashes_password() -> None:
    user = _user()
    users = FakeUserRepository(user=user)
    hasher = FakePasswordHasher(should_verify=True, stale=True)
    service = _service(users, hasher, FakeTokenService())

    result = await service.authenticate(email=user.email, password="pw")

    assert result.outcome is AuthOutcome.SUCCESS
    assert len(users.updates) == 1
    user_id, payload = users.updates[0]
    assert user_id == user.user_id
    assert payload.password_hash == "hashed::pw"
    assert payload.updated_at == user.updated_at
    assert payload.email is None


@pytest.mark.asyncio
async def test_rehash_failure_does_not_block_login(caplog: pytest.LogCaptureFixture) -> None:
    user = _user()
    users = FakeUserRepository(user=user, update_error=RuntimeError("db down"))
    tokens = FakeTokenService()
    service = _service(users, FakePasswordHasher(should_verify=True, stale=True), tokens)

    with caplog.at_level(logging.ERROR):
        result = await service.authenticate(email=user.email, password="pw")

    assert result.outcome is AuthOutcome.SUCCESS
    assert tokens.issued == [(user.user_id, user.email)]
    assert "user_password_rehash_failed" in caplog.text


@pytest.mark.asyncio
async def test_failed_login_never_rehashes() -> None:
    user = _user()
    users = FakeUserRepository(user=user)
    hasher = FakePasswordHasher(should_verify=False, stale=True)
    service = _service(users, hasher, FakeTokenService())

    await service.authenticate(email=user.email, password="wrong")

    assert users.updates == []


@pytest.mark.asyncio
async def test_blank_email_is_rejected_without_error_log(caplog: pytest.LogCaptureFixture) -> None:
    users = FakeUserRepository(user=_user())
    hasher = FakePasswordHasher(should_verify=True)
    service = _service(users, hasher, FakeTokenService())

    with caplog.at_level(logging.INFO):
        result = await service.authenticate(email="   ", password="pw")

    assert result.outcome is AuthOutcome.INVALID_CREDENTIALS
    assert users.lookups == []
    assert len(hasher.verify_calls) == 1
    assert "user_login_lookup_failed" not in caplog.text
    assert not [record for record in caplog.records if record.levelno >= logging.ERROR]
