"""Bearer header parsing and per-request access guard."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from user_auth.application.ports.token_service_port import InvalidTokenError, TokenServicePort


class MissingAuthTokenError(PermissionError):
    """Raised when a bearer token is required but not provided."""


class InvalidAuthTokenError(PermissionError):
    """Raised when bearer token header or token signature/expiry is invalid."""


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Subject derived from a verified token, scoped to one request."""

    user_id: UUID
    email: str


def extract_bearer_token(authorization_header: str | None) -> str:
    """Extract token from standard `Authorization: Bearer <token>` header."""

    if authorization_header is None or not authorization_header.strip():
        raise MissingAuthTokenError("missing bearer token")

    parts = authorization_header.strip().split()
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise InvalidAuthTokenError("invalid or expired auth token")

    return parts[1]


class RequestAccessGuard:
    """Resolve the caller identity for protected routes, pass public ones through."""

    def __init__(self, *, token_service: TokenServicePort) -> None:
        self._token_service = token_service

    def authorize(
        self,
        *,
        authorization_header: str | None,
        is_public: bool,
    ) -> AuthenticatedIdentity | None:
        """Return identity for protected routes or raise; public routes get None."""

        if is_public:
            return None

        token = extract_bearer_token(authorization_header)
        try:
            claims = self._token_service.verify(token)
        except InvalidTokenError as exc:
            raise InvalidAuthTokenError("invalid or expired auth token") from exc
        return AuthenticatedIdentity(user_id=claims.subject_id, email=claims.email)
