"""Signed, time-limited bearer tokens backed by PyJWT."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt

from user_auth.application.ports.token_service_port import (
    InvalidTokenError,
    IssuedToken,
    TokenClaims,
    TokenServicePort,
)

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = timedelta(hours=24)
_REQUIRED_CLAIMS = ["sub", "email", "iat", "exp"]


class JwtTokenService(TokenServicePort):
    """Issue and verify HMAC-signed JWT access tokens.

    Tokens are self-contained; nothing is stored server-side. Every
    verification failure surfaces as the same InvalidTokenError while the
    concrete reason is only logged at debug level.
    """

    def __init__(
        self,
        *,
        secret: str,
        algorithm: str = "HS256",
        token_ttl: timedelta = DEFAULT_TOKEN_TTL,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        if not secret:
            raise ValueError("token signing secret cannot be blank")
        if token_ttl <= timedelta(0):
            raise ValueError("token ttl must be positive")
        self._secret = secret
        self._algorithm = algorithm
        self._token_ttl = token_ttl
        self._now = now or (lambda: datetime.now(tz=UTC))

    def issue(self, *, subject_id: UUID, email: str) -> IssuedToken:
        issued_at = self._now().replace(microsecond=0)
        expires_at = issued_at + self._token_ttl
        payload = {
            "sub": str(subject_id),
            "email": email,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, issued_at=issued_at, expires_at=expires_at)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": _REQUIRED_CLAIMS, "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidSignatureError as exc:
            logger.debug("token_rejected reason=bad_signature")
            raise InvalidTokenError() from exc
        except jwt.MissingRequiredClaimError as exc:
            logger.debug("token_rejected reason=missing_claims claim=%s", exc.claim)
            raise InvalidTokenError() from exc
        except jwt.InvalidTokenError as exc:
            logger.debug("token_rejected reason=malformed")
            raise InvalidTokenError() from exc

        expires_at = _as_datetime(payload.get("exp"))
        if expires_at is None or self._now() >= expires_at:
            logger.debug("token_rejected reason=expired")
            raise InvalidTokenError()

        subject = payload.get("sub")
        email = payload.get("email")
        if not isinstance(subject, str) or not isinstance(email, str):
            logger.debug("token_rejected reason=missing_claims")
            raise InvalidTokenError()
        try:
            subject_id = UUID(subject)
        except ValueError as exc:
            logger.debug("token_rejected reason=malformed_subject")
            raise InvalidTokenError() from exc

        return TokenClaims(subject_id=subject_id, email=email)


def _as_datetime(value: object) -> datetime | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return datetime.fromtimestamp(value, tz=UTC)
