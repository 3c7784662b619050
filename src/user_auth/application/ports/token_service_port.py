"""Port for issuing and verifying signed bearer tokens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID


class InvalidTokenError(ValueError):
    """Raised for any token that fails verification.

    Expired, forged and malformed tokens all raise this same error with the
    same message.
    """

    def __init__(self) -> None:
        super().__init__("invalid token")


@dataclass(frozen=True)
class TokenClaims:
    """Subject claims recovered from a verified token."""

    subject_id: UUID
    email: str


@dataclass(frozen=True)
class IssuedToken:
    """Signed token together with its validity window."""

    token: str
    issued_at: datetime
    expires_at: datetime


class TokenServicePort(Protocol):
    """Stateless token issue/verify contract."""

    def issue(self, *, subject_id: UUID, email: str) -> IssuedToken:
        """Sign a new token for the subject."""

    def verify(self, token: str) -> TokenClaims:
        """Return claims for a valid token or raise InvalidTokenError."""
