"""Port for one-way password digests."""

from __future__ import annotations

from typing import Protocol


class PasswordHasherPort(Protocol):
    """Salted password hashing contract.

    Digests embed their own salt and cost, so a stored value is all that is
    needed to verify a candidate password later.
    """

    def hash_password(self, password: str) -> str:
        """Return a new salted digest for the plaintext password."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Return whether password matches digest; malformed digests yield False."""

    def needs_rehash(self, password_hash: str) -> bool:
        """Return whether digest was produced with a cost other than the current one."""
