"""Bcrypt password hasher adapter."""

from __future__ import annotations

import bcrypt

from user_auth.application.ports.password_hasher_port import PasswordHasherPort

DEFAULT_BCRYPT_ROUNDS = 12
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class BcryptPasswordHasher(PasswordHasherPort):
    """Password hashing adapter using bcrypt.

    The salt is embedded in the digest. bcrypt only reads the first 72 bytes
    of input, so longer passwords are truncated explicitly.
    """

    def __init__(self, *, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        self._rounds = rounds

    def hash_password(self, password: str) -> str:
        return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        # Digest layout: $2b$<cost>$<salt+checksum>
        parts = password_hash.split("$")
        if len(parts) < 4 or not parts[2].isdigit():
            return False
        return int(parts[2]) != self._rounds
