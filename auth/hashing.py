"""
auth/hashing.py -- Password hashing (bcrypt, used directly).

bcrypt only reads the first 72 bytes of its input. bcrypt 4.x truncates
longer passwords silently and bcrypt 5.x raises ValueError, so the limit is
checked here before bcrypt sees the input:
  hash()   rejects an over-long password with HashingError.
  verify() answers False for one; no stored digest can match it.

The cost factor is fixed per process (Settings.bcrypt_rounds). Digests carry
their own salt and cost, so verify() keeps working on hashes created with an
older cost after the setting changes.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import bcrypt

from auth.errors import HashingError

MAX_PASSWORD_BYTES = 72


def _too_long(plain: str) -> bool:
    return len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES


class CredentialHasher:
    """Salted, adaptive one-way hashing for user passwords.

    Usage:
        hasher = CredentialHasher(rounds=10)
        digest = hasher.hash("s3cret")
        hasher.verify(digest, "s3cret")  # True
    """

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        """Return a bcrypt digest of the plaintext password.

        Raises HashingError if the password is longer than 72 bytes or bcrypt
        fails.
        """
        if _too_long(plain):
            raise HashingError(f"password exceeds {MAX_PASSWORD_BYTES} bytes")
        try:
            return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")
        except (ValueError, TypeError) as exc:
            raise HashingError("bcrypt failed to hash password") from exc

    def verify(self, digest: str, plain: str) -> bool:
        """Return True if the plaintext matches the digest, False on mismatch.

        Raises HashingError only when the stored digest is malformed.
        """
        if _too_long(plain):
            return False
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), digest.encode("utf-8"))
        except ValueError as exc:
            raise HashingError("bcrypt rejected the stored digest") from exc
