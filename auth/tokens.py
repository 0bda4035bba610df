"""
auth/tokens.py -- Bearer token issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry the user id as the subject claim
       and expire TOKEN_EXPIRE_SECONDS (30 days by default) after issuance.
       A random jti claim makes every issued token distinct, even two
       issued for the same user within one second.
       Verification returns None on any failure -- the dependency layer turns
       that into a 401.

  Revocation: a valid signature is not enough. auth/dependencies.py also
       requires the token to match the one stored on the user row, so logout
       (which clears that column) revokes the token before it expires.

  SECRET_KEY: sourced from core.config.Settings at startup and passed into
       TokenIssuer by api/main.py. This module never reads settings itself.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from jose.exceptions import JOSEError

from auth.errors import SigningError

logger = logging.getLogger("custauth.auth")

_ALGORITHM = "HS256"


class TokenIssuer:
    """Issues and decodes signed, time-limited bearer tokens."""

    def __init__(self, secret_key: str, expire_seconds: int) -> None:
        if not secret_key:
            raise ValueError("TokenIssuer requires a non-empty secret key")
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds

    def issue(self, user_id: str) -> str:
        """Encode a signed JWT with sub=user_id and the configured expiry.

        Raises SigningError if the JOSE library cannot sign the claims.
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + timedelta(seconds=self.expire_seconds),
            "jti": uuid.uuid4().hex,
        }
        try:
            return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)
        except JOSEError as exc:
            raise SigningError("failed to sign access token") from exc

    def decode(self, token: str) -> dict | None:
        """Decode and verify a JWT. Returns the payload dict or None on any failure.

        Signature and expiry are checked by jose. A payload without a subject
        is rejected here so callers can index payload["sub"] directly.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[_ALGORITHM])
        except JWTError:
            return None
        if not payload.get("sub"):
            return None
        return payload
