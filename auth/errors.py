"""
auth/errors.py -- Exception taxonomy for the auth layer.

Every failure the service can report is a subclass of AuthServiceError. The
route layer maps each class to an HTTP status and a generic client message;
the exception text itself is for logs only and never reaches the caller.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations


class AuthServiceError(Exception):
    """Base class for auth service errors."""


class InputError(AuthServiceError):
    """The request body was missing, unreadable, or had the wrong shape."""


class ConflictError(AuthServiceError):
    """A unique constraint rejected the write (e.g. duplicate email)."""


class NotFoundError(AuthServiceError):
    """No row matched the lookup."""


class AuthError(AuthServiceError):
    """Credentials did not match."""


class HashingError(AuthServiceError):
    """bcrypt failed to hash, or the stored digest is malformed."""


class SigningError(AuthServiceError):
    """The token could not be signed."""


class InternalError(AuthServiceError):
    """An invariant the service depends on was violated."""


class TransactionError(AuthServiceError):
    """A unit of work failed and was rolled back. The cause is chained."""
