"""
auth/service.py -- SignUp, LogIn and LogOut flows.

AuthService is constructed with its collaborators (store, hasher, issuer)
rather than reaching for module globals, so tests can hand it an in-memory
store and a cheap bcrypt cost.

Each flow runs at most one unit of work. Failures inside a unit of work are
rolled back by the store and re-raised here as TransactionError with the
original cause chained; the route layer turns every AuthServiceError into a
generic client message.

Status mapping carried by the route layer:
  LogIn unknown email -> 401 "User not found"
  LogIn wrong password -> 400 "Incorrect password"
The split leaks whether an email is registered. It is kept for compatibility
with existing clients.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import hmac
import logging

from sqlalchemy.exc import SQLAlchemyError

from auth.errors import (
    AuthError,
    ConflictError,
    InputError,
    InternalError,
    NotFoundError,
    SigningError,
    TransactionError,
)
from auth.hashing import CredentialHasher
from auth.models import LOGIN_ACTIVITY, Customer, History, Profile, User
from auth.store import AccountStore
from auth.tokens import TokenIssuer

logger = logging.getLogger("custauth.auth")


def _require(**fields: str) -> None:
    """Raise InputError naming every field that is missing or empty."""
    missing = [name for name, value in fields.items() if not isinstance(value, str) or not value]
    if missing:
        raise InputError(f"missing required fields: {', '.join(missing)}")


class AuthService:
    """Orchestrates the account lifecycle over an AccountStore."""

    def __init__(self, store: AccountStore, hasher: CredentialHasher, issuer: TokenIssuer) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer
        # Verified against when the email is unknown so both login failure
        # paths pay the same bcrypt cost.
        self._dummy_hash = hasher.hash("custauth_timing_dummy")

    # ------------------------------------------------------------------
    # SignUp
    # ------------------------------------------------------------------

    def sign_up(self, email: str, password: str, first_name: str, last_name: str) -> Profile:
        """Create a User and its Customer atomically.

        Raises:
            InputError:       a field is missing or empty. Nothing was written.
            HashingError:     bcrypt rejected the password. Nothing was written.
            ConflictError:    the email is already registered. Nothing was written.
            TransactionError: any other store failure. Nothing was written.
        """
        _require(email=email, password=password, first_name=first_name, last_name=last_name)
        digest = self.hasher.hash(password)
        user = User(email=email, password=digest)
        customer = Customer(first_name=first_name, last_name=last_name, user_id=user.id)
        try:
            with self.store.unit_of_work() as uow:
                uow.create_user(user)
                uow.create_customer(customer)
        except ConflictError:
            logger.info("Signup rejected: email already registered")
            raise
        except SQLAlchemyError as exc:
            logger.warning("Signup transaction failed: %s", type(exc).__name__)
            raise TransactionError("failed to create user and customer") from exc

        logger.info("Account created (user_id=%s)", user.id)
        return Profile(first_name=first_name, last_name=last_name, email=email)

    # ------------------------------------------------------------------
    # LogIn
    # ------------------------------------------------------------------

    def log_in(self, email: str, password: str) -> str:
        """Verify credentials, store a fresh token, and record a History entry.

        Returns the newly issued token.

        Raises:
            InputError:       email or password is missing or empty.
            NotFoundError:    no user has this email. No writes.
            AuthError:        password mismatch. No writes.
            HashingError:     the stored digest is malformed. No writes.
            TransactionError: token issuance, the token update, the customer
                              lookup or the history insert failed. Everything
                              in the unit of work is rolled back, including
                              the token update.
        """
        _require(email=email, password=password)
        user = self.store.get_by_email(email)
        if user is None:
            self.hasher.verify(self._dummy_hash, password)
            raise NotFoundError("user not found")

        if not self.hasher.verify(user.password, password):
            logger.info("Login rejected: incorrect password (user_id=%s)", user.id)
            raise AuthError("incorrect password")

        try:
            with self.store.unit_of_work() as uow:
                token = self.issuer.issue(user.id)
                uow.save_token(user.id, token)
                customer = uow.get_customer_by_user_id(user.id)
                uow.append_history(History(activity=LOGIN_ACTIVITY, customer_id=customer.id))
        except NotFoundError as exc:
            # Every User is created with a Customer; reaching this means the
            # data was altered outside the service.
            logger.error("Data integrity violation during login (user_id=%s): %s", user.id, exc)
            raise TransactionError("failed to create token and update user") from exc
        except (SigningError, SQLAlchemyError) as exc:
            logger.warning("Login transaction failed (user_id=%s): %s", user.id, type(exc).__name__)
            raise TransactionError("failed to create token and update user") from exc

        logger.info("User logged in (user_id=%s)", user.id)
        return token

    # ------------------------------------------------------------------
    # LogOut
    # ------------------------------------------------------------------

    def log_out(self, user: User | None) -> None:
        """Clear the user's stored token so it no longer authenticates.

        Raises:
            InternalError:    no authenticated user was supplied.
            TransactionError: the update failed and was rolled back.
        """
        if user is None or not user.id:
            raise InternalError("no authenticated user in request context")
        try:
            with self.store.unit_of_work() as uow:
                uow.save_token(user.id, "")
        except (NotFoundError, SQLAlchemyError) as exc:
            logger.warning("Logout transaction failed (user_id=%s): %s", user.id, type(exc).__name__)
            raise TransactionError("failed to log out user") from exc
        user.token = ""
        logger.info("User logged out (user_id=%s)", user.id)

    # ------------------------------------------------------------------
    # Token resolution and reads
    # ------------------------------------------------------------------

    def resolve_token(self, token: str) -> User | None:
        """Return the User a bearer token belongs to, or None.

        The token must carry a valid signature, be unexpired, and equal the
        token currently stored on the user row. A token replaced by a later
        login or cleared by logout no longer resolves.
        """
        payload = self.issuer.decode(token)
        if payload is None:
            return None
        user = self.store.get_by_id(payload["sub"])
        if user is None or not user.token:
            return None
        if not hmac.compare_digest(user.token.encode("utf-8"), token.encode("utf-8")):
            return None
        return user

    def profile(self, user: User) -> Profile:
        """Return the user's profile. Raises NotFoundError if the Customer is missing."""
        customer = self.store.get_customer_by_user_id(user.id)
        if customer is None:
            raise NotFoundError(f"no customer for user {user.id}")
        return Profile(first_name=customer.first_name, last_name=customer.last_name, email=user.email)

    def history(self, user: User) -> list[History]:
        """Return the user's login audit entries, newest first."""
        customer = self.store.get_customer_by_user_id(user.id)
        if customer is None:
            raise NotFoundError(f"no customer for user {user.id}")
        return self.store.list_history(customer.id)
