"""
api/routes/v1/auth.py -- Account REST endpoints.

Routes:
  POST /api/v1/auth/signup   -- create User + Customer; echoes profile
  POST /api/v1/auth/login    -- verify credentials; returns bearer token
  POST /api/v1/auth/logout   -- revoke the caller's token (requires auth)
  GET  /api/v1/auth/me       -- caller's profile (requires auth)
  GET  /api/v1/auth/history  -- caller's login audit entries (requires auth)

Every AuthServiceError is converted here to a fixed client message and
status. Exception text stays in the server log.

Handlers are plain `def` so bcrypt and the synchronous store run in
FastAPI's thread pool instead of blocking the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from api.models import (
    HistoryEntry,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileResponse,
    SignUpRequest,
)
from auth.dependencies import get_auth_service, get_current_user
from auth.errors import (
    AuthError,
    ConflictError,
    HashingError,
    InputError,
    InternalError,
    NotFoundError,
    TransactionError,
)
from auth.models import User
from auth.service import AuthService

# Auth policy:
# - POST /api/v1/auth/signup:   public
# - POST /api/v1/auth/login:    public
# - POST /api/v1/auth/logout:   requires auth (get_current_user)
# - GET  /api/v1/auth/me:       requires auth (get_current_user)
# - GET  /api/v1/auth/history:  requires auth (get_current_user)
router = APIRouter()


def _fail(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"code": code, "message": message})


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/signup", response_model=ProfileResponse)
def signup(body: SignUpRequest, service: AuthService = Depends(get_auth_service)) -> ProfileResponse:
    """Register a new account.

    Conflicts are reported with the same 400 status as other transaction
    failures; the code field tells them apart.
    """
    try:
        profile = service.sign_up(body.email, body.password, body.first_name, body.last_name)
    except InputError as exc:
        raise _fail(400, "invalid_body", "Failed to read request body") from exc
    except HashingError as exc:
        raise _fail(400, "hash_failed", "Failed to hash password") from exc
    except ConflictError as exc:
        raise _fail(400, "conflict", "Failed to create User and Customer") from exc
    except TransactionError as exc:
        raise _fail(400, "transaction_failed", "Failed to create User and Customer") from exc
    return ProfileResponse.from_profile(profile)


@router.post("/auth/login", response_model=LoginResponse)
def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)) -> LoginResponse:
    """Exchange email and password for a bearer token."""
    try:
        token = service.log_in(body.email, body.password)
    except InputError as exc:
        raise _fail(400, "invalid_body", "Failed to read request body") from exc
    except NotFoundError as exc:
        raise _fail(401, "not_found", "User not found") from exc
    except AuthError as exc:
        raise _fail(400, "incorrect_password", "Incorrect password") from exc
    except (HashingError, TransactionError) as exc:
        raise _fail(400, "transaction_failed", "Failed to create token and update user") from exc
    return LoginResponse(token=token)


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/logout", response_model=MessageResponse)
def logout(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Clear the caller's stored token. The token stops authenticating immediately."""
    try:
        service.log_out(current_user)
    except InternalError as exc:
        raise _fail(500, "internal_error", "Failed to resolve authenticated user") from exc
    except TransactionError as exc:
        raise _fail(400, "transaction_failed", "Failed to log out User") from exc
    return MessageResponse(message="User successfully logged out")


@router.get("/auth/me", response_model=ProfileResponse)
def me(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> ProfileResponse:
    """Return the profile of the currently authenticated user."""
    try:
        profile = service.profile(current_user)
    except NotFoundError as exc:
        raise _fail(404, "not_found", "Customer not found") from exc
    return ProfileResponse.from_profile(profile)


@router.get("/auth/history", response_model=list[HistoryEntry])
def history(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> list[HistoryEntry]:
    """Return the caller's login history, newest first."""
    try:
        entries = service.history(current_user)
    except NotFoundError as exc:
        raise _fail(404, "not_found", "Customer not found") from exc
    return [HistoryEntry.from_history(h) for h in entries]
