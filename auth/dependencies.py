"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The bearer token travels in the Authorization header:
    Authorization: Bearer <token>

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated. Routes
declare `user: User = Depends(get_current_user)`, so the handler receives a
typed User and never looks anything up in request state itself.

Layer rule: no imports from api/ or core/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import User
from auth.service import AuthService


def get_auth_service(request: Request) -> AuthService:
    """Return the AuthService built by the application lifespan."""
    return request.app.state.auth_service


def try_get_current_user(request: Request) -> User | None:
    """Resolve the request's bearer token to a User.

    Returns None when the header is missing, malformed, or carries a token
    that is invalid, expired, or no longer stored on the user row.
    Never raises -- callers that need a hard 401 should use get_current_user().
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()
    if not token:
        return None
    return get_auth_service(request).resolve_token(token)


def get_current_user(request: Request) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.post("/protected")
        async def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "User not found"},
        )
    return user
