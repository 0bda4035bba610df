"""
API request and response models for the custauth REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Request fields are required and must be non-empty. Email format is not
validated; the store's unique constraint is the only check on it.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import History, Profile

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SignUpRequest(BaseModel):
    """Request body for POST /api/v1/auth/signup."""

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class ProfileResponse(BaseModel):
    """Account echo returned by signup and /auth/me. Never carries ids or secrets."""

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    email: str

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileResponse":
        return cls(first_name=profile.first_name, last_name=profile.last_name, email=profile.email)


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class HistoryEntry(BaseModel):
    """One login audit entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: str
    activity: str

    @classmethod
    def from_history(cls, history: History) -> "HistoryEntry":
        return cls(id=history.id, date=history.date, activity=history.activity)


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
