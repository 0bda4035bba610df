"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Dataclasses own domain
shape; the store and the service do the work.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

LOGIN_ACTIVITY = "User logged in"


def new_id() -> str:
    """Return a fresh random UUID as a string primary key."""
    return str(uuid.uuid4())


@dataclass
class User:
    """The login identity.

    password is always a bcrypt digest, never plaintext. token holds the
    currently valid bearer token; empty string means logged out. It is the
    only field that changes after the row is created.
    """

    email: str
    password: str
    id: str = field(default_factory=new_id)
    token: str = ""
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class Customer:
    """Profile record, one-to-one with User. Created in the same transaction."""

    first_name: str
    last_name: str
    user_id: str
    id: str = field(default_factory=new_id)
    created_at: str = ""


@dataclass
class History:
    """Append-only audit entry. Written on every successful login."""

    activity: str
    customer_id: str
    id: str = field(default_factory=new_id)
    date: str = ""  # ISO 8601, set by store on insert


@dataclass
class Profile:
    """What the service echoes back about an account. Excludes ids and secrets."""

    first_name: str
    last_name: str
    email: str
