"""Authenticated user and session models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AuthEvent(str, Enum):
    """Session-change notifications delivered to auth listeners."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


@dataclass
class User:
    """An account. The id is an opaque string, as issued by the auth backend."""

    id: str
    email: str
    confirmed: bool = False
    created_at: datetime | None = None


@dataclass
class AuthSession:
    """A signed-in session identified by its bearer token."""

    token: str
    user: User
    created_at: datetime | None = None
