"""Application services for pr-tracker."""

from .auth import AuthService
from .session_state import PRPage, SessionState, View

__all__ = [
    "AuthService",
    "PRPage",
    "SessionState",
    "View",
]
