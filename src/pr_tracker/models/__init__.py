"""Data models for pr-tracker."""

from .chat import ChatMessage, ChatRole, PendingToolConfirmation, ToolProposal
from .records import (
    Movement,
    MovementCategory,
    PersonalRecord,
    STARTER_MOVEMENTS,
    WorkoutScore,
    format_display_date,
)
from .user import AuthEvent, AuthSession, User
from .wods import BENCHMARK_WODS, WOD, WODType, find_wod

__all__ = [
    "AuthEvent",
    "AuthSession",
    "BENCHMARK_WODS",
    "ChatMessage",
    "ChatRole",
    "find_wod",
    "format_display_date",
    "Movement",
    "MovementCategory",
    "PendingToolConfirmation",
    "PersonalRecord",
    "STARTER_MOVEMENTS",
    "ToolProposal",
    "User",
    "WOD",
    "WODType",
    "WorkoutScore",
]
