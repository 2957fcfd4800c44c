"""Database layer for pr-tracker."""

from .engine import connect, get_db_path, init_db, seed_movements
from .repositories import (
    MovementRepository,
    PersonalRecordRepository,
    UserRepository,
    WorkoutScoreRepository,
)

__all__ = [
    "connect",
    "get_db_path",
    "init_db",
    "MovementRepository",
    "PersonalRecordRepository",
    "seed_movements",
    "UserRepository",
    "WorkoutScoreRepository",
]
