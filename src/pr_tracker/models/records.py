"""Movement catalog, personal record and workout score models."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class MovementCategory(str, Enum):
    """Category tag for catalog movements."""

    WEIGHTLIFTING = "Weightlifting"
    GYMNASTICS = "Gymnastics"
    CARDIO = "Cardio"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str | None) -> "MovementCategory":
        """Match a category case-insensitively, falling back to OTHER."""
        if not value:
            return cls.OTHER
        for category in cls:
            if category.value.lower() == value.strip().lower():
                return category
        return cls.OTHER


@dataclass
class Movement:
    """A movement in the shared catalog (not user scoped)."""

    name: str
    category: MovementCategory = MovementCategory.OTHER
    id: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Movement":
        return cls(
            id=data.get("id"),
            name=data["name"],
            category=MovementCategory.parse(data.get("category")),
        )


@dataclass
class PersonalRecord:
    """One logged attempt at a movement.

    The value is an opaque string ("100kg", "5:30"); nothing numeric is
    enforced at write time. The "latest" PR per movement is derived from
    the date-sorted list rather than stored.
    """

    user_id: str
    movement_id: int
    value: str
    date: str
    notes: str | None = None
    id: int | None = None
    created_at: datetime | None = None
    movement_name: str | None = None
    movement_category: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage and JSON responses."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "movement_id": self.movement_id,
            "value": self.value,
            "date": self.date,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "movement_name": self.movement_name,
            "movement_category": self.movement_category,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PersonalRecord":
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = _parse_timestamp(created_at)
        return cls(
            id=data.get("id"),
            user_id=data["user_id"],
            movement_id=data["movement_id"],
            value=data["value"],
            date=data["date"],
            notes=data.get("notes"),
            created_at=created_at,
            movement_name=data.get("movement_name"),
            movement_category=data.get("movement_category"),
        )

    def to_prompt_dict(self) -> dict:
        """Compact form embedded in the coaching assistant's instructions."""
        return {
            "movement": self.movement_name,
            "value": self.value,
            "date": self.date,
            "notes": self.notes,
        }


@dataclass
class WorkoutScore:
    """A score logged against a named benchmark workout."""

    user_id: str
    wod_name: str
    score: str
    date: str
    notes: str | None = None
    id: int | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "wod_name": self.wod_name,
            "score": self.score,
            "date": self.date,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutScore":
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = _parse_timestamp(created_at)
        return cls(
            id=data.get("id"),
            user_id=data["user_id"],
            wod_name=data["wod_name"],
            score=data["score"],
            date=data["date"],
            notes=data.get("notes"),
            created_at=created_at,
        )

    def to_prompt_dict(self) -> dict:
        return {
            "wod": self.wod_name,
            "score": self.score,
            "date": self.date,
            "notes": self.notes,
        }


def parse_record_date(value: str | None) -> date | None:
    """Parse an ISO record date, returning None when it is not one."""
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def format_display_date(value: str | None) -> str:
    """Human-readable date for record lists ("October 19, 2026")."""
    if not value:
        return "No date"
    parsed = parse_record_date(value)
    if parsed is None:
        return "Invalid Date"
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def _parse_timestamp(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


# Starter catalog seeded by `pr-tracker init`
STARTER_MOVEMENTS: list[Movement] = [
    Movement("Back Squat", MovementCategory.WEIGHTLIFTING),
    Movement("Front Squat", MovementCategory.WEIGHTLIFTING),
    Movement("Overhead Squat", MovementCategory.WEIGHTLIFTING),
    Movement("Deadlift", MovementCategory.WEIGHTLIFTING),
    Movement("Bench Press", MovementCategory.WEIGHTLIFTING),
    Movement("Strict Press", MovementCategory.WEIGHTLIFTING),
    Movement("Push Press", MovementCategory.WEIGHTLIFTING),
    Movement("Push Jerk", MovementCategory.WEIGHTLIFTING),
    Movement("Clean", MovementCategory.WEIGHTLIFTING),
    Movement("Clean and Jerk", MovementCategory.WEIGHTLIFTING),
    Movement("Snatch", MovementCategory.WEIGHTLIFTING),
    Movement("Pull-ups", MovementCategory.GYMNASTICS),
    Movement("Muscle-ups", MovementCategory.GYMNASTICS),
    Movement("Handstand Push-ups", MovementCategory.GYMNASTICS),
    Movement("Toes-to-bar", MovementCategory.GYMNASTICS),
    Movement("1 Mile Run", MovementCategory.CARDIO),
    Movement("2000m Row", MovementCategory.CARDIO),
    Movement("5k Run", MovementCategory.CARDIO),
]
