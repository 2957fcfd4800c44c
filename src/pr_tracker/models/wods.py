"""Benchmark WOD catalog."""

from dataclasses import dataclass, field
from enum import Enum


class WODType(str, Enum):
    """Scoring style of a benchmark workout."""

    FOR_TIME = "For Time"
    AMRAP = "AMRAP"
    OTHER = "Other"


@dataclass
class WOD:
    """A named benchmark workout."""

    name: str
    type: WODType
    description: list[str] = field(default_factory=list)
    notes: str | None = None

    @property
    def slug(self) -> str:
        return self.name.lower().replace(" ", "-")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type.value,
            "description": list(self.description),
            "notes": self.notes,
        }


BENCHMARK_WODS: list[WOD] = [
    WOD(
        name="Fran",
        type=WODType.FOR_TIME,
        description=["21-15-9 reps of:", "Thrusters (95/65 lb)", "Pull-ups"],
    ),
    WOD(
        name="Cindy",
        type=WODType.AMRAP,
        description=[
            "As Many Rounds As Possible in 20 minutes of:",
            "5 Pull-ups",
            "10 Push-ups",
            "15 Air Squats",
        ],
    ),
    WOD(
        name="Murph",
        type=WODType.FOR_TIME,
        description=[
            "1 mile Run",
            "100 Pull-ups",
            "200 Push-ups",
            "300 Air Squats",
            "1 mile Run",
        ],
        notes=(
            "Partition the pull-ups, push-ups, and squats as needed. "
            "If you've got a 20/14 lb weight vest or body armor, wear it."
        ),
    ),
    WOD(
        name="Grace",
        type=WODType.FOR_TIME,
        description=["30 Clean and Jerks (135/95 lb)"],
    ),
    WOD(
        name="Helen",
        type=WODType.FOR_TIME,
        description=[
            "3 Rounds of:",
            "400 meter Run",
            "21 Kettlebell Swings (53/35 lb)",
            "12 Pull-ups",
        ],
    ),
    WOD(
        name="Angie",
        type=WODType.FOR_TIME,
        description=["100 Pull-ups", "100 Push-ups", "100 Sit-ups", "100 Air Squats"],
        notes="Complete all reps of each exercise before moving to the next.",
    ),
    WOD(
        name="The Filthy 50",
        type=WODType.FOR_TIME,
        description=[
            "50 Box jumps (24/20 inch box)",
            "50 Jumping pull-ups",
            "50 Kettlebell swings (35/26 lb)",
            "50 Walking lunge steps",
            "50 Knees-to-elbows",
            "50 Push press (45/35 lb)",
            "50 Back extensions",
            "50 Wall-ball shots (20/14 lb ball)",
            "50 Burpees",
            "50 Double-unders",
        ],
    ),
]


def find_wod(name: str) -> WOD | None:
    """Look up a benchmark by name or slug, case-insensitively."""
    key = name.strip().lower()
    for wod in BENCHMARK_WODS:
        if wod.name.lower() == key or wod.slug == key:
            return wod
    return None
