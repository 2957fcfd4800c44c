"""Per-user session state: the cached snapshot plus navigation."""

import asyncio
import logging
from datetime import date
from enum import Enum
from pathlib import Path

from ..db.repositories import (
    MovementRepository,
    PersonalRecordRepository,
    WorkoutScoreRepository,
)
from ..errors import RecordStoreError, ValidationError
from ..models.records import (
    Movement,
    MovementCategory,
    PersonalRecord,
    WorkoutScore,
    parse_record_date,
)
from ..models.user import User
from ..models.wods import find_wod

logger = logging.getLogger(__name__)


class View(str, Enum):
    """Top-level views of the application."""

    PRS = "prs"
    CALCULATOR = "calculator"
    ADD = "add"
    WODS = "wods"


class PRPage(str, Enum):
    LIST = "list"
    HISTORY = "history"


def _newest_first(records: list[PersonalRecord]) -> list[PersonalRecord]:
    """Sort by date descending; unparseable dates go last."""
    dated = [r for r in records if parse_record_date(r.date) is not None]
    undated = [r for r in records if parse_record_date(r.date) is None]
    dated.sort(key=lambda r: (parse_record_date(r.date), r.id or 0), reverse=True)
    return dated + undated


class SessionState:
    """Snapshot of one user's movements, records and scores.

    The snapshot is only ever replaced wholesale by refresh(), which runs
    after every mutation. There is no incremental patching.
    """

    def __init__(self, user: User, db_path: Path | None = None):
        self.user = user
        self.movement_repo = MovementRepository(db_path)
        self.record_repo = PersonalRecordRepository(user.id, db_path)
        self.score_repo = WorkoutScoreRepository(user.id, db_path)

        self.movements: list[Movement] = []
        self.records: list[PersonalRecord] = []
        self.scores: list[WorkoutScore] = []
        self.loaded = False
        self.error: str | None = None

        self.view = View.PRS
        self.pr_page = PRPage.LIST
        self.selected_movement_id: int | None = None
        self.search_term = ""

    # --- snapshot -------------------------------------------------------

    async def refresh(self) -> bool:
        """Re-fetch the whole snapshot.

        Returns:
            False if the fetch failed (the error banner is set instead)
        """
        self.error = None
        try:
            movements, records, scores = await asyncio.gather(
                self.movement_repo.list_all(),
                self.record_repo.list_all(),
                self.score_repo.list_all(),
            )
        except RecordStoreError as e:
            logger.error("Error fetching data for %s: %s", self.user.email, e)
            self.error = f"Could not fetch data: {e}"
            return False

        self.movements = movements
        self.records = records
        self.scores = scores
        self.loaded = True
        return True

    def latest_records(self, search: str | None = None) -> list[PersonalRecord]:
        """Most recent record per movement, sorted by movement name.

        Args:
            search: Case-insensitive movement-name filter (defaults to the
                current search term)
        """
        latest: dict[int, PersonalRecord] = {}
        for record in _newest_first(self.records):
            if record.movement_id not in latest:
                latest[record.movement_id] = record

        result = sorted(latest.values(), key=lambda r: (r.movement_name or "").lower())

        term = (self.search_term if search is None else search).strip().lower()
        if term:
            result = [r for r in result if term in (r.movement_name or "").lower()]
        return result

    def history(self, movement_id: int) -> list[PersonalRecord]:
        """All records for one movement, newest first."""
        return _newest_first([r for r in self.records if r.movement_id == movement_id])

    def scores_for(self, wod_name: str) -> list[WorkoutScore]:
        key = wod_name.lower()
        return [s for s in self.scores if s.wod_name.lower() == key]

    def get_movement(self, movement_id: int | None) -> Movement | None:
        for movement in self.movements:
            if movement.id == movement_id:
                return movement
        return None

    def find_movement(self, name: str) -> Movement | None:
        """Exact, case-insensitive name match against the cached catalog."""
        key = (name or "").lower()
        for movement in self.movements:
            if movement.name.lower() == key:
                return movement
        return None

    def categories(self) -> list[str]:
        """Category filter options for the add form ("All" first)."""
        seen: list[str] = []
        for movement in self.movements:
            if movement.category.value not in seen:
                seen.append(movement.category.value)
        return ["All"] + seen

    def movements_by_category(self, category: str = "All") -> dict[str, list[Movement]]:
        """Group the catalog by category, optionally keeping one category."""
        groups: dict[str, list[Movement]] = {}
        for movement in self.movements:
            key = movement.category.value
            if category != "All" and key != category:
                continue
            groups.setdefault(key, []).append(movement)
        return groups

    # --- mutations ------------------------------------------------------

    async def add_record(
        self,
        movement_id: int | None,
        value: str,
        date: str,
        notes: str | None = None,
    ) -> int:
        """Log a personal record, then refresh the snapshot.

        Raises:
            ValidationError: Missing movement, value or date, or a bad date
            RecordStoreError: The insert failed
        """
        value = (value or "").strip()
        if not movement_id or not value or not date:
            raise ValidationError("Please fill in all required fields.")
        date = _validate_date(date)

        record_id = await self.record_repo.create(
            movement_id=movement_id,
            value=value,
            date=date,
            notes=(notes or "").strip() or None,
        )
        await self.refresh()
        return record_id

    async def delete_record(self, record_id: int) -> bool:
        deleted = await self.record_repo.delete(record_id)
        await self.refresh()
        return deleted

    async def add_score(
        self,
        wod_name: str,
        score: str,
        date: str,
        notes: str | None = None,
    ) -> int:
        """Log a benchmark WOD score, then refresh the snapshot."""
        score = (score or "").strip()
        if not score or not date:
            raise ValidationError("Score and Date are required.")
        wod = find_wod(wod_name or "")
        if wod is None:
            raise ValidationError(f'"{wod_name}" is not a known benchmark WOD.')
        date = _validate_date(date)

        score_id = await self.score_repo.create(
            wod_name=wod.name,
            score=score,
            date=date,
            notes=(notes or "").strip() or None,
        )
        await self.refresh()
        return score_id

    async def delete_score(self, score_id: int) -> bool:
        deleted = await self.score_repo.delete(score_id)
        await self.refresh()
        return deleted

    async def add_movement(self, name: str, category: str | MovementCategory) -> int:
        """Add a movement to the shared catalog, then refresh."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Movement name is required.")
        if not isinstance(category, MovementCategory):
            category = MovementCategory.parse(category)

        movement_id = await self.movement_repo.create(name, category)
        await self.refresh()
        return movement_id

    # --- navigation -----------------------------------------------------

    def navigate(self, view: View) -> None:
        if view != View.PRS:
            self.search_term = ""
        self.view = view

    def select_movement(self, movement_id: int) -> None:
        self.view = View.PRS
        self.selected_movement_id = movement_id
        self.pr_page = PRPage.HISTORY

    def back_to_list(self) -> None:
        self.pr_page = PRPage.LIST

    def set_search(self, term: str | None) -> None:
        self.search_term = (term or "").strip()

    def dismiss_error(self) -> None:
        self.error = None


def _validate_date(value: str) -> str:
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError:
        raise ValidationError("Date must be in YYYY-MM-DD format.") from None
