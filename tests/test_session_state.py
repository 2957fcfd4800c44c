"""Tests for per-user session state."""

import pytest

from pr_tracker.errors import ValidationError
from pr_tracker.models.records import MovementCategory
from pr_tracker.services.session_state import PRPage, SessionState, View


def movement_named(state: SessionState, name: str):
    movement = state.find_movement(name)
    assert movement is not None, name
    return movement


class TestSnapshot:
    """Tests for the cached snapshot and its derived views."""

    @pytest.mark.asyncio
    async def test_refresh_loads_catalog(self, session_state):
        assert session_state.loaded is True
        assert session_state.error is None
        assert len(session_state.movements) > 0
        assert session_state.records == []

    @pytest.mark.asyncio
    async def test_refresh_failure_sets_banner(self, temp_db_path, user):
        """Test a failed fetch sets the error instead of raising."""
        state = SessionState(user, temp_db_path.parent / "missing.db")

        assert await state.refresh() is False
        assert state.error.startswith("Could not fetch data:")
        assert state.loaded is False

    @pytest.mark.asyncio
    async def test_latest_record_per_movement(self, session_state):
        """Test the latest PR is derived from the most recent date."""
        squat = movement_named(session_state, "Back Squat")
        deadlift = movement_named(session_state, "Deadlift")
        await session_state.add_record(squat.id, "140kg", "2026-09-01")
        await session_state.add_record(squat.id, "150kg", "2026-10-19")
        await session_state.add_record(deadlift.id, "200kg", "2026-05-05")

        latest = session_state.latest_records()

        assert [(r.movement_name, r.value) for r in latest] == [
            ("Back Squat", "150kg"),
            ("Deadlift", "200kg"),
        ]

    @pytest.mark.asyncio
    async def test_search_filters_latest(self, session_state):
        squat = movement_named(session_state, "Back Squat")
        deadlift = movement_named(session_state, "Deadlift")
        await session_state.add_record(squat.id, "150kg", "2026-10-19")
        await session_state.add_record(deadlift.id, "200kg", "2026-10-19")

        session_state.set_search("  SQUAT ")

        assert [r.movement_name for r in session_state.latest_records()] == ["Back Squat"]
        assert len(session_state.latest_records(search="")) == 2

    @pytest.mark.asyncio
    async def test_history_newest_first(self, session_state):
        squat = movement_named(session_state, "Back Squat")
        await session_state.add_record(squat.id, "140kg", "2026-09-01")
        await session_state.add_record(squat.id, "150kg", "2026-10-19")
        await session_state.add_record(squat.id, "145kg", "2026-09-20")

        assert [r.value for r in session_state.history(squat.id)] == ["150kg", "145kg", "140kg"]

    @pytest.mark.asyncio
    async def test_find_movement_is_exact_and_case_insensitive(self, session_state):
        """Test catalog lookup has no fuzzy matching."""
        assert session_state.find_movement("back squat").name == "Back Squat"
        assert session_state.find_movement("Back Squats") is None
        assert session_state.find_movement("") is None

    @pytest.mark.asyncio
    async def test_categories_and_grouping(self, session_state):
        categories = session_state.categories()

        assert categories[0] == "All"
        assert "Weightlifting" in categories
        groups = session_state.movements_by_category("Gymnastics")
        assert list(groups) == ["Gymnastics"]


class TestMutations:
    """Tests for validated writes followed by a full refresh."""

    @pytest.mark.asyncio
    async def test_add_record_requires_fields(self, session_state):
        squat = movement_named(session_state, "Back Squat")

        with pytest.raises(ValidationError, match="Please fill in all required fields."):
            await session_state.add_record(squat.id, "  ", "2026-10-19")
        with pytest.raises(ValidationError, match="Please fill in all required fields."):
            await session_state.add_record(None, "150kg", "2026-10-19")

    @pytest.mark.asyncio
    async def test_add_record_rejects_bad_date(self, session_state):
        squat = movement_named(session_state, "Back Squat")

        with pytest.raises(ValidationError, match="YYYY-MM-DD"):
            await session_state.add_record(squat.id, "150kg", "19/10/2026")

    @pytest.mark.asyncio
    async def test_delete_record_refreshes(self, session_state):
        squat = movement_named(session_state, "Back Squat")
        record_id = await session_state.add_record(squat.id, "150kg", "2026-10-19")
        assert len(session_state.records) == 1

        assert await session_state.delete_record(record_id) is True
        assert session_state.records == []

    @pytest.mark.asyncio
    async def test_add_score_uses_canonical_name(self, session_state):
        """Test scores are stored under the benchmark's canonical name."""
        await session_state.add_score("fran", "3:45", "2026-10-01", "Rx")

        assert [s.wod_name for s in session_state.scores] == ["Fran"]
        assert len(session_state.scores_for("FRAN")) == 1

    @pytest.mark.asyncio
    async def test_add_score_validation(self, session_state):
        with pytest.raises(ValidationError, match="Score and Date are required."):
            await session_state.add_score("Fran", "", "2026-10-01")
        with pytest.raises(ValidationError, match="not a known benchmark WOD"):
            await session_state.add_score("Nancy", "12:00", "2026-10-01")

    @pytest.mark.asyncio
    async def test_add_movement(self, session_state):
        movement_id = await session_state.add_movement("Zercher Squat", "weightlifting")

        movement = session_state.get_movement(movement_id)
        assert movement.name == "Zercher Squat"
        assert movement.category == MovementCategory.WEIGHTLIFTING

        with pytest.raises(ValidationError, match="Movement name is required."):
            await session_state.add_movement("  ", "Other")


class TestNavigation:
    """Tests for view navigation."""

    @pytest.mark.asyncio
    async def test_leaving_prs_clears_search(self, session_state):
        session_state.set_search("squat")
        session_state.navigate(View.CALCULATOR)

        assert session_state.view == View.CALCULATOR
        assert session_state.search_term == ""

    @pytest.mark.asyncio
    async def test_select_movement_and_back(self, session_state):
        session_state.navigate(View.WODS)
        session_state.select_movement(3)

        assert session_state.view == View.PRS
        assert session_state.pr_page == PRPage.HISTORY
        assert session_state.selected_movement_id == 3

        session_state.back_to_list()
        assert session_state.pr_page == PRPage.LIST

    @pytest.mark.asyncio
    async def test_dismiss_error(self, session_state):
        session_state.error = "Could not fetch data: boom"
        session_state.dismiss_error()
        assert session_state.error is None
