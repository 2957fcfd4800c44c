"""Tests for the assistant boundary, tool helpers and message formatting."""

from datetime import date
from pathlib import Path

import pytest
from google.genai import types

from pr_tracker.agents.gemini import GeminiAgent, gemini_agent_factory
from pr_tracker.agents.prompts import build_system_instruction
from pr_tracker.agents.tools import (
    ADD_PERSONAL_RECORD,
    ADD_PERSONAL_RECORD_DECLARATION,
    render_confirmation,
    resolve_record_date,
)
from pr_tracker.config import Settings
from pr_tracker.errors import ConfigurationError
from pr_tracker.models.chat import ToolProposal
from pr_tracker.models.records import PersonalRecord, WorkoutScore
from pr_tracker.web.formatting import format_message


def response(*parts: types.Part) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=list(parts)))]
    )


class TestTools:
    """Tests for the addPersonalRecord helpers."""

    def test_declaration_requires_movement_and_value(self):
        assert ADD_PERSONAL_RECORD_DECLARATION.name == ADD_PERSONAL_RECORD
        assert ADD_PERSONAL_RECORD_DECLARATION.parameters.required == ["movementName", "value"]

    def test_render_confirmation_defaults(self):
        """Test missing date and notes render as Today and None."""
        prompt = render_confirmation(
            ToolProposal(ADD_PERSONAL_RECORD, {"movementName": "Deadlift", "value": "200kg"})
        )

        assert prompt.startswith("I'm ready to add this PR:")
        assert "- **Movement:** Deadlift" in prompt
        assert "- **Value:** 200kg" in prompt
        assert "- **Date:** Today" in prompt
        assert "- **Notes:** None" in prompt
        assert prompt.endswith("Shall I proceed?")

    def test_render_confirmation_with_all_fields(self):
        prompt = render_confirmation(
            ToolProposal(
                ADD_PERSONAL_RECORD,
                {"movementName": "Fran", "value": "3:45", "date": "2026-10-01", "notes": "Rx"},
            )
        )

        assert "- **Date:** 2026-10-01" in prompt
        assert "- **Notes:** Rx" in prompt

    @pytest.mark.parametrize("given", [None, "", "today", "Today"])
    def test_resolve_record_date_defaults_to_today(self, given):
        args = {"movementName": "Deadlift", "value": "200kg"}
        if given is not None:
            args["date"] = given

        resolved = resolve_record_date(ToolProposal(ADD_PERSONAL_RECORD, args), date(2026, 10, 19))

        assert resolved == "2026-10-19"

    def test_resolve_record_date_keeps_explicit_date(self):
        proposal = ToolProposal(ADD_PERSONAL_RECORD, {"date": "2026-01-02"})
        assert resolve_record_date(proposal, date(2026, 10, 19)) == "2026-01-02"


class TestPrompts:
    """Tests for the system instruction."""

    def test_instruction_embeds_snapshot(self):
        records = [
            PersonalRecord(
                user_id="u1",
                movement_id=1,
                value="150kg",
                date="2026-10-19",
                movement_name="Back Squat",
            )
        ]
        scores = [WorkoutScore(user_id="u1", wod_name="Fran", score="3:45", date="2026-10-01")]

        instruction = build_system_instruction(records, scores)

        assert "CrossFit coaching assistant" in instruction
        assert "addPersonalRecord" in instruction
        assert '"movement": "Back Squat"' in instruction
        assert '"wod": "Fran"' in instruction

    def test_instruction_with_no_data(self):
        instruction = build_system_instruction([], [])
        assert "User's PR Data:\n[]" in instruction


class TestGeminiAgent:
    """Tests for converting streamed Gemini responses."""

    def test_text_and_function_call(self):
        chunk = GeminiAgent._to_chunk(
            response(
                types.Part(text="Sure! "),
                types.Part(
                    function_call=types.FunctionCall(
                        name="addPersonalRecord",
                        args={"movementName": "Back Squat", "value": "150kg"},
                    )
                ),
            )
        )

        assert chunk.text == "Sure! "
        assert chunk.function_calls == [
            ToolProposal("addPersonalRecord", {"movementName": "Back Squat", "value": "150kg"})
        ]

    def test_thought_parts_are_hidden(self):
        chunk = GeminiAgent._to_chunk(
            response(types.Part(text="planning...", thought=True), types.Part(text="Hello"))
        )
        assert chunk.text == "Hello"

    def test_empty_response(self):
        chunk = GeminiAgent._to_chunk(types.GenerateContentResponse(candidates=[]))
        assert chunk.text == ""
        assert chunk.function_calls == []

    def test_factory_disabled_without_key(self):
        """Test a missing credential disables the assistant instead of failing."""
        assert gemini_agent_factory(Settings(gemini_api_key=None)) is None

    def test_factory_with_key(self):
        assert callable(gemini_agent_factory(Settings(gemini_api_key="test-key")))


class TestSettings:
    """Tests for environment configuration."""

    def test_from_env(self, tmp_path):
        settings = Settings.from_env(
            {
                "PR_TRACKER_DATA_DIR": str(tmp_path),
                "GEMINI_API_KEY": "abc",
                "PR_TRACKER_LOG_LEVEL": "debug",
            }
        )

        assert settings.db_path == tmp_path / "pr_tracker.db"
        assert settings.ai_enabled is True
        assert settings.log_level == "DEBUG"

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.ai_enabled is False
        assert settings.db_name == "pr_tracker.db"

    def test_data_dir_must_be_directory(self, tmp_path):
        file_path = tmp_path / "not-a-dir"
        file_path.write_text("x")

        with pytest.raises(ConfigurationError):
            Settings.from_env({"PR_TRACKER_DATA_DIR": str(file_path)})

    def test_db_name_must_be_file_name(self, tmp_path):
        with pytest.raises(ConfigurationError):
            Settings.from_env({"PR_TRACKER_DATA_DIR": str(tmp_path), "PR_TRACKER_DB_NAME": "../x.db"})

    def test_data_dir_is_path(self, tmp_path):
        assert isinstance(Settings.from_env({"PR_TRACKER_DATA_DIR": str(tmp_path)}).data_dir, Path)


class TestFormatMessage:
    """Tests for rendering assistant markdown."""

    def test_bold_and_italic(self):
        html = format_message("A **big** and *clean* lift")
        assert html == "<p>A <strong>big</strong> and <em>clean</em> lift</p>"

    def test_bullets_and_paragraphs(self):
        html = format_message("I'm ready to add this PR:\n- **Value:** 150kg\n- **Date:** Today\n\nShall I proceed?")

        assert "<ul><li><strong>Value:</strong> 150kg</li><li><strong>Date:</strong> Today</li></ul>" in html
        assert html.endswith("<p>Shall I proceed?</p>")

    def test_html_is_escaped(self):
        """Test message text cannot inject markup."""
        html = format_message("<script>alert(1)</script>")
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_empty(self):
        assert format_message(None) == ""
