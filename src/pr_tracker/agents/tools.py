"""Tool declarations the coaching assistant may propose.

The assistant never executes these itself. A proposal is shown to the user
and only runs after an explicit confirm (see confirmation.py).
"""

from datetime import date

from google.genai import types

from ..models.chat import ToolProposal

ADD_PERSONAL_RECORD = "addPersonalRecord"

ADD_PERSONAL_RECORD_DECLARATION = types.FunctionDeclaration(
    name=ADD_PERSONAL_RECORD,
    description="Adds a new personal record for a specific movement.",
    parameters=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "movementName": types.Schema(
                type=types.Type.STRING,
                description='The name of the movement, e.g., "Back Squat" or "Deadlift".',
            ),
            "value": types.Schema(
                type=types.Type.STRING,
                description='The result achieved, e.g., "150kg" or "5:21".',
            ),
            "date": types.Schema(
                type=types.Type.STRING,
                description=(
                    "The date the PR was achieved, in YYYY-MM-DD format. "
                    "Defaults to today if not provided."
                ),
            ),
            "notes": types.Schema(
                type=types.Type.STRING,
                description="Any additional notes about the record.",
            ),
        },
        required=["movementName", "value"],
    ),
)

# Tools the confirmation engine knows how to execute
SUPPORTED_TOOLS = {ADD_PERSONAL_RECORD}


def render_confirmation(proposal: ToolProposal) -> str:
    """Human-readable confirmation prompt for a proposal."""
    return (
        "I'm ready to add this PR:\n"
        f"- **Movement:** {proposal.arg('movementName')}\n"
        f"- **Value:** {proposal.arg('value')}\n"
        f"- **Date:** {proposal.arg('date') or 'Today'}\n"
        f"- **Notes:** {proposal.arg('notes') or 'None'}\n"
        "\n"
        "Shall I proceed?"
    )


def resolve_record_date(proposal: ToolProposal, today: date) -> str:
    """The record date argument, defaulting to today."""
    value = proposal.arg("date")
    if not value or value.lower() == "today":
        return today.isoformat()
    return value
