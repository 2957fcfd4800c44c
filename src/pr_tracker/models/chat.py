"""Transient chat models for the coaching assistant."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ToolProposal:
    """A structured action proposed by the assistant (name + arguments)."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)

    def arg(self, key: str) -> str:
        """Get a string argument, empty when missing."""
        value = self.args.get(key)
        if value is None:
            return ""
        return str(value).strip()


@dataclass
class PendingToolConfirmation:
    """A proposal awaiting the user's explicit confirm or cancel."""

    proposal: ToolProposal
    prompt: str


@dataclass
class ChatMessage:
    """One message in the conversation. Never persisted."""

    role: ChatRole
    text: str = ""
    pending: PendingToolConfirmation | None = None

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "text": self.text,
            "pending": (
                {
                    "name": self.pending.proposal.name,
                    "args": dict(self.pending.proposal.args),
                    "prompt": self.pending.prompt,
                }
                if self.pending
                else None
            ),
        }
