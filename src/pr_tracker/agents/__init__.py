"""AI coaching assistant: agent boundary and tool-call confirmation."""

from .confirmation import ConfirmationEngine, ToolOutcome, transition
from .gemini import AgentChunk, ConversationalAgent, GeminiAgent, gemini_agent_factory

__all__ = [
    "AgentChunk",
    "ConfirmationEngine",
    "ConversationalAgent",
    "GeminiAgent",
    "ToolOutcome",
    "gemini_agent_factory",
    "transition",
]
