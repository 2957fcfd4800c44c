"""Conversational agent boundary backed by the Gemini API (google-genai)."""

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Protocol, runtime_checkable

from google import genai
from google.genai import types

from ..config import Settings
from ..models.chat import ToolProposal
from .tools import ADD_PERSONAL_RECORD_DECLARATION

logger = logging.getLogger(__name__)


@dataclass
class AgentChunk:
    """One increment of a streamed reply."""

    text: str = ""
    function_calls: list[ToolProposal] = field(default_factory=list)


@runtime_checkable
class ConversationalAgent(Protocol):
    """A chat session that streams replies and may propose tool calls."""

    def send_message_stream(self, message: str) -> AsyncIterator[AgentChunk]:
        """Send a user message and stream the reply."""
        ...

    def send_function_response(
        self, name: str, response: dict[str, Any]
    ) -> AsyncIterator[AgentChunk]:
        """Report a tool result and stream the acknowledgement."""
        ...


# Builds an agent from a system instruction; None means the feature is off
AgentFactory = Callable[[str], ConversationalAgent | None]


class GeminiAgent:
    """One Gemini chat session with the addPersonalRecord tool declared."""

    def __init__(
        self,
        api_key: str,
        system_instruction: str,
        model: str,
        client: genai.Client | None = None,
    ):
        self.client = client or genai.Client(api_key=api_key)
        self.chat = self.client.aio.chats.create(
            model=model,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                tools=[types.Tool(function_declarations=[ADD_PERSONAL_RECORD_DECLARATION])],
                automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
            ),
        )

    async def send_message_stream(self, message: str) -> AsyncIterator[AgentChunk]:
        stream = await self.chat.send_message_stream(message)
        async for response in stream:
            yield self._to_chunk(response)

    async def send_function_response(
        self, name: str, response: dict[str, Any]
    ) -> AsyncIterator[AgentChunk]:
        part = types.Part.from_function_response(name=name, response=response)
        stream = await self.chat.send_message_stream(part)
        async for reply in stream:
            yield self._to_chunk(reply)

    @staticmethod
    def _to_chunk(response: types.GenerateContentResponse) -> AgentChunk:
        """Split a streamed response into visible text and function calls."""
        chunk = AgentChunk()
        if not response.candidates:
            return chunk

        content = response.candidates[0].content
        for part in (content.parts or []) if content else []:
            if part.text and not part.thought:
                chunk.text += part.text
            if part.function_call:
                chunk.function_calls.append(
                    ToolProposal(
                        name=part.function_call.name or "",
                        args=dict(part.function_call.args or {}),
                    )
                )
        return chunk


def gemini_agent_factory(settings: Settings) -> AgentFactory | None:
    """Agent factory for the configured credential.

    Returns None (feature disabled, not fatal) when no API key is set.
    """
    if not settings.gemini_api_key:
        logger.warning("Gemini API key not found. The AI assistant will be disabled.")
        return None

    def factory(system_instruction: str) -> GeminiAgent:
        return GeminiAgent(
            api_key=settings.gemini_api_key,
            system_instruction=system_instruction,
            model=settings.model,
        )

    return factory
