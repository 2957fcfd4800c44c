"""Tool-call confirmation engine for the coaching assistant.

The assistant may propose writing a personal record. Nothing reaches the
record store until the user has seen the proposal and explicitly confirmed
it. Each chat turn moves through:

    Idle -> Streaming -> (AwaitingConfirmation | Idle)
    AwaitingConfirmation -> Executing -> Narrating -> Idle     (confirm)
    AwaitingConfirmation -> Idle                               (cancel)
    Executing -> Idle                                          (movement not found)

`transition` is the pure state function. `ConfirmationEngine` drives it,
talking to the agent and the session state. The only way to obtain an
`Executing` state is a `Confirmed` event from `AwaitingConfirmation`, and
the record store is only written from `_execute`, which requires one.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable

from ..errors import InvalidTransition, PRTrackerError
from ..models.chat import ChatMessage, ChatRole, PendingToolConfirmation, ToolProposal
from ..services.session_state import SessionState
from .gemini import AgentFactory, ConversationalAgent
from .prompts import GREETING, build_system_instruction
from .tools import SUPPORTED_TOOLS, render_confirmation, resolve_record_date

logger = logging.getLogger(__name__)

# Callback for streaming UIs: (event_type, message, data)
EngineCallback = Callable[[str, str, dict | None], Awaitable[None]]

INIT_FAILED = "Sorry, the AI assistant could not be initialized."
STREAM_FAILED = "Sorry, I encountered an error. Please try again."
CANCELLED = "Okay, I've cancelled the request."
SAVING = "Roger that! Saving your PR..."
NOT_FOUND = (
    "I couldn't find the movement \"{name}\". "
    "You can add new movements from the 'Add PR' tab."
)
NARRATION_FALLBACK_SAVED = (
    "I've saved your PR, but had a little trouble getting a final response from the AI."
)
NARRATION_FALLBACK_FAILED = (
    "I couldn't save your PR, and had a little trouble getting a final response from the AI."
)


@dataclass(frozen=True)
class ToolOutcome:
    """Result of executing a confirmed proposal."""

    success: bool
    message: str

    def to_response(self) -> dict[str, Any]:
        """Function-response payload sent back to the agent."""
        if self.success:
            return {"success": True, "message": self.message}
        return {"success": False, "error": self.message}


# --- states -------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Streaming:
    # Proposal from an earlier turn that a new message does not clear
    pending: ToolProposal | None = None


@dataclass(frozen=True)
class AwaitingConfirmation:
    proposal: ToolProposal


@dataclass(frozen=True)
class Executing:
    proposal: ToolProposal


@dataclass(frozen=True)
class Narrating:
    proposal: ToolProposal
    outcome: ToolOutcome


EngineState = Idle | Streaming | AwaitingConfirmation | Executing | Narrating


# --- events -------------------------------------------------------------


@dataclass(frozen=True)
class MessageSent:
    pass


@dataclass(frozen=True)
class StreamCompleted:
    proposal: ToolProposal | None = None


@dataclass(frozen=True)
class StreamFailed:
    error: str = ""


@dataclass(frozen=True)
class Confirmed:
    pass


@dataclass(frozen=True)
class Cancelled:
    pass


@dataclass(frozen=True)
class ResolutionFailed:
    movement_name: str


@dataclass(frozen=True)
class MutationFinished:
    outcome: ToolOutcome


@dataclass(frozen=True)
class NarrationFinished:
    pass


EngineEvent = (
    MessageSent
    | StreamCompleted
    | StreamFailed
    | Confirmed
    | Cancelled
    | ResolutionFailed
    | MutationFinished
    | NarrationFinished
)


def transition(state: EngineState, event: EngineEvent) -> EngineState:
    """Compute the next state.

    Raises:
        InvalidTransition: If the event is not legal in this state
    """
    if isinstance(event, MessageSent):
        if isinstance(state, Idle):
            return Streaming()
        if isinstance(state, AwaitingConfirmation):
            return Streaming(pending=state.proposal)

    elif isinstance(event, StreamCompleted):
        if isinstance(state, Streaming):
            # A newer proposal replaces the pending one; proposals are not queued
            proposal = event.proposal or state.pending
            return AwaitingConfirmation(proposal) if proposal else Idle()

    elif isinstance(event, StreamFailed):
        if isinstance(state, Streaming):
            return AwaitingConfirmation(state.pending) if state.pending else Idle()

    elif isinstance(event, Confirmed):
        if isinstance(state, AwaitingConfirmation):
            return Executing(state.proposal)

    elif isinstance(event, Cancelled):
        if isinstance(state, AwaitingConfirmation):
            return Idle()

    elif isinstance(event, ResolutionFailed):
        if isinstance(state, Executing):
            return Idle()

    elif isinstance(event, MutationFinished):
        if isinstance(state, Executing):
            return Narrating(state.proposal, event.outcome)

    elif isinstance(event, NarrationFinished):
        if isinstance(state, Narrating):
            return Idle()

    raise InvalidTransition(state, event)


class TurnAccumulator:
    """Collects one in-flight assistant turn.

    Text is append-only, so every partial text is a prefix of the final
    text. The last proposed function call wins. Once finalized the turn
    accepts nothing more.
    """

    def __init__(self, message: ChatMessage):
        self.message = message
        self.text = ""
        self.proposal: ToolProposal | None = None
        self.finalized = False

    def append(self, text: str) -> None:
        if self.finalized:
            raise RuntimeError("Turn already finalized")
        self.text += text
        self.message.text = self.text

    def propose(self, proposal: ToolProposal) -> None:
        if self.finalized:
            raise RuntimeError("Turn already finalized")
        self.proposal = proposal

    def finalize(self) -> ToolProposal | None:
        self.finalized = True
        return self.proposal


class ConfirmationEngine:
    """Mediates between the assistant's proposals and the record store."""

    def __init__(
        self,
        session: SessionState,
        agent: ConversationalAgent | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.session = session
        self.agent = agent
        self.today = today
        self.state: EngineState = Idle()
        self.messages: list[ChatMessage] = []
        self._initialized = agent is not None
        if agent is not None:
            self.messages.append(ChatMessage(ChatRole.ASSISTANT, GREETING))

    @property
    def is_available(self) -> bool:
        return self.agent is not None

    @property
    def is_busy(self) -> bool:
        return isinstance(self.state, (Streaming, Executing, Narrating))

    @property
    def pending(self) -> PendingToolConfirmation | None:
        for message in self.messages:
            if message.pending is not None:
                return message.pending
        return None

    async def initialize(self, agent_factory: AgentFactory | None) -> bool:
        """Start the chat session once, with a snapshot of the user's data.

        A missing factory or a failing one disables the assistant without
        affecting the rest of the application.

        Returns:
            Whether the assistant is available
        """
        if self._initialized:
            return self.is_available
        self._initialized = True

        if agent_factory is None:
            return False

        if not self.session.loaded:
            await self.session.refresh()

        try:
            instruction = build_system_instruction(self.session.records, self.session.scores)
            agent = agent_factory(instruction)
        except Exception as e:
            logger.error("Failed to initialize AI chat: %s", e)
            self.messages = [ChatMessage(ChatRole.ASSISTANT, INIT_FAILED)]
            return False

        if agent is None:
            return False

        self.agent = agent
        self.messages = [ChatMessage(ChatRole.ASSISTANT, GREETING)]
        return True

    async def send_message(self, text: str, on_event: EngineCallback | None = None) -> None:
        """Send a user message and stream the assistant's reply.

        Streaming failures are reported in the conversation, never raised.

        Raises:
            InvalidTransition: If a turn or an execution is already in flight
        """

        async def notify(event_type: str, message: str, data: dict | None = None):
            if on_event:
                await on_event(event_type, message, data)

        text = (text or "").strip()
        if not text or self.agent is None:
            return

        self.state = transition(self.state, MessageSent())
        self.messages.append(ChatMessage(ChatRole.USER, text))
        turn = TurnAccumulator(self._start_reply())

        try:
            async for chunk in self.agent.send_message_stream(text):
                if chunk.text:
                    turn.append(chunk.text)
                    await notify("chunk", chunk.text)
                if chunk.function_calls:
                    turn.propose(chunk.function_calls[0])
        except Exception as e:
            logger.error("Error sending message to AI: %s", e)
            turn.finalize()
            self._drop_if_empty(turn.message)
            self._say(STREAM_FAILED)
            self.state = transition(self.state, StreamFailed(str(e)))
            await notify("error", STREAM_FAILED)
            await notify("done", "", self._status())
            return

        proposal = turn.finalize()
        if proposal is not None and proposal.name not in SUPPORTED_TOOLS:
            logger.warning("Ignoring proposal for unknown tool %s", proposal.name)
            proposal = None

        self.state = transition(self.state, StreamCompleted(proposal))

        if proposal is not None:
            pending = self._attach_pending(turn.message, proposal)
            await notify("confirmation", pending.prompt, {"name": proposal.name, "args": dict(proposal.args)})
        else:
            self._drop_if_empty(turn.message)

        await notify("done", "", self._status())

    async def resolve(self, confirmed: bool, on_event: EngineCallback | None = None) -> None:
        """Confirm or cancel the pending proposal.

        Raises:
            InvalidTransition: If nothing is awaiting confirmation
        """

        async def notify(event_type: str, message: str, data: dict | None = None):
            if on_event:
                await on_event(event_type, message, data)

        if not confirmed:
            self.state = transition(self.state, Cancelled())
            self._clear_pending()
            self._say(CANCELLED)
            await notify("message", CANCELLED)
            await notify("done", "", self._status())
            return

        executing = transition(self.state, Confirmed())
        self.state = executing
        self._clear_pending()

        try:
            outcome = await self._execute(executing, notify)
            if outcome is not None:
                self.state = transition(self.state, MutationFinished(outcome))
                await self._narrate(self.state, notify)
        except Exception:
            # Never leave the engine stuck in Executing/Narrating
            self.state = Idle()
            raise

        await notify("done", "", self._status())

    def to_dict(self) -> dict:
        return {
            **self._status(),
            "messages": [m.to_dict() for m in self.messages],
        }

    # --- steps ----------------------------------------------------------

    async def _execute(self, state: Executing, notify) -> ToolOutcome | None:
        """Write the confirmed record. Returns None when the movement is unknown."""
        proposal = state.proposal
        movement_name = proposal.arg("movementName")
        movement = self.session.find_movement(movement_name)

        if movement is None:
            message = NOT_FOUND.format(name=movement_name)
            self._say(message)
            self.state = transition(self.state, ResolutionFailed(movement_name))
            await notify("message", message)
            return None

        self._say(SAVING)
        await notify("message", SAVING)

        try:
            await self.session.add_record(
                movement_id=movement.id,
                value=proposal.arg("value"),
                date=resolve_record_date(proposal, self.today()),
                notes=proposal.arg("notes") or None,
            )
        except PRTrackerError as e:
            logger.error("Saving proposed PR failed: %s", e)
            return ToolOutcome(success=False, message=str(e))

        return ToolOutcome(success=True, message="The PR was successfully saved.")

    async def _narrate(self, state: Narrating, notify) -> None:
        """Report the outcome to the agent and stream its acknowledgement."""
        turn = TurnAccumulator(self._start_reply())
        try:
            async for chunk in self.agent.send_function_response(
                state.proposal.name, state.outcome.to_response()
            ):
                if chunk.text:
                    turn.append(chunk.text)
                    await notify("chunk", chunk.text)
        except Exception as e:
            logger.error("Error sending tool response to AI: %s", e)
            turn.finalize()
            self._drop_if_empty(turn.message)
            fallback = (
                NARRATION_FALLBACK_SAVED if state.outcome.success else NARRATION_FALLBACK_FAILED
            )
            self._say(fallback)
            await notify("message", fallback)
        else:
            turn.finalize()
            self._drop_if_empty(turn.message)

        self.state = transition(self.state, NarrationFinished())

    # --- message list ---------------------------------------------------

    def _start_reply(self) -> ChatMessage:
        message = ChatMessage(ChatRole.ASSISTANT, "")
        self.messages.append(message)
        return message

    def _say(self, text: str) -> ChatMessage:
        message = ChatMessage(ChatRole.ASSISTANT, text)
        self.messages.append(message)
        return message

    def _drop_if_empty(self, message: ChatMessage) -> None:
        if not message.text and message.pending is None:
            self.messages = [m for m in self.messages if m is not message]

    def _attach_pending(self, message: ChatMessage, proposal: ToolProposal) -> PendingToolConfirmation:
        """Attach a proposal to a message, replacing any earlier one."""
        message.pending = PendingToolConfirmation(proposal=proposal, prompt=render_confirmation(proposal))
        for other in self.messages:
            if other is not message:
                other.pending = None
        self.messages = [m for m in self.messages if m.text or m.pending]
        return message.pending

    def _clear_pending(self) -> None:
        for message in self.messages:
            message.pending = None
        # A resolved proposal with no reply text leaves nothing to show
        self.messages = [m for m in self.messages if m.text or m.pending]

    def _status(self) -> dict:
        return {
            "state": type(self.state).__name__,
            "available": self.is_available,
            "busy": self.is_busy,
        }
