"""AI coaching assistant routes."""

import asyncio
import json
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse

from ...errors import InvalidTransition
from ..deps import render, require_session
from ..sessions import UserSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

BUSY = "The assistant is still working on your last request."
NOTHING_PENDING = "There is nothing waiting for confirmation."

# Strong references to in-flight turns
_turn_tasks: set[asyncio.Task] = set()


@router.get("", response_class=HTMLResponse)
async def chat_page(request: Request, session: UserSession = Depends(require_session)):
    """Chat panel."""
    return render(request, "chat.html", session, chat=session.engine)


@router.get("/state")
async def chat_state(session: UserSession = Depends(require_session)):
    """Conversation and engine state as JSON."""
    return session.engine.to_dict()


@router.post("/send")
async def send_message(
    message: str = Form(""),
    session: UserSession = Depends(require_session),
):
    """Send a message and stream the assistant's reply as Server-Sent Events."""
    engine = session.engine
    queue: asyncio.Queue = asyncio.Queue()

    async def on_event(event_type: str, text: str, data: dict | None = None):
        """Callback for engine progress updates."""
        await queue.put((event_type, text, data))

    async def run_turn():
        try:
            await engine.send_message(message, on_event=on_event)
        except InvalidTransition:
            await on_event("error", BUSY, None)
        except Exception as e:
            logger.error("Chat turn failed: %s", e)
            await on_event("error", str(e), None)
        finally:
            await queue.put(("closed", "", None))

    async def event_stream() -> AsyncGenerator[str, None]:
        # Runs in the background so the turn completes even if the client goes away
        task = asyncio.create_task(run_turn())
        _turn_tasks.add(task)
        task.add_done_callback(_turn_tasks.discard)

        while True:
            event_type, text, data = await queue.get()

            if event_type == "closed":
                break
            elif event_type == "chunk":
                yield f"data: {json.dumps({'type': 'chunk', 'text': text})}\n\n"
            elif event_type == "confirmation":
                yield f"data: {json.dumps({'type': 'confirmation', 'prompt': text, 'tool_call': data})}\n\n"
            elif event_type == "done":
                yield f"data: {json.dumps({'type': 'done', **(data or {})})}\n\n"
            else:
                yield f"data: {json.dumps({'type': event_type, 'message': text})}\n\n"

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )


async def _resolve(session: UserSession, confirmed: bool) -> JSONResponse:
    try:
        await session.engine.resolve(confirmed)
    except InvalidTransition:
        message = BUSY if session.engine.is_busy else NOTHING_PENDING
        return JSONResponse({"error": message, **session.engine.to_dict()}, status_code=409)
    return JSONResponse(session.engine.to_dict())


@router.post("/confirm")
async def confirm(session: UserSession = Depends(require_session)):
    """Execute the pending proposal and return the updated conversation."""
    return await _resolve(session, confirmed=True)


@router.post("/cancel")
async def cancel(session: UserSession = Depends(require_session)):
    """Drop the pending proposal and return the updated conversation."""
    return await _resolve(session, confirmed=False)
