"""Movement catalog routes."""

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from ...errors import RecordStoreError, ValidationError
from ..deps import require_session
from ..sessions import UserSession
from .records import _render_add_form

router = APIRouter(prefix="/movements", tags=["movements"])


@router.get("")
async def list_movements(session: UserSession = Depends(require_session)):
    """Movement catalog as JSON."""
    return {"movements": [m.to_dict() for m in session.state.movements]}


@router.post("")
async def add_movement(
    request: Request,
    name: str = Form(""),
    category: str = Form("Other"),
    session: UserSession = Depends(require_session),
):
    """Add a movement to the shared catalog and preselect it in the add form."""
    state = session.state
    try:
        movement_id = await state.add_movement(name, category)
    except ValidationError as e:
        return _render_add_form(request, session, form_error=str(e))
    except RecordStoreError as e:
        state.error = f"Error adding movement: {e}"
        return _render_add_form(request, session)

    return RedirectResponse(url=f"/prs/new?movement_id={movement_id}", status_code=302)
