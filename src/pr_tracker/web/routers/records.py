"""Personal record routes: latest list, history, add form and delete."""

from datetime import date

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ...errors import RecordStoreError, ValidationError
from ...models.records import MovementCategory
from ...services.session_state import View
from ..deps import render, require_session
from ..sessions import UserSession

router = APIRouter(prefix="/prs", tags=["records"])


def _render_add_form(
    request: Request,
    session: UserSession,
    category: str = "All",
    form: dict | None = None,
    form_error: str | None = None,
):
    state = session.state
    if category not in state.categories():
        category = "All"
    return render(
        request,
        "prs/add.html",
        session,
        category=category,
        groups=state.movements_by_category(category),
        new_movement_categories=[c.value for c in MovementCategory],
        form=form or {"date": date.today().isoformat()},
        form_error=form_error,
    )


@router.get("", response_class=HTMLResponse)
async def records_list(
    request: Request,
    search: str | None = None,
    session: UserSession = Depends(require_session),
):
    """Latest PR per movement, with an optional movement-name search."""
    state = session.state
    state.navigate(View.PRS)
    state.back_to_list()
    if search is not None:
        state.set_search(search)

    return render(
        request,
        "prs/list.html",
        session,
        records=state.latest_records(),
        search=state.search_term,
    )


@router.get("/new", response_class=HTMLResponse)
async def new_record_form(
    request: Request,
    category: str = "All",
    movement_id: int | None = None,
    session: UserSession = Depends(require_session),
):
    """Add-PR form, optionally filtered by category or with a movement preselected."""
    session.state.navigate(View.ADD)
    form = {"date": date.today().isoformat(), "movement_id": movement_id}
    return _render_add_form(request, session, category=category, form=form)


@router.post("")
async def add_record(
    request: Request,
    movement_id: str = Form(""),
    value: str = Form(""),
    record_date: str = Form("", alias="date"),
    notes: str = Form(""),
    session: UserSession = Depends(require_session),
):
    """Log a new personal record."""
    state = session.state
    form = {"movement_id": int(movement_id) if movement_id.isdigit() else None,
            "value": value, "date": record_date, "notes": notes}

    try:
        await state.add_record(
            movement_id=form["movement_id"],
            value=value,
            date=record_date,
            notes=notes,
        )
    except ValidationError as e:
        return _render_add_form(request, session, form=form, form_error=str(e))
    except RecordStoreError as e:
        state.error = f"Error adding PR: {e}"
        return _render_add_form(request, session, form=form)

    return RedirectResponse(url="/prs", status_code=302)


@router.get("/history/{movement_id}", response_class=HTMLResponse)
async def record_history(
    request: Request,
    movement_id: int,
    session: UserSession = Depends(require_session),
):
    """Every logged attempt for one movement, newest first."""
    state = session.state
    movement = state.get_movement(movement_id)
    if movement is None:
        return RedirectResponse(url="/prs", status_code=302)

    state.select_movement(movement_id)
    return render(
        request,
        "prs/history.html",
        session,
        movement=movement,
        records=state.history(movement_id),
    )


@router.post("/{record_id}/delete")
async def delete_record(
    request: Request,
    record_id: int,
    movement_id: int | None = Form(None),
    session: UserSession = Depends(require_session),
):
    """Delete one of the user's records."""
    state = session.state
    try:
        await state.delete_record(record_id)
    except RecordStoreError as e:
        state.error = f"Error deleting PR: {e}"

    if movement_id is not None and state.history(movement_id):
        return RedirectResponse(url=f"/prs/history/{movement_id}", status_code=302)
    return RedirectResponse(url="/prs", status_code=302)
