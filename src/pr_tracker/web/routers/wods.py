"""Benchmark WOD routes: catalog, detail, score logging."""

from datetime import date

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ...errors import RecordStoreError, ValidationError
from ...models.wods import BENCHMARK_WODS, WOD, find_wod
from ...services.session_state import View
from ..deps import render, require_session
from ..sessions import UserSession

router = APIRouter(prefix="/wods", tags=["wods"])


def _render_detail(
    request: Request,
    session: UserSession,
    wod: WOD,
    form: dict | None = None,
    form_error: str | None = None,
):
    return render(
        request,
        "wods/detail.html",
        session,
        wod=wod,
        scores=session.state.scores_for(wod.name),
        form=form or {"date": date.today().isoformat()},
        form_error=form_error,
    )


@router.get("", response_class=HTMLResponse)
async def wods_list(request: Request, session: UserSession = Depends(require_session)):
    """Benchmark catalog with each WOD's latest score."""
    state = session.state
    state.navigate(View.WODS)

    latest = {}
    for wod in BENCHMARK_WODS:
        scores = state.scores_for(wod.name)
        latest[wod.name] = scores[0] if scores else None

    return render(request, "wods/list.html", session, wods=BENCHMARK_WODS, latest=latest)


@router.get("/{slug}", response_class=HTMLResponse)
async def wod_detail(request: Request, slug: str, session: UserSession = Depends(require_session)):
    """One benchmark's description, score history and log form."""
    wod = find_wod(slug)
    if wod is None:
        return RedirectResponse(url="/wods", status_code=302)

    session.state.navigate(View.WODS)
    return _render_detail(request, session, wod)


@router.post("/{slug}/scores")
async def log_score(
    request: Request,
    slug: str,
    score: str = Form(""),
    score_date: str = Form("", alias="date"),
    notes: str = Form(""),
    session: UserSession = Depends(require_session),
):
    """Log a score for a benchmark."""
    wod = find_wod(slug)
    if wod is None:
        return RedirectResponse(url="/wods", status_code=302)

    state = session.state
    form = {"score": score, "date": score_date, "notes": notes}
    try:
        await state.add_score(wod.name, score, score_date, notes)
    except ValidationError as e:
        return _render_detail(request, session, wod, form=form, form_error=str(e))
    except RecordStoreError as e:
        state.error = f"Error adding score: {e}"
        return _render_detail(request, session, wod, form=form)

    return RedirectResponse(url=f"/wods/{wod.slug}", status_code=302)


@router.post("/{slug}/scores/{score_id}/delete")
async def delete_score(
    slug: str,
    score_id: int,
    session: UserSession = Depends(require_session),
):
    """Delete one of the user's scores."""
    state = session.state
    try:
        await state.delete_score(score_id)
    except RecordStoreError as e:
        state.error = f"Error deleting score: {e}"

    return RedirectResponse(url=f"/wods/{slug}", status_code=302)
