"""Percentage calculator route."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ...errors import ValidationError
from ...services.calculator import parse_value, percentage_of, percentage_table, weight_based_records
from ...services.session_state import View
from ..deps import render, require_session
from ..sessions import UserSession

router = APIRouter(prefix="/calculator", tags=["calculator"])


@router.get("", response_class=HTMLResponse)
async def calculator_page(
    request: Request,
    record_id: int | None = None,
    percentage: str = "",
    session: UserSession = Depends(require_session),
):
    """Scale a weight-based PR by a percentage."""
    state = session.state
    state.navigate(View.CALCULATOR)

    records = weight_based_records(state.latest_records(search=""))
    selected = next((r for r in records if r.id == record_id), None)
    if selected is None and records:
        selected = records[0]

    result = None
    table = []
    error = None
    if selected is not None:
        try:
            base = parse_value(selected.value)
            table = percentage_table(base)
            if percentage.strip():
                result = percentage_of(base, percentage)
        except ValidationError as e:
            error = str(e)

    return render(
        request,
        "calculator.html",
        session,
        records=records,
        selected=selected,
        percentage=percentage,
        result=result,
        table=table,
        calc_error=error,
    )
