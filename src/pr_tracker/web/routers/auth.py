"""Sign-in, sign-up, email confirmation and sign-out routes."""

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ...errors import AuthError, ValidationError
from ..deps import get_auth_session, render

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, mode: str = "signin", message: str | None = None):
    """Login page with a sign-in / sign-up toggle."""
    if await get_auth_session(request):
        return RedirectResponse(url="/prs", status_code=302)

    return render(
        request,
        "login.html",
        mode="signup" if mode == "signup" else "signin",
        message=message,
        error=None,
        email="",
    )


@router.post("/login")
async def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
):
    """Sign in and set the session cookie."""
    try:
        auth_session = await request.app.state.auth.sign_in(email, password)
    except (AuthError, ValidationError) as e:
        return render(request, "login.html", mode="signin", error=str(e), message=None, email=email)

    response = RedirectResponse(url="/prs", status_code=302)
    response.set_cookie(
        request.app.state.settings.session_cookie,
        auth_session.token,
        httponly=True,
        samesite="lax",
    )
    return response


@router.post("/signup")
async def signup(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
):
    """Create an account; it must be confirmed before signing in."""
    try:
        await request.app.state.auth.sign_up(email, password)
    except (AuthError, ValidationError) as e:
        return render(request, "login.html", mode="signup", error=str(e), message=None, email=email)

    return render(
        request,
        "login.html",
        mode="signin",
        error=None,
        email=email,
        message="Check your email for the confirmation link!",
    )


@router.get("/confirm", response_class=HTMLResponse)
async def confirm(request: Request, token: str = ""):
    """Confirm an account from the emailed link."""
    try:
        user = await request.app.state.auth.confirm_email(token)
    except AuthError as e:
        return render(request, "login.html", mode="signin", error=str(e), message=None, email="")

    return render(
        request,
        "login.html",
        mode="signin",
        error=None,
        email=user.email,
        message="Your email is confirmed. You can sign in now.",
    )


@router.post("/logout")
async def logout(request: Request):
    """Sign out and clear the session cookie."""
    cookie = request.app.state.settings.session_cookie
    token = request.cookies.get(cookie)
    if token:
        await request.app.state.auth.sign_out(token)

    response = RedirectResponse(url="/auth/login", status_code=302)
    response.delete_cookie(cookie)
    return response
