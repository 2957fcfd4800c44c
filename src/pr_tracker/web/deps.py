"""Request dependencies shared by the routers."""

from fastapi import Request
from fastapi.templating import Jinja2Templates

from ..models.user import AuthSession
from .sessions import UserSession


class NotAuthenticated(Exception):
    """The request has no valid session cookie."""


def get_templates(request: Request) -> Jinja2Templates:
    """Get templates from app state."""
    return request.app.state.templates


async def get_auth_session(request: Request) -> AuthSession | None:
    token = request.cookies.get(request.app.state.settings.session_cookie)
    return await request.app.state.auth.get_session(token)


async def require_session(request: Request) -> UserSession:
    """Resolve the signed-in user's session, or redirect to the login page."""
    auth_session = await get_auth_session(request)
    if auth_session is None:
        raise NotAuthenticated()
    return await request.app.state.sessions.get(auth_session)


def render(request: Request, name: str, session: UserSession | None = None, **context):
    """Render a page with the common layout context."""
    context["session"] = session
    if session is not None:
        context["state"] = session.state
        context["chat_available"] = session.engine.is_available
    return get_templates(request).TemplateResponse(request, name, context)
