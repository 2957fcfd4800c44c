"""FastAPI application for the pr-tracker web interface."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import urlparse

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .. import __version__
from ..agents.gemini import AgentFactory, gemini_agent_factory
from ..config import Settings, configure_logging
from ..db.engine import init_db, seed_movements
from ..models.records import format_display_date
from ..services.auth import AuthService
from ..services.calculator import format_quantity
from .deps import NotAuthenticated, require_session
from .formatting import format_message
from .routers import auth, calculator, chat, movements, records, wods
from .sessions import SessionRegistry

logger = logging.getLogger(__name__)

# Template and static file paths
TEMPLATES_DIR = Path(__file__).parent / "templates"
STATIC_DIR = Path(__file__).parent / "static"


def create_app(
    settings: Settings | None = None,
    agent_factory: AgentFactory | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings (default: read from the environment)
        agent_factory: Builds the coaching assistant per session (default:
            Gemini, when an API key is configured)
    """
    if settings is None:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
    if agent_factory is None:
        agent_factory = gemini_agent_factory(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler - runs on startup and shutdown."""
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        await init_db(settings.db_path)
        seeded = await seed_movements(settings.db_path)
        if seeded:
            logger.info("Seeded %d starter movements", seeded)
        yield

    app = FastAPI(
        title="pr-tracker",
        description="Personal record and benchmark WOD tracker with an AI coach",
        version=__version__,
        lifespan=lifespan,
    )

    # Mount static files
    if STATIC_DIR.exists():
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    templates = Jinja2Templates(directory=TEMPLATES_DIR)
    templates.env.filters["format_message"] = format_message
    templates.env.filters["display_date"] = format_display_date
    templates.env.filters["quantity"] = format_quantity

    auth_service = AuthService(settings.db_path)
    sessions = SessionRegistry(settings.db_path, agent_factory)
    auth_service.on_auth_state_change(sessions.on_auth_state_change)

    app.state.settings = settings
    app.state.templates = templates
    app.state.auth = auth_service
    app.state.sessions = sessions

    @app.exception_handler(NotAuthenticated)
    async def redirect_to_login(request: Request, exc: NotAuthenticated):
        response = RedirectResponse(url="/auth/login", status_code=302)
        response.delete_cookie(settings.session_cookie)
        return response

    app.include_router(auth.router)
    app.include_router(records.router)
    app.include_router(movements.router)
    app.include_router(wods.router)
    app.include_router(calculator.router)
    app.include_router(chat.router)

    @app.get("/", response_class=HTMLResponse)
    async def root(request: Request):
        """Root redirect to the PR list."""
        return RedirectResponse(url="/prs", status_code=302)

    @app.post("/dismiss-error")
    async def dismiss_error(request: Request):
        """Clear the error banner and go back where the user was."""
        session = await require_session(request)
        session.state.dismiss_error()
        back = urlparse(request.headers.get("referer") or "").path or "/prs"
        return RedirectResponse(url=back, status_code=302)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "ai_enabled": agent_factory is not None,
        }

    return app
