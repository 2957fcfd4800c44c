"""Shared CLI utilities."""

import asyncio
from contextlib import asynccontextmanager
from functools import wraps
from typing import AsyncIterator

import click

from ..config import Settings
from ..errors import AuthError, ValidationError
from ..services.auth import AuthService
from ..services.session_state import SessionState


def async_command(f):
    """Decorator to run async Click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def user_options(f):
    """Add the --email / --password options used by user-scoped commands."""
    f = click.option(
        "--password",
        prompt=True,
        hide_input=True,
        envvar="PR_TRACKER_PASSWORD",
        help="Account password (prompted when omitted)",
    )(f)
    f = click.option(
        "--email",
        required=True,
        envvar="PR_TRACKER_EMAIL",
        help="Account email",
    )(f)
    return f


def get_settings(ctx: click.Context) -> Settings:
    """Settings loaded by the top-level group."""
    return ctx.find_root().obj


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    if not get_settings(ctx).db_path.exists():
        echo_error("Project not initialized. Run 'pr-tracker init' first.")
        ctx.exit(1)


@asynccontextmanager
async def signed_in(ctx: click.Context, email: str, password: str) -> AsyncIterator[SessionState]:
    """Sign in, load the user's snapshot, and sign out again afterwards."""
    ensure_initialized(ctx)
    settings = get_settings(ctx)
    auth = AuthService(settings.db_path)

    try:
        auth_session = await auth.sign_in(email, password)
    except (AuthError, ValidationError) as e:
        echo_error(str(e))
        ctx.exit(1)

    try:
        state = SessionState(auth_session.user, settings.db_path)
        if not await state.refresh():
            echo_error(state.error)
            ctx.exit(1)
        yield state
    finally:
        await auth.sign_out(auth_session.token)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    # Calculate column widths
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = [
        "".join(h.ljust(widths[i] + padding) for i, h in enumerate(headers)).rstrip(),
        "".join("-" * w + " " * padding for w in widths).rstrip(),
    ]
    for row in rows:
        lines.append(
            "".join(str(cell).ljust(widths[i] + padding) for i, cell in enumerate(row)).rstrip()
        )

    return "\n".join(lines)
