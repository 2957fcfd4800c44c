"""Account commands."""

import click

from ..errors import AuthError, ValidationError
from ..services.auth import AuthService
from .base import async_command, echo_error, echo_info, echo_success, ensure_initialized, get_settings


@click.command()
@click.option("--email", required=True, help="Account email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.pass_context
@async_command
async def signup(ctx: click.Context, email: str, password: str):
    """Create an account.

    The account must be confirmed with the printed token before it can
    sign in.
    """
    ensure_initialized(ctx)
    auth = AuthService(get_settings(ctx).db_path)

    try:
        user, token = await auth.sign_up(email, password)
    except (AuthError, ValidationError) as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_success(f"Account created for {user.email}")
    echo_info("Confirm it with:")
    click.echo(f"  pr-tracker confirm {token}")


@click.command()
@click.argument("token")
@click.pass_context
@async_command
async def confirm(ctx: click.Context, token: str):
    """Confirm an account with its confirmation token."""
    ensure_initialized(ctx)
    auth = AuthService(get_settings(ctx).db_path)

    try:
        user = await auth.confirm_email(token)
    except AuthError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_success(f"{user.email} confirmed. You can sign in now.")
