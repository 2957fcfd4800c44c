"""Initialize project command."""

import click

from ..db import init_db, seed_movements
from .base import async_command, echo_info, echo_success, get_settings


@click.command()
@click.pass_context
@async_command
async def init(ctx: click.Context):
    """Initialize the pr-tracker database.

    This creates the data directory and the SQLite database with the
    required schema and a starter movement catalog.
    """
    settings = get_settings(ctx)

    echo_info(f"Initializing pr-tracker in {settings.data_dir}")

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    await init_db(settings.db_path)
    echo_success("Database initialized")

    count = await seed_movements(settings.db_path)
    if count:
        echo_success(f"Movement catalog populated ({count} movements)")
    else:
        echo_info("Movement catalog already populated")

    click.echo()
    click.echo("pr-tracker is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Create an account and confirm it:")
    click.echo("     pr-tracker signup --email you@example.com")
    click.echo("     pr-tracker confirm <token>")
    click.echo()
    click.echo("  2. Log a PR or start the web interface:")
    click.echo('     pr-tracker prs add --email you@example.com "Back Squat" 150kg')
    click.echo("     pr-tracker serve")
