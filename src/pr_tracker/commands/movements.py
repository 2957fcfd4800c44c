"""Movement catalog commands."""

import click

from ..db.repositories import MovementRepository
from ..errors import RecordStoreError, ValidationError
from ..models.records import MovementCategory
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    get_settings,
    signed_in,
    user_options,
)


@click.group()
def movements():
    """Browse and extend the movement catalog."""
    pass


@movements.command("list")
@click.option("--category", "-c", default=None, help="Only show one category")
@click.pass_context
@async_command
async def list_movements(ctx: click.Context, category: str | None):
    """List catalog movements."""
    ensure_initialized(ctx)
    repo = MovementRepository(get_settings(ctx).db_path)
    catalog = await repo.list_all()

    if category:
        wanted = MovementCategory.parse(category)
        catalog = [m for m in catalog if m.category == wanted]

    if not catalog:
        echo_info("No movements found.")
        return

    rows = [[str(m.id), m.name, m.category.value] for m in catalog]
    click.echo(format_table(["ID", "Name", "Category"], rows))


@movements.command("add")
@user_options
@click.argument("name")
@click.option(
    "--category",
    "-c",
    type=click.Choice([c.value for c in MovementCategory], case_sensitive=False),
    default=MovementCategory.OTHER.value,
    help="Movement category",
)
@click.pass_context
@async_command
async def add_movement(ctx: click.Context, email: str, password: str, name: str, category: str):
    """Add a movement to the shared catalog."""
    async with signed_in(ctx, email, password) as state:
        try:
            movement_id = await state.add_movement(name, category)
        except (ValidationError, RecordStoreError) as e:
            echo_error(str(e))
            ctx.exit(1)

    echo_success(f"Added movement {name.strip()} (ID {movement_id})")
