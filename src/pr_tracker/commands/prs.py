"""Personal record commands."""

from datetime import date

import click

from ..errors import RecordStoreError, ValidationError
from ..models.records import format_display_date
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    format_table,
    signed_in,
    user_options,
)


@click.group()
def prs():
    """View and log personal records."""
    pass


@prs.command("list")
@user_options
@click.option("--search", "-s", default="", help="Filter by movement name")
@click.pass_context
@async_command
async def list_records(ctx: click.Context, email: str, password: str, search: str):
    """Show the latest PR for each movement."""
    async with signed_in(ctx, email, password) as state:
        records = state.latest_records(search=search)

    if not records:
        echo_info("No PRs match that search." if search else "No PRs logged yet.")
        return

    rows = [
        [r.movement_name or "?", r.value, format_display_date(r.date)]
        for r in records
    ]
    click.echo(format_table(["Movement", "Value", "Date"], rows))


@prs.command("history")
@user_options
@click.argument("movement")
@click.pass_context
@async_command
async def history(ctx: click.Context, email: str, password: str, movement: str):
    """Show every logged attempt for one movement."""
    async with signed_in(ctx, email, password) as state:
        found = state.find_movement(movement)
        if found is None:
            echo_error(f'Unknown movement "{movement}". See `pr-tracker movements list`.')
            ctx.exit(1)
        records = state.history(found.id)

    click.echo(click.style(found.name, bold=True) + f" ({found.category.value})")
    if not records:
        echo_info("No records for this movement.")
        return

    rows = [
        [str(r.id), format_display_date(r.date), r.value, r.notes or ""]
        for r in records
    ]
    click.echo(format_table(["ID", "Date", "Value", "Notes"], rows))


@prs.command("add")
@user_options
@click.argument("movement")
@click.argument("value")
@click.option("--date", "record_date", default=None, help="Date achieved, YYYY-MM-DD (default: today)")
@click.option("--notes", "-n", default=None, help="Notes about the attempt")
@click.pass_context
@async_command
async def add_record(
    ctx: click.Context,
    email: str,
    password: str,
    movement: str,
    value: str,
    record_date: str | None,
    notes: str | None,
):
    """Log a new PR for MOVEMENT (e.g. "Back Squat" 150kg)."""
    async with signed_in(ctx, email, password) as state:
        found = state.find_movement(movement)
        if found is None:
            echo_error(f'Unknown movement "{movement}". Add it with `pr-tracker movements add`.')
            ctx.exit(1)

        try:
            await state.add_record(
                movement_id=found.id,
                value=value,
                date=record_date or date.today().isoformat(),
                notes=notes,
            )
        except (ValidationError, RecordStoreError) as e:
            echo_error(str(e))
            ctx.exit(1)

    echo_success(f"Logged {found.name}: {value.strip()}")


@prs.command("delete")
@user_options
@click.argument("record_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
@async_command
async def delete_record(ctx: click.Context, email: str, password: str, record_id: int, yes: bool):
    """Delete one of your records by ID."""
    if not yes and not click.confirm("Are you sure you want to delete this PR?"):
        echo_info("Cancelled.")
        return

    async with signed_in(ctx, email, password) as state:
        try:
            deleted = await state.delete_record(record_id)
        except RecordStoreError as e:
            echo_error(str(e))
            ctx.exit(1)

    if deleted:
        echo_success(f"Deleted record {record_id}")
    else:
        echo_warning(f"No record {record_id} found")
