"""Benchmark WOD commands."""

from datetime import date

import click

from ..errors import RecordStoreError, ValidationError
from ..models.records import format_display_date
from ..models.wods import BENCHMARK_WODS, find_wod
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
def wods():
    """Browse benchmark WODs and log scores."""
    pass


@wods.command("list")
def list_wods():
    """List the benchmark WODs."""
    rows = [[w.name, w.type.value, w.description[0] if w.description else ""] for w in BENCHMARK_WODS]
    click.echo(format_table(["Name", "Type", "Workout"], rows))


@wods.command("show")
@click.argument("name")
@click.pass_context
def show(ctx: click.Context, name: str):
    """Show a benchmark WOD's description."""
    wod = find_wod(name)
    if wod is None:
        echo_error(f'"{name}" is not a known benchmark WOD.')
        ctx.exit(1)

    click.echo(click.style(wod.name, bold=True) + f" ({wod.type.value})")
    for line in wod.description:
        click.echo(f"  {line}")
    if wod.notes:
        click.echo()
        click.echo(wod.notes)


@wods.command("log")
@user_options
@click.argument("name")
@click.argument("score")
@click.option("--date", "score_date", default=None, help="Date, YYYY-MM-DD (default: today)")
@click.option("--notes", "-n", default=None, help="Notes (scaling, splits...)")
@click.pass_context
@async_command
async def log_score(
    ctx: click.Context,
    email: str,
    password: str,
    name: str,
    score: str,
    score_date: str | None,
    notes: str | None,
):
    """Log a SCORE for the benchmark NAME."""
    async with signed_in(ctx, email, password) as state:
        try:
            await state.add_score(name, score, score_date or date.today().isoformat(), notes)
        except (ValidationError, RecordStoreError) as e:
            echo_error(str(e))
            ctx.exit(1)

    echo_success(f"Logged {find_wod(name).name}: {score.strip()}")


@wods.command("scores")
@user_options
@click.argument("name", required=False)
@click.pass_context
@async_command
async def scores(ctx: click.Context, email: str, password: str, name: str | None):
    """Show your logged scores, optionally for one WOD."""
    if name and find_wod(name) is None:
        echo_error(f'"{name}" is not a known benchmark WOD.')
        ctx.exit(1)

    async with signed_in(ctx, email, password) as state:
        logged = state.scores_for(find_wod(name).name) if name else state.scores

    if not logged:
        echo_info("No scores logged yet.")
        return

    rows = [
        [str(s.id), s.wod_name, s.score, format_display_date(s.date), s.notes or ""]
        for s in logged
    ]
    click.echo(format_table(["ID", "WOD", "Score", "Date", "Notes"], rows))


@wods.command("delete")
@user_options
@click.argument("score_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
@async_command
async def delete_score(ctx: click.Context, email: str, password: str, score_id: int, yes: bool):
    """Delete one of your scores by ID."""
    if not yes and not click.confirm("Are you sure you want to delete this score?"):
        echo_info("Cancelled.")
        return

    async with signed_in(ctx, email, password) as state:
        try:
            deleted = await state.delete_score(score_id)
        except RecordStoreError as e:
            echo_error(str(e))
            ctx.exit(1)

    if deleted:
        echo_success(f"Deleted score {score_id}")
    else:
        echo_warning(f"No score {score_id} found")
