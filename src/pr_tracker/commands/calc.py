"""Percentage calculator command."""

import click

from ..errors import ValidationError
from ..services.calculator import format_quantity, percentage_of, percentage_table
from .base import async_command, echo_error, format_table, signed_in, user_options


@click.command()
@user_options
@click.argument("movement")
@click.argument("percentage", required=False)
@click.pass_context
@async_command
async def calc(ctx: click.Context, email: str, password: str, movement: str, percentage: str | None):
    """Calculate percentages of your latest MOVEMENT PR.

    With PERCENTAGE, prints that one value; otherwise prints a 50-100% table.
    """
    async with signed_in(ctx, email, password) as state:
        found = state.find_movement(movement)
        latest = [r for r in state.latest_records(search="") if found and r.movement_id == found.id]

    if not latest:
        echo_error(f'No PR logged for "{movement}".')
        ctx.exit(1)

    record = latest[0]
    try:
        if percentage:
            result = percentage_of(record.value, percentage)
            click.echo(f"{percentage.rstrip('%')}% of {record.value} = {format_quantity(result)}")
            return
        table = percentage_table(record.value)
    except ValidationError as e:
        echo_error(str(e))
        ctx.exit(1)

    click.echo(click.style(f"{found.name}: {record.value}", bold=True))
    click.echo(format_table(["%", "Weight"], [[f"{pct}%", format_quantity(q)] for pct, q in table]))
