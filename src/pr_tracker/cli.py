"""CLI entry point for pr-tracker."""

import click

from . import __version__
from .commands import calc, chat, confirm, init, movements, prs, serve, signup, wods
from .commands.base import echo_error
from .config import Settings, configure_logging
from .errors import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="pr-tracker")
@click.pass_context
def main(ctx: click.Context):
    """pr-tracker: personal records, benchmark WODs and an AI coach.

    Example usage:

        # Initialize the database
        pr-tracker init

        # Create and confirm an account
        pr-tracker signup --email you@example.com
        pr-tracker confirm <token>

        # Log and review PRs
        pr-tracker prs add --email you@example.com "Back Squat" 150kg
        pr-tracker prs list --email you@example.com

        # Start the web interface
        pr-tracker serve
    """
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        echo_error(str(e))
        ctx.exit(1)

    configure_logging(settings.log_level)
    ctx.obj = settings


# Register commands
main.add_command(init)
main.add_command(serve)
main.add_command(signup)
main.add_command(confirm)
main.add_command(movements)
main.add_command(prs)
main.add_command(wods)
main.add_command(calc)
main.add_command(chat)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
