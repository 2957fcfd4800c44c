"""Interactive AI coach command."""

import click
import questionary
from questionary import Style

from ..agents.confirmation import AwaitingConfirmation, ConfirmationEngine
from ..agents.gemini import gemini_agent_factory
from ..errors import InvalidTransition
from .base import async_command, echo_error, echo_info, echo_warning, get_settings, signed_in, user_options

custom_style = Style(
    [
        ("qmark", "fg:#f0a020 bold"),
        ("question", "bold"),
        ("answer", "fg:#30a46c bold"),
        ("pointer", "fg:#f0a020 bold"),
        ("highlighted", "fg:#f0a020 bold"),
    ]
)

CONFIRM = "Confirm"
CANCEL = "Cancel"
LATER = "Decide later"


async def print_event(event_type: str, message: str, data: dict | None = None):
    """Engine callback: stream text to the terminal."""
    if event_type == "chunk":
        click.echo(message, nl=False)
    elif event_type == "confirmation":
        click.echo()
        click.echo(click.style(message, fg="cyan"))
    elif event_type == "message":
        click.echo()
        click.echo(message)
    elif event_type == "error":
        click.echo()
        click.echo(click.style(message, fg="red"))
    elif event_type == "done":
        click.echo()


@click.command()
@user_options
@click.pass_context
@async_command
async def chat(ctx: click.Context, email: str, password: str):
    """Talk to the AI coach about your PRs.

    The coach can offer to log a PR for you. Nothing is saved until you
    confirm. Type "exit" (or press Ctrl+C) to leave.
    """
    factory = gemini_agent_factory(get_settings(ctx))
    if factory is None:
        echo_error("The AI coach needs GEMINI_API_KEY to be set.")
        ctx.exit(1)

    async with signed_in(ctx, email, password) as state:
        engine = ConfirmationEngine(state)
        if not await engine.initialize(factory):
            for message in engine.messages:
                echo_error(message.text)
            ctx.exit(1)

        click.echo(click.style(engine.messages[0].text, fg="green"))
        click.echo()

        while True:
            text = await questionary.text("You:", style=custom_style).ask_async()
            if text is None or text.strip().lower() in ("exit", "quit"):
                break
            if not text.strip():
                continue

            await engine.send_message(text, on_event=print_event)
            await _ask_for_confirmation(engine)

    echo_info("Bye! Keep crushing those PRs.")


async def _ask_for_confirmation(engine: ConfirmationEngine) -> None:
    if not isinstance(engine.state, AwaitingConfirmation):
        return

    choice = await questionary.select(
        "Shall I proceed?",
        choices=[CONFIRM, CANCEL, LATER],
        style=custom_style,
    ).ask_async()

    if choice is None or choice == LATER:
        echo_warning("The proposal stays pending until you confirm or cancel it.")
        return

    try:
        await engine.resolve(choice == CONFIRM, on_event=print_event)
    except InvalidTransition as e:
        echo_error(str(e))
