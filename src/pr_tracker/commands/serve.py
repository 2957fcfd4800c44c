"""Web server command."""

import click

from .base import ensure_initialized, get_settings


@click.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
@click.option("--port", "-p", default=8000, type=int, help="Port to bind to (default: 8000)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, reload: bool):
    """Start the web server.

    Launches the pr-tracker web interface on the specified host and port.
    The AI coach is enabled when GEMINI_API_KEY is set.

    Examples:

        # Start on default port (8000)
        pr-tracker serve

        # Start on custom port
        pr-tracker serve --port 3000

        # Development mode with auto-reload
        pr-tracker serve --reload
    """
    ensure_initialized(ctx)

    import uvicorn

    from ..web import create_app

    settings = get_settings(ctx)

    click.echo()
    click.echo(click.style("Starting pr-tracker web server...", fg="green"))
    click.echo()
    click.echo(f"  Local:   http://{host}:{port}")
    if not settings.ai_enabled:
        click.echo(click.style("  AI coach disabled (no GEMINI_API_KEY)", fg="yellow"))
    click.echo()
    click.echo("Press Ctrl+C to stop the server.")
    click.echo()

    app = None if reload else create_app(settings)

    uvicorn.run(
        app if not reload else "pr_tracker.web:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=reload,
    )
