import asyncio
from typing import Optional

import typer

from agentic.app import ask as app_ask
from agentic.app import configure_logging
from agentic.app import main as app_main
from agentic.core.config import Config
from agentic.core.formatter import format_result
from agentic.core.users.tools import UserTools

app = typer.Typer(help="Agentic user management CLI")


def _apply_offline(offline: bool) -> None:
    if offline:
        Config.AI_ENABLED = False


@app.command("run")
def run_agent(
    offline: bool = typer.Option(False, "--offline", help="Skip the model and use the rule-based agent"),
):
    """Run the agent in interactive mode."""
    _apply_offline(offline)
    asyncio.run(app_main())


@app.command("ask")
def ask(
    prompt: str,
    offline: bool = typer.Option(False, "--offline", help="Skip the model and use the rule-based agent"),
):
    """Send one PROMPT to the agent and print the reply."""
    configure_logging()
    _apply_offline(offline)
    typer.echo(asyncio.run(app_ask(prompt)))


@app.command("users:list")
def users_list(
    job: Optional[str] = typer.Option(None, "--job", "-j", help="Job title substring"),
    min_age: Optional[int] = typer.Option(None, "--min-age"),
    max_age: Optional[int] = typer.Option(None, "--max-age"),
):
    """List users in the directory."""
    tools = UserTools(Config.get_user_directory())
    result = asyncio.run(tools.GetAllUsers(job, min_age, max_age))
    typer.echo(format_result(result))


@app.command("server")
def server(
    host: str = typer.Option(None, "--host", "-H", help="Host to bind to"),
    port: int = typer.Option(None, "--port", "-p", help="Port to bind to"),
    offline: bool = typer.Option(False, "--offline", help="Skip the model and use the rule-based agent"),
):
    """Start the HTTP API (user CRUD + conversational agent)."""
    import uvicorn
    from agentic.server import create_app

    if host:
        Config.SERVER_HOST = host
    if port:
        Config.SERVER_PORT = port
    _apply_offline(offline)

    configure_logging()
    typer.echo(f"Starting HTTP server on {Config.SERVER_HOST}:{Config.SERVER_PORT}")
    typer.echo("API endpoints available at:")
    typer.echo("   - POST   /api/user/register")
    typer.echo("   - GET    /api/user[/{id}]")
    typer.echo("   - PUT    /api/user/{id}")
    typer.echo("   - DELETE /api/user/{id} | /api/user/all")
    typer.echo("   - POST   /api/agent/converse")
    typer.echo("   - GET    /health")

    uvicorn.run(
        create_app(),
        host=Config.SERVER_HOST,
        port=Config.SERVER_PORT,
        log_level=Config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    app()
