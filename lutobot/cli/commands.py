"""Lutobot CLI — Typer-based command-line interface."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lutobot import __version__

app = typer.Typer(
    name="lutobot",
    help="lutobot - multi-agent cooking assistant",
    no_args_is_help=True,
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"lutobot v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=_version_callback, is_eager=True
    ),
) -> None:
    """lutobot - multi-agent cooking assistant."""


def _print_response(response) -> None:
    style = "cyan" if response.success else "red"
    console.print(f"\n[bold {style}]lutobot:[/bold {style}] {escape(response.message)}")
    for action in response.suggested_actions or []:
        console.print(f"  [dim]→ {escape(action.label)} ({escape(action.value)})[/dim]")
    console.print()


# ════════════════════════════════════════════════════════════
# run — start API server
# ════════════════════════════════════════════════════════════


@app.command()
def run(
    port: int = typer.Option(8000, "--port", "-p", help="Port number"),
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host address"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
) -> None:
    """Start the API server (uvicorn)."""
    import uvicorn

    console.print(f"[green]Starting lutobot API on {host}:{port}[/green]")
    uvicorn.run("lutobot.api.app:app", host=host, port=port, reload=reload)


# ════════════════════════════════════════════════════════════
# chat — terminal chat
# ════════════════════════════════════════════════════════════


@app.command()
def chat(
    message: str | None = typer.Option(None, "--message", "-m", help="Single message to send"),
    agent: str | None = typer.Option(None, "--agent", "-a", help="Bypass routing with this agent"),
    recipe: str | None = typer.Option(None, "--recipe", "-r", help="Recipe currently being cooked"),
) -> None:
    """Chat with the assistant from the terminal."""
    from lutobot.agent.models import AgentContext
    from lutobot.api.app import build_orchestrator, seed_if_configured
    from lutobot.core.config.loader import load_config
    from lutobot.store import RecipeRepository, create_store

    config = load_config()
    store = create_store(config)
    recipes = RecipeRepository(store)
    timeout = config.assistant.request_timeout_s

    async def _session() -> None:
        await seed_if_configured(config, recipes)
        orchestrator = build_orchestrator(config, recipes)
        context = AgentContext(current_recipe_id=recipe)

        if message:
            response = await orchestrator.process_request(message, agent, context, timeout)
            _print_response(response)
            return

        console.print("[bold]lutobot interactive mode[/bold] (type 'exit' or 'quit' to leave)\n")
        context = context.model_copy(
            update={"conversation_id": orchestrator.create_new_conversation()}
        )
        while True:
            try:
                user_input = console.input("[bold blue]You:[/bold blue] ")
            except (KeyboardInterrupt, EOFError):
                console.print("\nBye!")
                break

            text = user_input.strip()
            if not text:
                continue
            if text.lower() in ("exit", "quit"):
                console.print("Bye!")
                break

            response = await orchestrator.process_request(text, agent, context, timeout)
            _print_response(response)

    try:
        asyncio.run(_session())
    finally:
        store.close()


# ════════════════════════════════════════════════════════════
# agents — registered agents
# ════════════════════════════════════════════════════════════


@app.command()
def agents() -> None:
    """List the agents in registration order."""
    from lutobot.agent.agents import make_agents
    from lutobot.core.config.loader import load_config
    from lutobot.core.providers import create_provider
    from lutobot.store import InMemoryDocumentStore, RecipeRepository

    config = load_config()
    found = make_agents(config, RecipeRepository(InMemoryDocumentStore()), create_provider(config))

    table = Table(title="lutobot agents")
    table.add_column("#", style="dim")
    table.add_column("Agent", style="cyan")
    table.add_column("Routing fallback", style="green")
    for i, a in enumerate(found):
        table.add_row(str(i + 1), a.identify(), "yes" if i == 0 else "")
    console.print(table)


# ════════════════════════════════════════════════════════════
# seed — load recipes into the store
# ════════════════════════════════════════════════════════════


@app.command()
def seed(
    path: Path = typer.Argument(help="JSON seed file", exists=True, dir_okay=False),
) -> None:
    """Load recipes, ingredients, steps and substitutes from a JSON file."""
    from lutobot.core.config.loader import load_config
    from lutobot.store import RecipeRepository, create_store

    config = load_config()
    store = create_store(config)
    try:
        count = asyncio.run(RecipeRepository(store).seed_from_file(path))
    finally:
        store.close()
    console.print(f"[green]Seeded {count} recipes into {config.store.backend} store[/green]")
