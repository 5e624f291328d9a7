"""synergi command line.

Commands:
- synergi init              write a config file
- synergi serve             run the HTTP/SSE server
- synergi route <message>   show how a message would be routed
- synergi agents            list registered agents
- synergi chat <message>    run one turn locally and print the stream
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from synergi import __logo__, __version__

app = typer.Typer(help=f"{__logo__} synergi - multi-agent chat router")
console = Console()


def _version_callback(value: bool):
    if value:
        console.print(f"{__logo__} synergi v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", "-V", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    pass


def _load(config_path: Optional[Path]):
    from synergi.config.loader import load_config
    return load_config(config_path)


def _provider(config):
    from synergi.providers.litellm_provider import LiteLLMProvider
    return LiteLLMProvider(
        api_key=config.providers.openrouter.api_key or None,
        api_base=config.providers.openrouter.api_base,
        default_model=config.providers.default_model,
        extra_headers=config.providers.openrouter.extra_headers,
    )


@app.command()
def init(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Where to write the config"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Write a config file with the current settings."""
    from synergi.config.loader import get_config_path, save_config
    from synergi.config.schema import Config

    path = config_path or get_config_path()
    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}[/yellow] (use --force to overwrite)")
        raise typer.Exit(1)

    save_config(Config(), path)
    console.print(f"[green]✓[/green] Wrote {path}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Bind address (default from config)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default from config)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Run the chat API server."""
    import uvicorn

    from synergi.api.server import create_app
    from synergi.utils.logging import configure_logging

    configure_logging(verbose=verbose)
    config = _load(config_path)
    bind_host = host or config.server.host
    bind_port = port or config.server.port

    console.print(f"{__logo__} synergi v{__version__} on http://{bind_host}:{bind_port}")
    console.print(f"[dim]routing: {config.routing.strategy} | storage: {config.storage.backend}[/dim]")
    uvicorn.run(create_app(config), host=bind_host, port=bind_port, log_level="warning")


@app.command()
def route(
    message: str = typer.Argument(..., help="Message to classify"),
    strategy: str = typer.Option("lexical", "--strategy", "-s", help="lexical | llm"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Show which agent a message would be routed to."""
    from synergi.agent.router import AgentRouter, LexicalClassifier, LLMRouter
    from synergi.chat.orchestrator import describe_decision

    if strategy not in ("lexical", "llm"):
        console.print(f"[red]Unknown strategy: {strategy}[/red]")
        raise typer.Exit(1)

    if strategy == "lexical":
        classifier = LexicalClassifier()
        result = classifier.score(message)

        table = Table(title="Lexical scores")
        table.add_column("Agent", style="cyan")
        table.add_column("Score", style="magenta", justify="right")
        table.add_column("Signals", style="dim")
        for score in result.scores:
            marker = " ✓" if score.agent == result.winner else ""
            table.add_row(f"{score.agent.value}{marker}", f"{score.score:.2f}", ", ".join(score.signals) or "-")
        console.print(table)
        console.print(
            f"[bold]Emotion:[/bold] {result.emotion.emotion.value} "
            f"({result.emotion.intensity:.2f})"
        )
    else:
        config = _load(config_path)
        classifier = LLMRouter(_provider(config), model=config.router_model, timeout_ms=config.routing.timeout_ms)

    decision = asyncio.run(AgentRouter(classifier).route(message))
    console.print(f"[bold green]→[/bold green] {describe_decision(decision)}")


@app.command()
def agents():
    """List registered agents."""
    from synergi.agent.router import get_available_agents

    table = Table(title=f"{__logo__} Agents")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Description")
    table.add_column("Active", justify="center")
    for info in get_available_agents():
        table.add_row(info.id.value, info.name, info.description, "✓" if info.is_active else "✗")
    console.print(table)


@app.command()
def chat(
    message: str = typer.Argument(..., help="Message to send"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    show_events: bool = typer.Option(False, "--events", "-e", help="Print every stream event"),
):
    """Run a single turn in-process and print the streamed answer."""
    from synergi.chat.orchestrator import ChatOrchestrator
    from synergi.storage.memory import InMemoryChatStore

    config = _load(config_path)
    orchestrator = ChatOrchestrator.from_config(config, InMemoryChatStore(), _provider(config))

    async def run() -> bool:
        ok = True
        async for event in orchestrator.run_turn("cli", message):
            if show_events:
                console.print(f"[dim]{event.event}[/dim] {event.data}")
            elif event.event == "agent_selected":
                console.print(f"[dim]{__logo__} {event.data.get('agentName')}[/dim]")
            elif event.event == "ai_chunk":
                console.print(event.data.get("chunk", ""), end="", markup=False, highlight=False)
            elif event.event == "tool_call":
                console.print(f"\n[dim]↳ {event.data.get('name')}[/dim]")
            elif event.event == "error":
                console.print(f"[red]{event.data.get('error')}[/red]")
                ok = False
        console.print()
        return ok

    if not asyncio.run(run()):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
