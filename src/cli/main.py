"""CLI commands for Boomer AI."""

import asyncio
import sys
from pathlib import Path

import click
import structlog
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cli.config import load_config_model
from cli.config_models import BoomerConfig
from cli.logging_config import setup_logging
from llm import LLMError
from observability import log_run_summary
from store import DataStore, init_db

console = Console()
logger = structlog.get_logger()


def _config(ctx: click.Context) -> BoomerConfig:
    return ctx.obj["config"]


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "-c", "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to config.yaml",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None):
    """Boomer AI - voice assistant for schedules, medications, contacts and notes."""
    try:
        config = load_config_model(config_path)
    except ValueError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)
    level = "DEBUG" if verbose else config.logging.level
    setup_logging(json_mode=config.logging.json_mode, level=level, log_file=config.paths.log_file)
    ctx.obj = {"config": config}


@cli.command("init-db")
@click.pass_context
def init_db_cmd(ctx: click.Context):
    """Create the database schema."""
    db_path = _config(ctx).paths.db_path
    init_db(db_path)
    console.print(f"[green]Database ready:[/] {db_path}")


@cli.command("seed-demo")
@click.argument("user_id")
@click.option("--name", help="Display name for the demo user")
@click.pass_context
def seed_demo_cmd(ctx: click.Context, user_id: str, name: str | None):
    """Load demo appointments, medications, contacts and notes for USER_ID."""
    from store.seed import seed_demo

    store = DataStore(_config(ctx).paths.db_path)
    counts = seed_demo(store, user_id, name=name)

    table = Table(title=f"Seeded {user_id}")
    table.add_column("Entity")
    table.add_column("Rows", justify="right")
    for entity, count in counts.items():
        table.add_row(entity, str(count))
    console.print(table)


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: str, port: int, reload: bool):
    """Run the voice WebSocket server."""
    import uvicorn

    console.print(f"[bold]Boomer AI[/] listening on ws://{host}:{port}/ws/voice")
    uvicorn.run("web.app:app", host=host, port=port, reload=reload)


@cli.command()
@click.option("--user-id", required=True, help="User whose data the session reads and writes")
@click.option("--name", help="Display name used in the greeting")
@click.pass_context
def chat(ctx: click.Context, user_id: str, name: str | None):
    """Interactive text session against the assistant (no audio)."""
    from voice import ActionCompleted, EngineError, Speaking, create_collaborators, create_dialogue_engine

    config = _config(ctx)
    store = DataStore(config.paths.db_path)
    store.users.get_or_create(user_id, name=name)

    try:
        collaborators = create_collaborators(config, with_speech=False)
    except LLMError as e:
        console.print(f"[red]LLM not configured:[/] {e}")
        sys.exit(1)

    def render(event):
        if isinstance(event, Speaking):
            console.print(Panel(event.text, title=config.voice.assistant_name, border_style="cyan"))
        elif isinstance(event, ActionCompleted):
            console.print(f"[dim]action: {event.action}[/]")
        elif isinstance(event, EngineError):
            console.print(f"[red]{event.message}[/]")

    async def session():
        engine = create_dialogue_engine(
            config, store, collaborators, user_id=user_id, display_name=name
        )
        engine.subscribe(render)
        await engine.greet()
        try:
            while True:
                text = await asyncio.to_thread(console.input, "[bold green]You:[/] ")
                if text.strip().lower() in {"quit", "exit"}:
                    break
                await engine.process_text(text)
        finally:
            engine.close()

    try:
        asyncio.run(session())
    except (KeyboardInterrupt, EOFError):
        console.print()
    finally:
        log_run_summary()


if __name__ == "__main__":
    cli()
