"""CLI for QB Arena."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, Any, TypeVar

import structlog
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from qb_arena import __version__
from qb_arena.core.config import ArenaConfig, load_config
from qb_arena.core.errors import ArenaError, ConfigurationError
from qb_arena.services.ingest import SeasonImporter
from qb_arena.services.match.service import MatchService, StandingsQuery
from qb_arena.services.reporting import render_standings
from qb_arena.services.storage import ArenaStore

T = TypeVar("T")

# QB_ARENA_DATABASE_URL may come from a local .env file
load_dotenv()

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="qb-arena",
    help="QB Arena - blind quarterback season comparisons with Elo ratings",
    add_completion=False,
)
console = Console()

ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to config YAML file")
]
SessionOption = Annotated[
    str | None, typer.Option("--session", "-s", help="Session id (new session if omitted)")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"qb-arena v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """QB Arena CLI."""


def _configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load(config_path: Path | None) -> ArenaConfig:
    if config_path is None:
        return ArenaConfig()
    return load_config(config_path)


def _run_with_store(
    config_path: Path | None,
    verbose: bool,
    action: Callable[[ArenaConfig, ArenaStore], Awaitable[T]],
) -> T:
    """Load config, open the store, run ``action``, and map errors to exit codes."""
    _configure_logging(verbose)
    try:
        config = _load(config_path)

        async def _run() -> T:
            store = ArenaStore(config)
            try:
                return await action(config, store)
            finally:
                await store.close()

        return asyncio.run(_run())

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except ArenaError as e:
        console.print(f"[red]Something went wrong, please try again.[/red] ({e})")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1) from e


def _season_table(left: dict[str, Any], right: dict[str, Any], revealed: bool) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("")
    table.add_column(f"Left ({left['id']})" if revealed else "Left")
    table.add_column(f"Right ({right['id']})" if revealed else "Right")

    if revealed:
        table.add_row("Player", left["player_name"], right["player_name"])
        table.add_row("Elo", str(left["elo_score"]), str(right["elo_score"]))
        table.add_row("Change", f"{left['elo_change']:+.0f}", f"{right['elo_change']:+.0f}")
    table.add_row("Year", str(left["year"]), str(right["year"]))
    table.add_row("Team", left["team"], right["team"])
    for key in left["stats"]:
        label = key.replace("_", " ").title()
        table.add_row(label, str(left["stats"][key]), str(right["stats"][key]))
    table.add_row("Record", left["record"] or "-", right["record"] or "-")
    return table


@app.command("import-seasons")
def import_seasons(
    csv_path: Annotated[Path, typer.Argument(help="CSV file with one season per row")],
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Import qualifying seasons from a CSV file and seed their ratings."""

    async def _action(config: ArenaConfig, store: ArenaStore) -> None:
        importer = SeasonImporter(store.seasons, config.ingest)
        summary = await importer.import_csv(csv_path)
        console.print(
            f"[green]Imported {summary.inserted} seasons[/green] "
            f"({summary.qualifying} qualifying of {summary.read} rows)"
        )

    _run_with_store(config_path, verbose, _action)


@app.command()
def matchup(
    session: SessionOption = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show the next blind matchup for a session."""

    async def _action(config: ArenaConfig, store: ArenaStore) -> None:
        result = await MatchService(config, store).next_matchup(session)
        console.print(f"[bold]Session:[/bold] {result.session_id}", highlight=False, soft_wrap=True)
        console.print(_season_table(result.left, result.right, revealed=False))
        console.print(f"Left id: {result.left['id']}", highlight=False, soft_wrap=True)
        console.print(f"Right id: {result.right['id']}", highlight=False, soft_wrap=True)

    _run_with_store(config_path, verbose, _action)


@app.command()
def vote(
    winner_id: Annotated[str, typer.Argument(help="Id of the season you picked")],
    loser_id: Annotated[str, typer.Argument(help="Id of the other season")],
    session: SessionOption = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Vote for a season and reveal both players."""

    async def _action(config: ArenaConfig, store: ArenaStore) -> None:
        outcome = await MatchService(config, store).record_vote(session, winner_id, loser_id)
        console.print(f"[bold]Session:[/bold] {outcome.session_id}")
        console.print(_season_table(outcome.winner, outcome.loser, revealed=True))

    _run_with_store(config_path, verbose, _action)


@app.command()
def standings(
    year: Annotated[int | None, typer.Option("--year", help="Only this season year")] = None,
    team: Annotated[str | None, typer.Option("--team", help="Only this team")] = None,
    limit: Annotated[int, typer.Option("--limit", min=1, max=500, help="Rows per page")] = 25,
    offset: Annotated[int, typer.Option("--offset", min=0, help="Rows to skip")] = 0,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show the leaderboard."""

    async def _action(config: ArenaConfig, store: ArenaStore) -> None:
        query = StandingsQuery(year=year, team=team, limit=limit, offset=offset)
        page = await MatchService(config, store).standings(query)
        console.print(render_standings(page), markup=False, highlight=False, soft_wrap=True)

    _run_with_store(config_path, verbose, _action)


@app.command()
def validate(
    config_path: Annotated[Path, typer.Argument(help="Path to config YAML file")],
) -> None:
    """Validate a configuration file without touching the database.

    Args:
        config_path: Path to YAML configuration file.
    """
    try:
        config = load_config(config_path)
        console.print("[green]Configuration is valid![/green]")
        console.print(f"  Database: {config.get_database_url()}")
        console.print(f"  Recent window: {config.matchmaking.recent_window}")
        console.print(f"  Tolerance: {config.matchmaking.tolerance}")
        console.print(f"  Weight exponent: {config.matchmaking.weight_exponent}")
        console.print(f"  K-factor: {config.rating.k_factor}")

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e


@app.command()
def info() -> None:
    """Show tool information and example commands."""
    console.print("[bold]QB Arena[/bold]")
    console.print(f"Version: {__version__}\n")

    console.print("[bold]Example Commands:[/bold]")
    console.print("  # Load season stats")
    console.print("  uv run qb-arena import-seasons data/sample_seasons.csv\n")

    console.print("  # Get a blind matchup (prints a session id)")
    console.print("  uv run qb-arena matchup\n")

    console.print("  # Vote within that session")
    console.print("  uv run qb-arena vote <winner-id> <loser-id> --session <session-id>\n")

    console.print("  # Leaderboard for one year")
    console.print("  uv run qb-arena standings --year 2018\n")

    console.print("  # Validate config")
    console.print("  uv run qb-arena validate config.yaml")


if __name__ == "__main__":
    app()
