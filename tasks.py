from pathlib import Path

from invoke import task
from invoke.exceptions import Exit

REPO_ROOT = Path(__file__).resolve().parent
SAMPLE_SEASONS = REPO_ROOT / "data" / "sample_seasons.csv"
DEMO_DB = REPO_ROOT / ".demo" / "arena.duckdb"


@task
def lint(c):
    c.run("ruff check .")


@task
def format_check(c):
    c.run("ruff format --check .")


@task
def test(c):
    c.run("pytest")


@task
def ci(c):
    lint(c)
    format_check(c)
    test(c)


@task
def demo(c):
    """Load the sample seasons into a scratch database and print the leaderboard."""
    if not SAMPLE_SEASONS.exists():
        raise Exit(f"Missing sample data: {SAMPLE_SEASONS}")

    DEMO_DB.parent.mkdir(parents=True, exist_ok=True)
    env = {"QB_ARENA_DATABASE_URL": f"duckdb:///{DEMO_DB}"}
    c.run(f"qb-arena import-seasons {SAMPLE_SEASONS}", env=env)
    c.run("qb-arena matchup", env=env)
    c.run("qb-arena standings --limit 10", env=env)
