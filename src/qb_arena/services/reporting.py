"""Season views and leaderboard rendering for QB Arena."""

from __future__ import annotations

from typing import Any

from tabulate import tabulate

from qb_arena.models import QBSeason
from qb_arena.services.storage import StandingsPage

STANDINGS_HEADERS = ("Rank", "Player", "Year", "Team", "Elo", "Votes", "Rating", "Yds", "TD", "INT")


def _record(season: QBSeason) -> str | None:
    if season.wins is None or season.losses is None:
        return None
    return f"{season.wins}-{season.losses}"


def _ratio(numerator: int, denominator: int, scale: float = 1.0) -> str:
    if denominator <= 0:
        return "0.0"
    return f"{numerator / denominator * scale:.1f}"


def format_season_for_matchup(season: QBSeason) -> dict[str, Any]:
    """Build the blind view of a season: statistics only, no player name or rating.

    Args:
        season: Stored season.

    Returns:
        Dict with id, year, team, stats and record.
    """
    return {
        "id": season.id,
        "year": season.year,
        "team": season.team,
        "stats": {
            "games_played": season.games_played,
            "completions": season.completions,
            "attempts": season.pass_attempts,
            "completion_pct": _ratio(season.completions, season.pass_attempts, 100),
            "passing_yards": season.passing_yards,
            "touchdowns": season.touchdowns,
            "interceptions": season.interceptions,
            "passer_rating": f"{season.passer_rating:.1f}",
            "rush_attempts": season.rush_attempts,
            "rush_yards": season.rush_yards,
            "rush_touchdowns": season.rush_touchdowns,
            "rush_yards_per_attempt": _ratio(season.rush_yards, season.rush_attempts),
            "sacks": season.sacks,
            "fumbles": season.fumbles,
        },
        "record": _record(season),
    }


def reveal_season(season: QBSeason, elo_score: float | None) -> dict[str, Any]:
    """Blind view plus the player's name and rating, shown after a vote."""
    return {
        **format_season_for_matchup(season),
        "player_name": season.player_name,
        "elo_score": int(elo_score) if elo_score is not None else None,
    }


def render_standings(page: StandingsPage) -> str:
    """Render a leaderboard page as a GitHub-style table.

    Args:
        page: Standings page from the season repository.

    Returns:
        Table text, or a short notice when the page is empty.
    """
    if not page.entries:
        return "No rated seasons match the filters."

    rows = [
        (
            entry.rank,
            entry.season.player_name,
            entry.season.year,
            entry.season.team,
            int(entry.elo_score),
            entry.vote_count,
            f"{entry.season.passer_rating:.1f}",
            entry.season.passing_yards,
            entry.season.touchdowns,
            entry.season.interceptions,
        )
        for entry in page.entries
    ]
    table = tabulate(rows, headers=STANDINGS_HEADERS, tablefmt="github")
    first, last = page.entries[0].rank, page.entries[-1].rank
    return f"{table}\n\nShowing {first}-{last} of {page.total}"
