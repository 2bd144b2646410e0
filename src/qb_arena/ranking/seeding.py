"""Initial rating seeding from season statistics.

A season enters the arena with a rating derived from its box-score line, so
that early matchups are already roughly fair before any votes come in.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from qb_arena.ranking.elo import round_half_away_from_zero

if TYPE_CHECKING:
    from qb_arena.services.ingest import SeasonStats

BASE_ELO = 1200
COMPOSITE_SCALE = 0.5

# Component weights of the composite score
EFFICIENCY_WEIGHT = 0.4
VOLUME_WEIGHT = 0.2
DUAL_THREAT_WEIGHT = 0.15
BALL_SECURITY_WEIGHT = 0.15
PASSER_RATING_WEIGHT = 0.1

PASSER_RATING_COMPONENT_CAP = 2.375


def _clamp_component(value: float) -> float:
    return max(0.0, min(PASSER_RATING_COMPONENT_CAP, value))


def calculate_passer_rating(
    completions: int,
    attempts: int,
    yards: int,
    touchdowns: int,
    interceptions: int,
) -> float:
    """Calculate the NFL passer rating.

    Each of the four components is clamped to [0, 2.375], so the rating
    ranges from 0.0 to 158.3.

    Args:
        completions: Completed passes.
        attempts: Pass attempts.
        yards: Passing yards.
        touchdowns: Passing touchdowns.
        interceptions: Interceptions thrown.

    Returns:
        Passer rating rounded to two decimals; 0.0 when there were no attempts.
    """
    if attempts == 0:
        return 0.0

    completion = _clamp_component((completions / attempts - 0.3) * 5)
    per_attempt = _clamp_component((yards / attempts - 3) * 0.25)
    touchdown = _clamp_component((touchdowns / attempts) * 20)
    interception = _clamp_component(2.375 - (interceptions / attempts) * 25)

    rating = ((completion + per_attempt + touchdown + interception) / 6) * 100
    return round(rating, 2)


def calculate_initial_elo(stats: SeasonStats) -> int:
    """Seed a season's rating from a weighted composite of its statistics.

    Components:
    - Efficiency (40%): completion %, yards per attempt, TD rate, INT rate
    - Volume (20%): yards and touchdowns per game
    - Dual threat (15%): rushing yards per game and rushing touchdowns
    - Ball security (15%): turnovers per game and sack rate
    - Passer rating (10%)

    Qualifying seasons land roughly between 1300 and 1900.

    Args:
        stats: Season statistics with a computed passer rating.

    Returns:
        Initial rating.

    Raises:
        ValueError: If the season has no games or no pass attempts.
    """
    if stats.games_played <= 0 or stats.pass_attempts <= 0:
        msg = f"Cannot seed a season without games and attempts: {stats.player_name} {stats.year}"
        raise ValueError(msg)

    attempts = stats.pass_attempts
    games = stats.games_played

    completion_pct = stats.completions / attempts * 100
    yards_per_attempt = stats.passing_yards / attempts
    td_rate = stats.touchdowns / attempts * 100
    int_rate = stats.interceptions / attempts * 100
    efficiency = (
        completion_pct * 2 + yards_per_attempt * 30 + td_rate * 100 + (2.5 - int_rate) * 100
    )

    volume = stats.passing_yards / games * 0.8 + stats.touchdowns / games * 50

    dual_threat = stats.rush_yards / games * 2 + stats.rush_touchdowns * 30

    turnovers_per_game = (stats.interceptions + stats.fumbles) / games
    sack_rate = stats.sacks / attempts
    ball_security = (1.0 - turnovers_per_game) * 100 + (0.05 - sack_rate) * 500

    passer_rating = stats.passer_rating * 2

    composite = (
        efficiency * EFFICIENCY_WEIGHT
        + volume * VOLUME_WEIGHT
        + dual_threat * DUAL_THREAT_WEIGHT
        + ball_security * BALL_SECURITY_WEIGHT
        + passer_rating * PASSER_RATING_WEIGHT
    )
    return round_half_away_from_zero(BASE_ELO + composite * COMPOSITE_SCALE)
