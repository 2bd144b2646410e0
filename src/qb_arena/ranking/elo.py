"""Elo rating calculations for QB Arena."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

DEFAULT_K_FACTOR = 32.0


@dataclass(frozen=True)
class RatingChange:
    """Old and new ratings of both seasons after one vote.

    Attributes:
        winner_id: Season that won the vote.
        loser_id: Season that lost the vote.
        winner_old: Winner rating before the vote.
        winner_new: Winner rating after the vote.
        loser_old: Loser rating before the vote.
        loser_new: Loser rating after the vote.
    """

    winner_id: str
    loser_id: str
    winner_old: float
    winner_new: float
    loser_old: float
    loser_new: float

    @property
    def winner_delta(self) -> float:
        return self.winner_new - self.winner_old

    @property
    def loser_delta(self) -> float:
        return self.loser_new - self.loser_old


def calculate_expected_win_chance(rating_a: float, rating_b: float) -> float:
    """Calculate expected win probability for season A against season B.

    Uses the standard Elo formula:
    E_A = 1 / (1 + 10^((R_B - R_A) / 400))

    Args:
        rating_a: Rating of season A.
        rating_b: Rating of season B.

    Returns:
        Probability that A wins (0.0 to 1.0).
    """
    return 1.0 / (1.0 + 10 ** ((rating_b - rating_a) / 400))


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3).

    Unlike the built-in ``round``, which rounds ties to even.
    """
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def update_elo(
    winner_rating: float,
    loser_rating: float,
    k_factor: float = DEFAULT_K_FACTOR,
) -> tuple[int, int]:
    """Compute new ratings after a vote.

    Both expectations are computed from their own formula rather than as
    ``1 - other``, and each new rating is rounded on its own. The two deltas
    therefore do not always cancel exactly.

    Args:
        winner_rating: Current rating of the winner.
        loser_rating: Current rating of the loser.
        k_factor: Volatility of one vote.

    Returns:
        Tuple of (new_winner_rating, new_loser_rating).
    """
    expected_winner = calculate_expected_win_chance(winner_rating, loser_rating)
    expected_loser = calculate_expected_win_chance(loser_rating, winner_rating)

    new_winner = round_half_away_from_zero(winner_rating + k_factor * (1.0 - expected_winner))
    new_loser = round_half_away_from_zero(loser_rating + k_factor * (0.0 - expected_loser))

    return new_winner, new_loser
