"""Rating-weighted sampling for matchup selection."""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

DEFAULT_WEIGHT_FLOOR = 0.1
DEFAULT_WEIGHT_EXPONENT = 2.0
DEFAULT_LOWER_BOUND = 1000.0
DEFAULT_UPPER_BOUND = 2200.0


@dataclass(frozen=True)
class Candidate:
    """A season eligible for a matchup.

    Attributes:
        id: Season identifier.
        rating: Current Elo rating.
        vote_count: Votes the season has taken part in.
    """

    id: str
    rating: float
    vote_count: int = 0


def normalize_rating(
    rating: float,
    lower: float = DEFAULT_LOWER_BOUND,
    upper: float = DEFAULT_UPPER_BOUND,
) -> float:
    """Map a rating onto [0.0, 1.0] using fixed reference bounds.

    The bounds are configuration, not the observed min/max, so a season's
    weight does not move when other seasons are added.
    """
    ratio = (rating - lower) / (upper - lower)
    return min(1.0, max(0.0, ratio))


def sampling_weight(
    rating: float,
    floor: float = DEFAULT_WEIGHT_FLOOR,
    exponent: float = DEFAULT_WEIGHT_EXPONENT,
    lower: float = DEFAULT_LOWER_BOUND,
    upper: float = DEFAULT_UPPER_BOUND,
) -> float:
    """Weight of a rating in a draw: ``max(floor, normalize(rating)) ** exponent``."""
    return max(floor, normalize_rating(rating, lower, upper)) ** exponent


def weighted_choice(weighted: Sequence[tuple[T, float]], rng: random.Random) -> T:
    """Draw one item with probability proportional to its weight.

    Walks the list subtracting weights from a uniform draw in
    ``[0, total)`` and returns the item where the remainder drops below
    zero. Equal weights give a uniform draw. If rounding keeps the remainder
    from crossing zero, the last item is returned.

    Args:
        weighted: (item, weight) pairs with positive weights.
        rng: Random source.

    Returns:
        The chosen item.

    Raises:
        ValueError: If ``weighted`` is empty.
    """
    if not weighted:
        msg = "Cannot sample from an empty candidate list"
        raise ValueError(msg)

    total = sum(weight for _, weight in weighted)
    remainder = rng.random() * total
    for item, weight in weighted:
        remainder -= weight
        if remainder < 0:
            return item

    return weighted[-1][0]


def weighted_sample(
    candidates: Sequence[T],
    rating_of: Callable[[T], float],
    rng: random.Random,
    floor: float = DEFAULT_WEIGHT_FLOOR,
    exponent: float = DEFAULT_WEIGHT_EXPONENT,
    lower: float = DEFAULT_LOWER_BOUND,
    upper: float = DEFAULT_UPPER_BOUND,
) -> T:
    """Draw one candidate, favouring higher ratings.

    Args:
        candidates: Non-empty candidates to draw from.
        rating_of: Returns a candidate's rating.
        rng: Random source.
        floor: Lower clamp of the normalized rating.
        exponent: Power applied to the clamped ratio.
        lower: Rating that normalizes to 0.0.
        upper: Rating that normalizes to 1.0.

    Returns:
        The chosen candidate.
    """
    weighted = [
        (c, sampling_weight(rating_of(c), floor, exponent, lower, upper)) for c in candidates
    ]
    return weighted_choice(weighted, rng)


def within_tolerance(
    anchor: Candidate,
    candidates: Sequence[Candidate],
    tolerance: float,
) -> list[Candidate]:
    """Candidates whose rating is within ``tolerance`` points of the anchor."""
    return [c for c in candidates if abs(c.rating - anchor.rating) <= tolerance]
