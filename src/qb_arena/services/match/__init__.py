from .pairing import (
    Candidate,
    normalize_rating,
    sampling_weight,
    weighted_choice,
    weighted_sample,
    within_tolerance,
)
from .selector import MatchupSelector

__all__ = [
    "Candidate",
    "MatchupSelector",
    "normalize_rating",
    "sampling_weight",
    "weighted_choice",
    "weighted_sample",
    "within_tolerance",
]
