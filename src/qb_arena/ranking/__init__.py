"""Ranking module for QB Arena.

Elo math, initial rating seeding, and the storage protocols the engine
reads and writes through.
"""

from __future__ import annotations

from qb_arena.ranking.base import (
    EntityStore,
    HistoryLog,
    RatedEntity,
    RatingSnapshot,
    RatingWrite,
    ShownPair,
    VoteRecord,
)
from qb_arena.ranking.elo import (
    RatingChange,
    calculate_expected_win_chance,
    round_half_away_from_zero,
    update_elo,
)
from qb_arena.ranking.seeding import calculate_initial_elo, calculate_passer_rating

__all__ = [
    "EntityStore",
    "HistoryLog",
    "RatedEntity",
    "RatingChange",
    "RatingSnapshot",
    "RatingWrite",
    "ShownPair",
    "VoteRecord",
    "calculate_expected_win_chance",
    "calculate_initial_elo",
    "calculate_passer_rating",
    "round_half_away_from_zero",
    "update_elo",
]
