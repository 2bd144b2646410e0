"""QB Arena.

Blind head-to-head comparisons of quarterback seasons, with every vote
feeding an Elo rating per season.
"""

from qb_arena.services.match.selector import MatchupSelector
from qb_arena.services.rating import RatingUpdater

__version__ = "0.1.0"
__all__ = [
    "MatchupSelector",
    "RatingUpdater",
    "__version__",
]
