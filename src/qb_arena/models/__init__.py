from qb_arena.models.matchup import MatchupHistory, UserSession, Vote
from qb_arena.models.rating import EloRating
from qb_arena.models.season import QBSeason

__all__ = ["EloRating", "MatchupHistory", "QBSeason", "UserSession", "Vote"]
