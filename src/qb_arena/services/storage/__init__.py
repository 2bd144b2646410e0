from .history_repository import HistoryRepository
from .season_repository import SeasonRepository, StandingEntry, StandingsPage
from .session_repository import SessionRepository
from .store import ArenaStore

__all__ = [
    "ArenaStore",
    "HistoryRepository",
    "SeasonRepository",
    "SessionRepository",
    "StandingEntry",
    "StandingsPage",
]
