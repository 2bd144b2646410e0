"""Match service: the request-facing side of matchmaking and voting."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import BaseModel, Field

from qb_arena.core.config import ArenaConfig
from qb_arena.core.errors import InvalidPairError
from qb_arena.ranking.elo import RatingChange
from qb_arena.services.match.selector import MatchupSelector
from qb_arena.services.rating import RatingUpdater
from qb_arena.services.reporting import format_season_for_matchup, reveal_season
from qb_arena.services.storage import ArenaStore, StandingsPage

logger = structlog.get_logger()


@dataclass(frozen=True)
class Matchup:
    """Two blind seasons shown to a session, in left/right slot order."""

    session_id: str
    left: dict[str, Any]
    right: dict[str, Any]


@dataclass(frozen=True)
class VoteOutcome:
    """Rating change from a vote, with both seasons revealed."""

    session_id: str
    change: RatingChange
    winner: dict[str, Any]
    loser: dict[str, Any]


class StandingsQuery(BaseModel):
    """Leaderboard filters and pagination."""

    year: int | None = None
    team: str | None = None
    limit: int = Field(default=100, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class MatchService:
    """Orchestrates session lookup, pair selection, voting and reveal.

    Coordinates between the selector, the rating updater, and the storage
    layer. Hiding and revealing player identity happens here, not in the
    engine.
    """

    def __init__(
        self,
        config: ArenaConfig,
        store: ArenaStore,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize match service.

        Args:
            config: Arena configuration.
            store: Storage layer for seasons, history and sessions.
            rng: Random source for selection. Seeded from ``config.seed`` when omitted.
        """
        self.config = config
        self.store = store
        self.rng = rng or random.Random(config.seed)  # noqa: S311
        self.selector = MatchupSelector(store.seasons, store.history, config.matchmaking, self.rng)
        self.updater = RatingUpdater(store.seasons, config.rating)

    async def next_matchup(self, session_id: str | None = None) -> Matchup:
        """Select the next pair for a session and return their blind views.

        Args:
            session_id: Existing session id, or None to start a new session.

        Returns:
            Matchup with the resolved session id.
        """
        session_id = await self.store.sessions.get_or_create(session_id)
        first, second = await self.selector.select_pair(session_id)

        seasons = await self.store.seasons.get_seasons([first.id, second.id])
        return Matchup(
            session_id=session_id,
            left=format_season_for_matchup(seasons[first.id]),
            right=format_season_for_matchup(seasons[second.id]),
        )

    async def record_vote(
        self,
        session_id: str | None,
        winner_id: str,
        loser_id: str,
    ) -> VoteOutcome:
        """Record a vote, update both ratings, and reveal the two seasons.

        Args:
            session_id: Voting session id, or None to start a new session.
            winner_id: Season picked.
            loser_id: Season passed over.

        Returns:
            VoteOutcome with the rating change and revealed seasons.

        Raises:
            InvalidPairError: If the ids are empty, equal, or unknown.
        """
        if not winner_id or not loser_id:
            raise InvalidPairError("winner and loser ids are required")
        if winner_id == loser_id:
            raise InvalidPairError("winner and loser must be different seasons")

        seasons = await self.store.seasons.get_seasons([winner_id, loser_id])
        missing = [sid for sid in (winner_id, loser_id) if sid not in seasons]
        if missing:
            raise InvalidPairError(f"unknown season ids: {', '.join(missing)}")

        session_id = await self.store.sessions.get_or_create(session_id)
        change = await self.updater.apply_result(winner_id, loser_id, session_id=session_id)

        logger.debug("vote_recorded", session=session_id, winner=winner_id, loser=loser_id)
        return VoteOutcome(
            session_id=session_id,
            change=change,
            winner={
                **reveal_season(seasons[winner_id], change.winner_new),
                "elo_change": change.winner_delta,
            },
            loser={
                **reveal_season(seasons[loser_id], change.loser_new),
                "elo_change": change.loser_delta,
            },
        )

    async def standings(self, query: StandingsQuery | None = None) -> StandingsPage:
        """Get a leaderboard page."""
        query = query or StandingsQuery()
        return await self.store.seasons.get_standings(
            year=query.year,
            team=query.team,
            limit=query.limit,
            offset=query.offset,
        )
