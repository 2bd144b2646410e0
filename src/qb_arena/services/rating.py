"""Apply a vote to the stored ratings of two seasons."""

from __future__ import annotations

import asyncio
from functools import partial

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from qb_arena.core.config import RatingConfig
from qb_arena.core.errors import (
    ConcurrentUpdateConflictError,
    InvalidPairError,
    RatingNotFoundError,
)
from qb_arena.ranking.base import EntityStore, RatingSnapshot, RatingWrite, VoteRecord
from qb_arena.ranking.elo import RatingChange, update_elo

logger = structlog.get_logger()


class RatingUpdater:
    """Read-modify-write of two ratings guarded by compare-and-swap.

    The store rejects a write whose rating moved since it was read. On such
    a conflict the whole update is redone from a fresh read, up to
    ``max_attempts`` times. No other error is retried.
    """

    def __init__(self, store: EntityStore, config: RatingConfig) -> None:
        """Initialize rating updater.

        Args:
            store: Season/rating store.
            config: Rating settings.
        """
        self.store = store
        self.config = config

    async def apply_result(
        self,
        winner_id: str,
        loser_id: str,
        session_id: str | None = None,
    ) -> RatingChange:
        """Update ratings after a vote.

        Args:
            winner_id: Season the session picked.
            loser_id: Season the session passed over.
            session_id: When given, the vote is recorded in the same
                transaction as the rating writes.

        Returns:
            Old and new ratings for both seasons.

        Raises:
            InvalidPairError: If an id is empty or both ids are equal. Checked
                before any store access.
            RatingNotFoundError: If either season has no rating.
            ConcurrentUpdateConflictError: If every attempt lost a race.
        """
        if not winner_id or not loser_id:
            raise InvalidPairError("winner and loser ids are required")
        if winner_id == loser_id:
            raise InvalidPairError("winner and loser must be different seasons")

        vote = VoteRecord(session_id, winner_id, loser_id) if session_id is not None else None

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_attempts),
            retry=retry_if_exception_type(ConcurrentUpdateConflictError),
            before_sleep=partial(_log_conflict, winner_id, loser_id),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    change = await self._apply_once(winner_id, loser_id, vote)
        except ConcurrentUpdateConflictError:
            logger.error("rating_update_failed", winner=winner_id, loser=loser_id)
            raise

        logger.info(
            "rating_updated",
            winner=winner_id,
            loser=loser_id,
            winner_delta=change.winner_delta,
            loser_delta=change.loser_delta,
            attempts=attempt.retry_state.attempt_number,
        )
        return change

    async def _apply_once(
        self,
        winner_id: str,
        loser_id: str,
        vote: VoteRecord | None,
    ) -> RatingChange:
        winner, loser = await asyncio.gather(
            self._require_rating(winner_id),
            self._require_rating(loser_id),
        )

        new_winner, new_loser = update_elo(winner.score, loser.score, self.config.k_factor)

        await self.store.commit_ratings(
            [
                RatingWrite(winner_id, winner, float(new_winner)),
                RatingWrite(loser_id, loser, float(new_loser)),
            ],
            vote,
        )

        return RatingChange(
            winner_id=winner_id,
            loser_id=loser_id,
            winner_old=winner.score,
            winner_new=float(new_winner),
            loser_old=loser.score,
            loser_new=float(new_loser),
        )

    async def _require_rating(self, entity_id: str) -> RatingSnapshot:
        rating = await self.store.get_rating(entity_id)
        if rating is None:
            raise RatingNotFoundError(entity_id)
        return rating


def _log_conflict(winner_id: str, loser_id: str, retry_state: RetryCallState) -> None:
    logger.warning(
        "rating_update_conflict",
        winner=winner_id,
        loser=loser_id,
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )
