"""Matchup selection for a session.

Picks two seasons to show next, balancing three pulls:

1. **Freshness**: seasons from the session's recent matchups are skipped
   while at least two other seasons remain.
2. **Convergence**: the first season is drawn with rating-weighted sampling,
   so the top of the leaderboard gets compared more often.
3. **Fairness**: the second season is drawn from those within the
   tolerance band of the first, falling back to everyone else when the band
   is empty.

Every call appends one shown-pair record. Selection is not idempotent.
"""

from __future__ import annotations

import random
from collections.abc import Sequence

import structlog

from qb_arena.core.config import MatchmakingConfig
from qb_arena.core.errors import InsufficientPopulationError, RatingNotFoundError
from qb_arena.ranking.base import EntityStore, HistoryLog, RatedEntity
from qb_arena.services.match.pairing import Candidate, weighted_sample, within_tolerance

logger = structlog.get_logger()

MIN_POPULATION = 2


class MatchupSelector:
    """Choose the next pair of seasons for a session."""

    def __init__(
        self,
        store: EntityStore,
        history: HistoryLog,
        config: MatchmakingConfig,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize selector.

        Args:
            store: Season/rating store.
            history: Shown-pair log.
            config: Matchmaking settings.
            rng: Random source. Defaults to a fresh, unseeded generator.
        """
        self.store = store
        self.history = history
        self.config = config
        self.rng = rng or random.Random()  # noqa: S311

    async def select_pair(self, session_id: str) -> tuple[Candidate, Candidate]:
        """Select two distinct seasons and record them as shown.

        Args:
            session_id: Opaque session identity.

        Returns:
            (left, right) candidates. The order only assigns display slots.

        Raises:
            InsufficientPopulationError: If fewer than two distinct rated
                seasons exist.
            RatingNotFoundError: If a season in the population has no rating.
        """
        recent = await self.history.recent_pairs(session_id, self.config.recent_window)
        recent_ids = {season_id for p in recent for season_id in (p.season_a_id, p.season_b_id)}

        population = _to_candidates(await self.store.list_entities_with_ratings())
        distinct = len({c.id for c in population})
        if distinct < MIN_POPULATION:
            raise InsufficientPopulationError(distinct)

        pool = self._candidate_pool(population, recent_ids)

        first = self._draw(pool)
        remaining = [c for c in pool if c is not first]
        band = within_tolerance(first, remaining, self.config.tolerance)
        second = self._draw_opponent(first, band or remaining, remaining)

        await self.history.record_pair(session_id, first.id, second.id)

        logger.info(
            "matchup_selected",
            session=session_id,
            a=first.id,
            b=second.id,
            pool=len(pool),
            band=len(band),
            recent=len(recent_ids),
        )
        return first, second

    def _candidate_pool(self, population: list[Candidate], recent_ids: set[str]) -> list[Candidate]:
        """Drop recently shown seasons unless that leaves fewer than two."""
        fresh = [c for c in population if c.id not in recent_ids]
        if len({c.id for c in fresh}) >= MIN_POPULATION:
            return fresh

        logger.debug("freshness_fallback", recent=len(recent_ids), population=len(population))
        return population

    def _draw(self, candidates: Sequence[Candidate]) -> Candidate:
        cfg = self.config
        return weighted_sample(
            candidates,
            lambda c: c.rating,
            self.rng,
            floor=cfg.weight_floor,
            exponent=cfg.weight_exponent,
            lower=cfg.rating_lower_bound,
            upper=cfg.rating_upper_bound,
        )

    def _draw_opponent(
        self,
        first: Candidate,
        options: Sequence[Candidate],
        remaining: Sequence[Candidate],
    ) -> Candidate:
        """Draw a second season that is not the first one.

        Retries up to ``max_redraws`` times, then takes the lowest remaining
        id that differs from the first.
        """
        for _ in range(self.config.max_redraws + 1):
            candidate = self._draw(options)
            if candidate.id != first.id:
                return candidate

        others = sorted((c for c in remaining if c.id != first.id), key=lambda c: c.id)
        logger.warning("opponent_redraw_exhausted", first=first.id, fallback=others[0].id)
        return others[0]


def _to_candidates(population: list[RatedEntity]) -> list[Candidate]:
    """Convert store rows to candidates, failing on any missing rating."""
    candidates = []
    for entity in population:
        if entity.rating is None:
            raise RatingNotFoundError(entity.id)
        candidates.append(Candidate(entity.id, entity.rating, entity.vote_count))
    return candidates
