"""Database persistence for seasons and their ratings."""

from __future__ import annotations

import sqlite3
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import duckdb
import structlog
from sqlalchemy import func, insert, update
from sqlalchemy.exc import DBAPIError
from sqlmodel import Session, col, select

from qb_arena.core.errors import ConcurrentUpdateConflictError
from qb_arena.models import EloRating, QBSeason, Vote
from qb_arena.ranking.base import RatedEntity, RatingSnapshot, RatingWrite, VoteRecord

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Connection, Engine

logger = structlog.get_logger()


@dataclass(frozen=True)
class StandingEntry:
    """One leaderboard row with its global rank."""

    rank: int
    season: QBSeason
    elo_score: float
    vote_count: int


@dataclass(frozen=True)
class StandingsPage:
    """A page of the leaderboard plus the available filter values."""

    entries: list[StandingEntry]
    total: int
    years: list[int] = field(default_factory=list)
    teams: list[str] = field(default_factory=list)


def _is_write_conflict(error: Exception) -> bool:
    """Whether the database rejected a write because of a concurrent transaction."""
    original = getattr(error, "orig", error)
    if isinstance(original, duckdb.TransactionException):
        return True
    # SQLite refuses a lock upgrade that could deadlock instead of waiting
    return isinstance(original, sqlite3.OperationalError) and "locked" in str(original)


class SeasonRepository(AsyncRepository):
    """Persist and query seasons and ratings."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def list_entities_with_ratings(self) -> list[RatedEntity]:
        """List every season with its rating; missing ratings come back as None."""

        def _get(session: Session) -> list[RatedEntity]:
            statement = (
                select(col(QBSeason.id), col(EloRating.elo_score), col(EloRating.vote_count))
                .outerjoin(EloRating, col(EloRating.season_id) == col(QBSeason.id))
                .order_by(col(QBSeason.id))
            )
            return [
                RatedEntity(id=season_id, rating=score, vote_count=votes or 0)
                for season_id, score, votes in session.exec(statement).all()
            ]

        return await self._run_session(_get)

    async def get_rating(self, entity_id: str) -> RatingSnapshot | None:
        """Get a season's current rating."""

        def _get(session: Session) -> RatingSnapshot | None:
            statement = select(col(EloRating.elo_score), col(EloRating.vote_count)).where(
                col(EloRating.season_id) == entity_id
            )
            row = session.exec(statement).first()
            if row is None:
                return None
            score, votes = row
            return RatingSnapshot(score=score, vote_count=votes)

        return await self._run_session(_get)

    async def commit_ratings(
        self,
        writes: Sequence[RatingWrite],
        vote: VoteRecord | None = None,
    ) -> None:
        """Apply conditional rating writes and the optional vote in one transaction.

        Each write only matches a row whose score and vote count still equal
        the snapshot it was computed from. Vote counts never go down, so a
        score that drifted away and back still counts as changed.
        """

        def _commit(connection: Connection) -> None:
            now = datetime.now(UTC)
            for write in writes:
                values: dict[str, object] = {"elo_score": write.new_score, "updated_at": now}
                if write.increment_votes:
                    values["vote_count"] = col(EloRating.vote_count) + 1

                statement = (
                    update(EloRating)
                    .where(
                        col(EloRating.season_id) == write.entity_id,
                        col(EloRating.elo_score) == write.expected.score,
                        col(EloRating.vote_count) == write.expected.vote_count,
                    )
                    .values(values)
                    .returning(col(EloRating.season_id))
                )
                if connection.execute(statement).first() is None:
                    raise ConcurrentUpdateConflictError([write.entity_id])

            if vote is not None:
                connection.execute(
                    insert(Vote).values(
                        id=str(uuid.uuid4()),
                        session_id=vote.session_id,
                        winner_season_id=vote.winner_id,
                        loser_season_id=vote.loser_id,
                        created_at=now,
                    )
                )

        try:
            await self._run_transaction(_commit)
        except (DBAPIError, duckdb.TransactionException) as e:
            if _is_write_conflict(e):
                raise ConcurrentUpdateConflictError([w.entity_id for w in writes]) from e
            raise

    async def get_seasons(self, season_ids: Sequence[str]) -> dict[str, QBSeason]:
        """Get seasons by id. Unknown ids are left out of the result."""

        def _get(session: Session) -> dict[str, QBSeason]:
            statement = select(QBSeason).where(col(QBSeason.id).in_(list(season_ids)))
            return {season.id: season for season in session.exec(statement).all()}

        return await self._run_session(_get)

    async def add_seasons(self, seeded: Sequence[tuple[QBSeason, float]]) -> int:
        """Insert seasons with their initial ratings, skipping slugs already stored.

        Args:
            seeded: (season, initial_rating) pairs.

        Returns:
            Number of seasons inserted.
        """

        def _save(session: Session) -> int:
            slugs = [season.slug for season, _ in seeded]
            existing = set(
                session.exec(select(col(QBSeason.slug)).where(col(QBSeason.slug).in_(slugs)))
            )

            inserted = 0
            for season, initial_rating in seeded:
                if season.slug in existing:
                    continue
                session.add(season)
                session.add(EloRating(season_id=season.id, elo_score=initial_rating))
                existing.add(season.slug)
                inserted += 1

            session.commit()
            return inserted

        inserted = await self._run_session(_save)
        logger.info("seasons_saved", inserted=inserted, skipped=len(seeded) - inserted)
        return inserted

    async def get_standings(
        self,
        year: int | None = None,
        team: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> StandingsPage:
        """Get a leaderboard page sorted by rating, ranked across all matching rows."""

        def _get(session: Session) -> StandingsPage:
            filters = []
            if year is not None:
                filters.append(col(QBSeason.year) == year)
            if team is not None:
                filters.append(col(QBSeason.team) == team)

            statement = (
                select(QBSeason, col(EloRating.elo_score), col(EloRating.vote_count))
                .join(EloRating, col(EloRating.season_id) == col(QBSeason.id))
                .where(*filters)
                .order_by(col(EloRating.elo_score).desc(), col(QBSeason.id))
                .offset(offset)
                .limit(limit)
            )
            entries = [
                StandingEntry(
                    rank=offset + index + 1,
                    season=season,
                    elo_score=score,
                    vote_count=votes,
                )
                for index, (season, score, votes) in enumerate(session.exec(statement).all())
            ]

            count_statement = (
                select(func.count())
                .select_from(QBSeason)
                .join(EloRating, col(EloRating.season_id) == col(QBSeason.id))
                .where(*filters)
            )
            total = session.exec(count_statement).one()

            years = session.exec(
                select(col(QBSeason.year)).distinct().order_by(col(QBSeason.year).desc())
            ).all()
            teams = session.exec(
                select(col(QBSeason.team)).distinct().order_by(col(QBSeason.team))
            ).all()

            return StandingsPage(entries=entries, total=total, years=list(years), teams=list(teams))

        return await self._run_session(_get)
