"""Shared fixtures: in-memory fakes of the store protocols and database-backed stores."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from qb_arena.core.config import ArenaConfig
from qb_arena.core.errors import ConcurrentUpdateConflictError
from qb_arena.models import QBSeason
from qb_arena.ranking.base import (
    RatedEntity,
    RatingSnapshot,
    RatingWrite,
    ShownPair,
    VoteRecord,
)
from qb_arena.services.storage import ArenaStore


class FakeEntityStore:
    """Dict-backed entity store with the same conditional-write contract as the DB."""

    def __init__(self, ratings: dict[str, float | None] | Sequence[RatedEntity]) -> None:
        if isinstance(ratings, dict):
            self.rows = [RatedEntity(sid, score, 0) for sid, score in ratings.items()]
        else:
            self.rows = list(ratings)
        self.votes: list[VoteRecord] = []
        self.calls = 0
        self.commits = 0

    def _find(self, entity_id: str) -> RatedEntity | None:
        return next((row for row in self.rows if row.id == entity_id), None)

    async def list_entities_with_ratings(self) -> list[RatedEntity]:
        self.calls += 1
        return list(self.rows)

    async def get_rating(self, entity_id: str) -> RatingSnapshot | None:
        self.calls += 1
        row = self._find(entity_id)
        if row is None or row.rating is None:
            return None
        return RatingSnapshot(row.rating, row.vote_count)

    async def commit_ratings(
        self,
        writes: Sequence[RatingWrite],
        vote: VoteRecord | None = None,
    ) -> None:
        self.calls += 1
        self.commits += 1
        for write in writes:
            row = self._find(write.entity_id)
            if row is None or RatingSnapshot(row.rating, row.vote_count) != write.expected:
                raise ConcurrentUpdateConflictError([write.entity_id])

        for write in writes:
            row = self._find(write.entity_id)
            votes = row.vote_count + (1 if write.increment_votes else 0)
            self.rows[self.rows.index(row)] = RatedEntity(row.id, write.new_score, votes)

        if vote is not None:
            self.votes.append(vote)

    def rating_of(self, entity_id: str) -> float | None:
        return self._find(entity_id).rating

    def votes_of(self, entity_id: str) -> int:
        return self._find(entity_id).vote_count


class FakeHistoryLog:
    """List-backed history log."""

    def __init__(self, records: Sequence[tuple[str, str, str]] = ()) -> None:
        # (session_id, season_a_id, season_b_id), oldest first
        self.records = list(records)

    async def recent_pairs(self, session_id: str, limit: int) -> list[ShownPair]:
        pairs = [ShownPair(a, b) for sid, a, b in reversed(self.records) if sid == session_id]
        return pairs[:limit]

    async def record_pair(self, session_id: str, season_a_id: str, season_b_id: str) -> None:
        self.records.append((session_id, season_a_id, season_b_id))

    def count(self, session_id: str) -> int:
        return sum(1 for sid, _, _ in self.records if sid == session_id)


def make_season(
    season_id: str,
    *,
    player_name: str | None = None,
    year: int = 2018,
    team: str = "KC",
) -> QBSeason:
    """Build a season with an ordinary stat line."""
    return QBSeason(
        id=season_id,
        slug=season_id,
        player_name=player_name or season_id.replace("-", " ").title(),
        year=year,
        team=team,
        games_played=16,
        pass_attempts=550,
        completions=360,
        passing_yards=4200,
        touchdowns=30,
        interceptions=10,
        passer_rating=98.5,
        rush_attempts=40,
        rush_yards=150,
        rush_touchdowns=1,
        sacks=30,
        fumbles=3,
        wins=10,
        losses=6,
    )


async def seed_ratings(store: ArenaStore, ratings: dict[str, float]) -> None:
    """Store one season per id with the given initial rating."""
    await store.seasons.add_seasons([(make_season(sid), score) for sid, score in ratings.items()])


def duckdb_config(tmp_path) -> ArenaConfig:
    return ArenaConfig(database_url=f"duckdb:///{tmp_path / 'arena.duckdb'}", seed=7)


@pytest.fixture
def sqlite_config(tmp_path) -> ArenaConfig:
    """Config pointing at a throwaway SQLite file."""
    return ArenaConfig(database_url=f"sqlite:///{tmp_path / 'arena.db'}", seed=7)


@pytest.fixture
async def store(sqlite_config):
    """SQLite-backed arena store."""
    arena_store = ArenaStore(sqlite_config)
    yield arena_store
    await arena_store.close()


@pytest.fixture
async def duckdb_store(tmp_path):
    """DuckDB-backed arena store on a throwaway file."""
    arena_store = ArenaStore(duckdb_config(tmp_path))
    yield arena_store
    await arena_store.close()


@pytest.fixture(params=["sqlite", "duckdb"])
async def any_store(request, tmp_path):
    """Each database-backed store in turn."""
    if request.param == "duckdb":
        config = duckdb_config(tmp_path)
    else:
        config = ArenaConfig(database_url=f"sqlite:///{tmp_path / 'arena.db'}", seed=7)
    arena_store = ArenaStore(config)
    yield arena_store
    await arena_store.close()
