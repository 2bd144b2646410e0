"""Tests for applying votes to ratings."""

import pytest
from conftest import FakeEntityStore

from qb_arena.core.config import RatingConfig
from qb_arena.core.errors import (
    ConcurrentUpdateConflictError,
    InvalidPairError,
    RatingNotFoundError,
)
from qb_arena.ranking.base import RatedEntity
from qb_arena.services.rating import RatingUpdater


class ConflictingStore(FakeEntityStore):
    """Store where another writer bumps the winner before each of the first N commits."""

    def __init__(self, ratings, conflicts: int, bump_to: float = 1510.0) -> None:
        super().__init__(ratings)
        self.conflicts = conflicts
        self.bump_to = bump_to

    async def commit_ratings(self, writes, vote=None):
        if self.conflicts > 0:
            self.conflicts -= 1
            row = self._find(writes[0].entity_id)
            self.rows[self.rows.index(row)] = RatedEntity(
                row.id, self.bump_to, row.vote_count + 1
            )
        await super().commit_ratings(writes, vote)


class BrokenStore(FakeEntityStore):
    async def commit_ratings(self, writes, vote=None):
        self.commits += 1
        raise RuntimeError("disk full")


def make_updater(store, **config):
    return RatingUpdater(store, RatingConfig(**config))


class TestApplyResult:
    """Tests for a single vote."""

    @pytest.mark.asyncio
    async def test_equal_ratings(self):
        """Test 1500 vs 1500 stores 1516 and 1484."""
        store = FakeEntityStore({"a": 1500.0, "b": 1500.0})

        change = await make_updater(store).apply_result("a", "b")

        assert store.rating_of("a") == 1516
        assert store.rating_of("b") == 1484
        assert (change.winner_old, change.winner_new) == (1500, 1516)
        assert (change.loser_old, change.loser_new) == (1500, 1484)
        assert change.winner_delta == 16
        assert change.loser_delta == -16

    @pytest.mark.asyncio
    async def test_vote_counts_incremented(self):
        """Test both seasons count the vote."""
        store = FakeEntityStore({"a": 1500.0, "b": 1500.0})
        updater = make_updater(store)

        await updater.apply_result("a", "b")
        await updater.apply_result("b", "a")

        assert store.votes_of("a") == 2
        assert store.votes_of("b") == 2

    @pytest.mark.asyncio
    async def test_vote_recorded_with_session(self):
        """Test the vote row is committed along with the ratings."""
        store = FakeEntityStore({"a": 1500.0, "b": 1500.0})

        await make_updater(store).apply_result("a", "b", session_id="s1")

        assert len(store.votes) == 1
        assert store.votes[0].session_id == "s1"
        assert store.votes[0].winner_id == "a"
        assert store.votes[0].loser_id == "b"

    @pytest.mark.asyncio
    async def test_no_vote_without_session(self):
        """Test ratings alone are written when no session is given."""
        store = FakeEntityStore({"a": 1500.0, "b": 1500.0})

        await make_updater(store).apply_result("a", "b")

        assert store.votes == []

    @pytest.mark.asyncio
    async def test_same_id_rejected_before_store_access(self):
        """Test a self-pair never reaches the store."""
        store = FakeEntityStore({"a": 1500.0})

        with pytest.raises(InvalidPairError):
            await make_updater(store).apply_result("a", "a")

        assert store.calls == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("winner", "loser"), [("", "b"), ("a", ""), ("", "")])
    async def test_empty_id_rejected(self, winner, loser):
        """Test empty ids are rejected before store access."""
        store = FakeEntityStore({"a": 1500.0, "b": 1500.0})

        with pytest.raises(InvalidPairError):
            await make_updater(store).apply_result(winner, loser)

        assert store.calls == 0

    @pytest.mark.asyncio
    async def test_missing_rating(self):
        """Test a season without a rating is reported, and nothing is written."""
        store = FakeEntityStore({"a": 1500.0, "b": None})

        with pytest.raises(RatingNotFoundError) as exc_info:
            await make_updater(store).apply_result("a", "b")

        assert exc_info.value.entity_id == "b"
        assert store.commits == 0
        assert store.rating_of("a") == 1500.0

    @pytest.mark.asyncio
    async def test_unknown_season(self):
        """Test an id with no stored row is reported as not found."""
        store = FakeEntityStore({"a": 1500.0})

        with pytest.raises(RatingNotFoundError):
            await make_updater(store).apply_result("a", "ghost")

    @pytest.mark.asyncio
    async def test_custom_k_factor(self):
        """Test the configured K-factor is used."""
        store = FakeEntityStore({"a": 1500.0, "b": 1500.0})

        await make_updater(store, k_factor=16).apply_result("a", "b")

        assert store.rating_of("a") == 1508
        assert store.rating_of("b") == 1492


class TestRetry:
    """Tests for conflict handling."""

    @pytest.mark.asyncio
    async def test_retries_from_fresh_read(self):
        """Test a lost race is recomputed from the new stored rating."""
        store = ConflictingStore({"a": 1500.0, "b": 1500.0}, conflicts=1, bump_to=1510.0)

        change = await make_updater(store).apply_result("a", "b")

        assert store.commits == 2
        # 1510 beats 1500: expected ~0.514, gain 15.54 -> 1526 and 1484
        assert change.winner_old == 1510.0
        assert store.rating_of("a") == 1526
        assert store.rating_of("b") == 1484

    @pytest.mark.asyncio
    async def test_succeeds_on_last_attempt(self):
        """Test two conflicts still leave the third attempt to succeed."""
        store = ConflictingStore({"a": 1500.0, "b": 1500.0}, conflicts=2)

        await make_updater(store).apply_result("a", "b")

        assert store.commits == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        """Test the conflict surfaces once every attempt has lost."""
        store = ConflictingStore({"a": 1500.0, "b": 1500.0}, conflicts=10)

        with pytest.raises(ConcurrentUpdateConflictError):
            await make_updater(store).apply_result("a", "b", session_id="s1")

        assert store.commits == 3
        assert store.votes == []
        assert store.rating_of("b") == 1500.0

    @pytest.mark.asyncio
    async def test_configured_attempts(self):
        """Test max_attempts bounds the number of commits."""
        store = ConflictingStore({"a": 1500.0, "b": 1500.0}, conflicts=10)

        with pytest.raises(ConcurrentUpdateConflictError):
            await make_updater(store, max_attempts=1).apply_result("a", "b")

        assert store.commits == 1

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self):
        """Test a non-conflict failure propagates on the first attempt."""
        store = BrokenStore({"a": 1500.0, "b": 1500.0})

        with pytest.raises(RuntimeError, match="disk full"):
            await make_updater(store).apply_result("a", "b")

        assert store.commits == 1
