"""Tests for matchup selection."""

import random
from collections import Counter

import pytest
from conftest import FakeEntityStore, FakeHistoryLog

from qb_arena.core.config import MatchmakingConfig
from qb_arena.core.errors import InsufficientPopulationError, RatingNotFoundError
from qb_arena.ranking.base import EntityStore, HistoryLog, RatedEntity
from qb_arena.services.match.selector import MatchupSelector

SESSION = "session-1"


class ConstantRandom(random.Random):
    """Random source whose ``random()`` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class FailingHistoryLog(FakeHistoryLog):
    async def record_pair(self, session_id, season_a_id, season_b_id):
        raise RuntimeError("history unavailable")


def make_selector(ratings, history=None, rng=None, **config):
    store = FakeEntityStore(ratings)
    history = history if history is not None else FakeHistoryLog()
    selector = MatchupSelector(
        store,
        history,
        MatchmakingConfig(**config),
        rng or random.Random(11),
    )
    return selector, store, history


def test_fakes_satisfy_protocols():
    """Test the in-memory fakes implement the store protocols."""
    assert isinstance(FakeEntityStore({}), EntityStore)
    assert isinstance(FakeHistoryLog(), HistoryLog)


class TestPopulation:
    """Tests for population checks."""

    @pytest.mark.asyncio
    async def test_population_of_two(self):
        """Test the only two seasons are paired, once each."""
        selector, _, history = make_selector({"a": 1500, "b": 1500})

        first, second = await selector.select_pair(SESSION)

        assert {first.id, second.id} == {"a", "b"}
        assert history.count(SESSION) == 1

    @pytest.mark.asyncio
    async def test_empty_population(self):
        """Test no seasons at all is rejected."""
        selector, _, history = make_selector({})

        with pytest.raises(InsufficientPopulationError) as exc_info:
            await selector.select_pair(SESSION)

        assert exc_info.value.available == 0
        assert history.records == []

    @pytest.mark.asyncio
    async def test_single_season(self):
        """Test one season cannot form a pair."""
        selector, _, history = make_selector({"a": 1500})

        with pytest.raises(InsufficientPopulationError):
            await selector.select_pair(SESSION)

        assert history.records == []

    @pytest.mark.asyncio
    async def test_duplicate_ids_count_once(self):
        """Test a population with one distinct id is insufficient."""
        selector, _, _ = make_selector([RatedEntity("a", 1500), RatedEntity("a", 1500)])

        with pytest.raises(InsufficientPopulationError):
            await selector.select_pair(SESSION)

    @pytest.mark.asyncio
    async def test_missing_rating_is_an_error(self):
        """Test a season without a rating is never defaulted."""
        selector, _, history = make_selector({"a": 1500, "b": None, "c": 1500})

        with pytest.raises(RatingNotFoundError) as exc_info:
            await selector.select_pair(SESSION)

        assert exc_info.value.entity_id == "b"
        assert history.records == []


class TestSelection:
    """Tests for pair selection behaviour."""

    @pytest.mark.asyncio
    async def test_never_pairs_a_season_with_itself(self):
        """Test both sides always differ across many draws."""
        ratings = {f"s{i}": 1000 + i * 37 for i in range(30)}
        selector, _, _ = make_selector(ratings, recent_window=0)

        for _ in range(300):
            first, second = await selector.select_pair(SESSION)
            assert first.id != second.id

    @pytest.mark.asyncio
    async def test_one_record_per_call(self):
        """Test every successful call appends exactly one record, in draw order."""
        selector, _, history = make_selector({"a": 1500, "b": 1520, "c": 1800})

        results = [await selector.select_pair(SESSION) for _ in range(5)]

        assert history.count(SESSION) == 5
        assert [(a, b) for _, a, b in history.records] == [(f.id, s.id) for f, s in results]

    @pytest.mark.asyncio
    async def test_record_failure_propagates(self):
        """Test a failed history write fails the selection."""
        selector, _, _ = make_selector({"a": 1500, "b": 1500}, history=FailingHistoryLog())

        with pytest.raises(RuntimeError, match="history unavailable"):
            await selector.select_pair(SESSION)

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self):
        """Test one session's history does not affect another."""
        history = FakeHistoryLog([("other", "a", "b")])
        selector, _, _ = make_selector({"a": 1500, "b": 1500, "c": 1500}, history=history)

        await selector.select_pair(SESSION)

        assert history.count(SESSION) == 1
        assert history.count("other") == 1

    @pytest.mark.asyncio
    async def test_seeded_selection_is_reproducible(self):
        """Test the same seed gives the same sequence of pairs."""
        ratings = {f"s{i}": 1200 + i * 25 for i in range(12)}

        async def run(seed):
            selector, _, _ = make_selector(ratings, rng=random.Random(seed))
            return [
                tuple(c.id for c in await selector.select_pair(SESSION)) for _ in range(6)
            ]

        assert await run(99) == await run(99)


class TestFreshness:
    """Tests for recent-pair avoidance."""

    @pytest.mark.asyncio
    async def test_recent_seasons_are_skipped(self):
        """Test seasons from recent pairs are excluded when enough others remain."""
        history = FakeHistoryLog([(SESSION, "a", "b"), (SESSION, "c", "d")])
        ratings = {sid: 1500 for sid in "abcdef"}
        selector, _, _ = make_selector(ratings, history=history)

        for _ in range(20):
            first, second = await selector.select_pair(SESSION)
            assert {first.id, second.id} == {"e", "f"}
            history.records = history.records[:2]

    @pytest.mark.asyncio
    async def test_falls_back_to_full_population(self):
        """Test recent seasons return when fewer than two fresh ones remain."""
        history = FakeHistoryLog([(SESSION, "a", "b")])
        selector, _, _ = make_selector({"a": 1500, "b": 1500, "c": 1500}, history=history)

        seen = set()
        for _ in range(30):
            first, second = await selector.select_pair(SESSION)
            seen.update({first.id, second.id})

        assert seen == {"a", "b", "c"}

    @pytest.mark.asyncio
    async def test_only_window_is_considered(self):
        """Test pairs older than the recent window are eligible again."""
        # Oldest first: a/b fell out of a window of one
        history = FakeHistoryLog([(SESSION, "a", "b"), (SESSION, "c", "d")])
        ratings = {sid: 1500 for sid in "abcd"}
        selector, _, _ = make_selector(ratings, history=history, recent_window=1)

        first, second = await selector.select_pair(SESSION)

        assert {first.id, second.id} == {"a", "b"}

    @pytest.mark.asyncio
    async def test_zero_window_ignores_history(self):
        """Test a window of zero never excludes anything."""
        history = FakeHistoryLog([(SESSION, "a", "b")])
        selector, _, _ = make_selector(
            {"a": 1500, "b": 1500}, history=history, recent_window=0
        )

        first, second = await selector.select_pair(SESSION)

        assert {first.id, second.id} == {"a", "b"}

    @pytest.mark.asyncio
    async def test_consecutive_calls_rotate_through_population(self):
        """Test a session does not see the same season twice while fresh ones remain."""
        ratings = {f"s{i}": 1500 for i in range(10)}
        selector, _, _ = make_selector(ratings)

        shown = []
        for _ in range(5):
            first, second = await selector.select_pair(SESSION)
            shown.extend([first.id, second.id])

        assert len(set(shown)) == 10


class TestFairness:
    """Tests for the tolerance band on the second pick."""

    @pytest.mark.asyncio
    async def test_second_pick_stays_within_band(self):
        """Test the opponent comes from within the tolerance when one exists."""
        ratings = {"a": 1500, "b": 1530, "c": 1900, "d": 1950}
        selector, _, _ = make_selector(ratings, recent_window=0)

        for _ in range(200):
            first, second = await selector.select_pair(SESSION)
            assert abs(first.rating - second.rating) <= 50

    @pytest.mark.asyncio
    async def test_falls_back_when_band_is_empty(self):
        """Test an isolated first pick still gets an opponent from everyone else."""
        ratings = {"low": 1000, "high": 2200}
        selector, _, _ = make_selector(ratings)

        first, second = await selector.select_pair(SESSION)

        assert {first.id, second.id} == {"low", "high"}

    @pytest.mark.asyncio
    async def test_first_pick_favours_high_ratings(self):
        """Test the first slot goes to the top-rated season most of the time."""
        ratings = {"top": 2200, "bottom1": 1000, "bottom2": 1000}
        selector, _, _ = make_selector(ratings, recent_window=0)

        counts = Counter()
        for _ in range(500):
            first, _ = await selector.select_pair(SESSION)
            counts[first.id] += 1

        # weights 1.0 vs 0.01 + 0.01
        assert counts["top"] > 400

    @pytest.mark.asyncio
    async def test_equal_ratings_are_drawn_uniformly(self):
        """Test ties give every season the same chance of the first slot."""
        ratings = {sid: 1500 for sid in "abcd"}
        selector, _, _ = make_selector(ratings, recent_window=0, rng=random.Random(3))

        counts = Counter()
        for _ in range(4000):
            first, _ = await selector.select_pair(SESSION)
            counts[first.id] += 1

        for sid in "abcd":
            assert 800 < counts[sid] < 1200


class TestRedrawFallback:
    """Tests for the bounded redraw of the second pick."""

    @pytest.mark.asyncio
    async def test_duplicate_id_falls_back_to_lowest_other_id(self):
        """Test redraws that keep hitting the first id end on the lowest other id."""
        # Same id twice in the population: every draw of 0.0 lands on "a"
        population = [RatedEntity("a", 1500), RatedEntity("a", 1500), RatedEntity("b", 1500)]
        selector, _, history = make_selector(
            population, rng=ConstantRandom(0.0), recent_window=0, max_redraws=3
        )

        first, second = await selector.select_pair(SESSION)

        assert (first.id, second.id) == ("a", "b")
        assert history.records == [(SESSION, "a", "b")]
