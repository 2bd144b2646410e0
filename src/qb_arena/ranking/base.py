"""Storage protocols consumed by the matchmaking and rating engine.

The engine never touches SQL directly. It reads and conditionally writes
through these two narrow contracts, so any backend that honours them (the
SQLModel repositories, or an in-test fake) can serve it.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class RatedEntity:
    """A season as seen by the selector.

    Attributes:
        id: Season identifier.
        rating: Current Elo score, or None when the rating row is missing.
        vote_count: Number of votes the season has taken part in.
    """

    id: str
    rating: float | None
    vote_count: int = 0


@dataclass(frozen=True)
class RatingSnapshot:
    """Rating state read at one point in time."""

    score: float
    vote_count: int


@dataclass(frozen=True)
class RatingWrite:
    """A conditional rating write.

    Applies only if the stored rating still equals ``expected``.

    Attributes:
        entity_id: Season identifier.
        expected: Snapshot the new score was computed from.
        new_score: Score to store.
        increment_votes: Whether to bump the vote count by one.
    """

    entity_id: str
    expected: RatingSnapshot
    new_score: float
    increment_votes: bool = True


@dataclass(frozen=True)
class VoteRecord:
    """Vote to persist in the same transaction as the rating writes."""

    session_id: str | None
    winner_id: str
    loser_id: str


@dataclass(frozen=True)
class ShownPair:
    """A pair previously shown to a session."""

    season_a_id: str
    season_b_id: str


@runtime_checkable
class EntityStore(Protocol):
    """Protocol for the durable season/rating store."""

    async def list_entities_with_ratings(self) -> list[RatedEntity]:
        """List every season with its current rating.

        Seasons without a rating row are returned with ``rating=None``.
        """
        ...

    async def get_rating(self, entity_id: str) -> RatingSnapshot | None:
        """Get the current rating, or None if the season has no rating row."""
        ...

    async def commit_ratings(
        self,
        writes: Sequence[RatingWrite],
        vote: VoteRecord | None = None,
    ) -> None:
        """Apply all writes and the optional vote atomically.

        Raises:
            ConcurrentUpdateConflictError: If any stored rating no longer
                matches its write's ``expected`` snapshot. Nothing is written.
        """
        ...


@runtime_checkable
class HistoryLog(Protocol):
    """Protocol for the per-session shown-pair log."""

    async def recent_pairs(self, session_id: str, limit: int) -> list[ShownPair]:
        """Get up to ``limit`` pairs shown to the session, most recent first."""
        ...

    async def record_pair(self, session_id: str, season_a_id: str, season_b_id: str) -> None:
        """Append a shown pair for the session."""
        ...
