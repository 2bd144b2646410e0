"""Database persistence for shown matchups."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlmodel import Session, col, select

from qb_arena.models import MatchupHistory
from qb_arena.ranking.base import ShownPair

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class HistoryRepository(AsyncRepository):
    """Append and query the per-session matchup history."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def recent_pairs(self, session_id: str, limit: int) -> list[ShownPair]:
        """Get the most recent pairs shown to a session, newest first."""
        if limit <= 0:
            return []

        def _get(session: Session) -> list[ShownPair]:
            statement = (
                select(col(MatchupHistory.season_a_id), col(MatchupHistory.season_b_id))
                .where(col(MatchupHistory.session_id) == session_id)
                .order_by(col(MatchupHistory.shown_at).desc())
                .limit(limit)
            )
            return [
                ShownPair(season_a_id=a, season_b_id=b) for a, b in session.exec(statement).all()
            ]

        return await self._run_session(_get)

    async def record_pair(
        self,
        session_id: str,
        season_a_id: str,
        season_b_id: str,
        shown_at: datetime | None = None,
    ) -> None:
        """Append a shown pair for a session."""
        record = MatchupHistory(
            session_id=session_id,
            season_a_id=season_a_id,
            season_b_id=season_b_id,
        )
        if shown_at is not None:
            record.shown_at = shown_at

        def _save(session: Session) -> None:
            session.add(record)
            session.commit()

        await self._run_session(_save)
