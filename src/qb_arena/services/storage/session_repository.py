"""Anonymous session lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session, col, select

from qb_arena.models import UserSession

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


class SessionRepository(AsyncRepository):
    """Resolve session ids, creating new sessions for unknown ones."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def get_or_create(self, session_id: str | None = None) -> str:
        """Return ``session_id`` if it exists, otherwise a newly created session id."""

        def _resolve(session: Session) -> tuple[str, bool]:
            if session_id:
                statement = select(col(UserSession.session_id)).where(
                    col(UserSession.session_id) == session_id
                )
                if session.exec(statement).first() is not None:
                    return session_id, False

            created = UserSession()
            new_id = created.session_id
            session.add(created)
            session.commit()
            return new_id, True

        resolved, created = await self._run_session(_resolve)
        if created:
            logger.info("session_created", session=resolved, requested=session_id)
        return resolved
