"""Arena storage: one engine shared by the season, history and session repositories."""

from __future__ import annotations

import duckdb
import structlog
from duckdb_engine import ConnectionWrapper
from sqlalchemy import Engine, URL, make_url
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine

from qb_arena.core.config import ArenaConfig
from qb_arena.models import EloRating, MatchupHistory, QBSeason, UserSession, Vote

from .history_repository import HistoryRepository
from .season_repository import SeasonRepository
from .session_repository import SessionRepository

logger = structlog.get_logger()

TABLES = (QBSeason, EloRating, MatchupHistory, Vote, UserSession)


class ArenaStore:
    """Persistence layer for the arena.

    Handles:
    - Seasons and ratings (the entity store)
    - Shown matchups (the history log)
    - Anonymous sessions

    DuckDB databases are opened once per store and every repository call
    gets its own cursor on that handle. Other backends open a connection per
    call, so in-memory SQLite URLs are not supported.
    """

    def __init__(self, config: ArenaConfig) -> None:
        """Initialize arena store and create tables.

        Args:
            config: Arena configuration.
        """
        self.config = config
        self.database_url = config.get_database_url()
        self._root: duckdb.DuckDBPyConnection | None = None
        # Connections are opened per call on worker threads
        self._engine = self._create_engine(make_url(self.database_url))
        SQLModel.metadata.create_all(
            self._engine, tables=[model.__table__ for model in TABLES]  # type: ignore[attr-defined]
        )
        logger.info(
            "store_init",
            url=self._engine.url.render_as_string(hide_password=True),
        )

        self.seasons = SeasonRepository(self._engine)
        self.history = HistoryRepository(self._engine)
        self.sessions = SessionRepository(self._engine)

    def _create_engine(self, url: URL) -> Engine:
        if url.get_backend_name() != "duckdb":
            return create_engine(url, poolclass=NullPool)

        root = duckdb.connect(url.database or ":memory:")
        self._root = root
        return create_engine(
            url,
            creator=lambda: ConnectionWrapper(root.cursor()),
            poolclass=NullPool,
        )

    async def close(self) -> None:
        """Dispose of the database engine and the shared DuckDB handle."""
        self._engine.dispose()
        if self._root is not None:
            self._root.close()
            self._root = None
