import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class MatchupHistory(SQLModel, table=True):
    """A pair of seasons shown to a session. Append-only."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    session_id: str = Field(index=True)
    season_a_id: str
    season_b_id: str
    shown_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)


class Vote(SQLModel, table=True):
    """A session's pick between two seasons."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    session_id: str | None = Field(default=None, index=True)
    winner_season_id: str = Field(index=True)
    loser_season_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class UserSession(SQLModel, table=True):
    """Anonymous browser identity."""

    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
