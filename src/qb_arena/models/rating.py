from datetime import UTC, datetime

from sqlalchemy import Double
from sqlmodel import Field, SQLModel


class EloRating(SQLModel, table=True):
    """Current Elo score and vote count for a season."""

    season_id: str = Field(primary_key=True)
    # Compared for exact equality by conditional updates
    elo_score: float = Field(sa_type=Double)
    vote_count: int = 0
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
