import uuid

from sqlmodel import Field, SQLModel


class QBSeason(SQLModel, table=True):
    """One quarterback's regular season with one team. Immutable once imported.

    ``id`` is opaque so it can be shown before a vote; ``slug`` is the
    readable ``<player>-<year>-<team>`` key used to skip re-imports.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    slug: str = Field(index=True, unique=True)
    player_name: str
    year: int = Field(index=True)
    team: str = Field(index=True)
    games_played: int
    pass_attempts: int
    completions: int
    passing_yards: int
    touchdowns: int
    interceptions: int
    passer_rating: float
    rush_attempts: int = 0
    rush_yards: int = 0
    rush_touchdowns: int = 0
    sacks: int = 0
    fumbles: int = 0
    wins: int | None = None
    losses: int | None = None
    headshot_url: str | None = None
