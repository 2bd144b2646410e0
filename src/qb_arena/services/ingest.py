"""Import season statistics from a local CSV file."""

from __future__ import annotations

import asyncio
import csv
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, Field

from qb_arena.core.config import IngestConfig
from qb_arena.core.slug import SlugGenerator
from qb_arena.models import QBSeason
from qb_arena.ranking.seeding import calculate_initial_elo, calculate_passer_rating

if TYPE_CHECKING:
    from qb_arena.services.storage import SeasonRepository

logger = structlog.get_logger()


class SeasonStats(BaseModel):
    """One row of the season CSV."""

    player_name: str = Field(min_length=1)
    year: int
    team: str = Field(min_length=1)
    position: str = "QB"
    games_played: int = Field(ge=0)
    pass_attempts: int = Field(ge=0)
    completions: int = Field(ge=0)
    passing_yards: int
    touchdowns: int = Field(ge=0)
    interceptions: int = Field(ge=0)
    rush_attempts: int = 0
    rush_yards: int = 0
    rush_touchdowns: int = 0
    sacks: int = 0
    fumbles: int = 0
    wins: int | None = None
    losses: int | None = None
    headshot_url: str | None = None

    @property
    def passer_rating(self) -> float:
        return calculate_passer_rating(
            self.completions,
            self.pass_attempts,
            self.passing_yards,
            self.touchdowns,
            self.interceptions,
        )


@dataclass(frozen=True)
class ImportSummary:
    """Counts from one import run."""

    read: int
    qualifying: int
    inserted: int


def load_seasons_csv(path: str | Path) -> list[SeasonStats]:
    """Read and validate season rows from a CSV file with a header line.

    Empty cells fall back to the field default.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        pydantic.ValidationError: If a row is malformed.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        msg = f"Season file not found: {csv_path}"
        raise FileNotFoundError(msg)

    with csv_path.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))

    return [
        SeasonStats.model_validate({k: v for k, v in row.items() if v not in ("", None)})
        for row in rows
    ]


def filter_qualifying(
    seasons: list[SeasonStats],
    min_games: int = 8,
    min_attempts: int = 200,
) -> list[SeasonStats]:
    """Keep quarterback seasons with enough games and pass attempts."""
    return [
        s
        for s in seasons
        if s.position.upper() == "QB"
        and s.games_played >= min_games
        and s.pass_attempts >= min_attempts
    ]


class SeasonImporter:
    """Turn season statistics into stored seasons with seeded ratings."""

    def __init__(
        self,
        seasons: SeasonRepository,
        config: IngestConfig,
        slugs: SlugGenerator | None = None,
    ) -> None:
        self.seasons = seasons
        self.config = config
        self.slugs = slugs or SlugGenerator()

    def build_season(self, stats: SeasonStats) -> QBSeason:
        return QBSeason(
            slug=self.slugs.season_slug(stats.player_name, stats.year, stats.team),
            player_name=stats.player_name,
            year=stats.year,
            team=stats.team,
            games_played=stats.games_played,
            pass_attempts=stats.pass_attempts,
            completions=stats.completions,
            passing_yards=stats.passing_yards,
            touchdowns=stats.touchdowns,
            interceptions=stats.interceptions,
            passer_rating=stats.passer_rating,
            rush_attempts=stats.rush_attempts,
            rush_yards=stats.rush_yards,
            rush_touchdowns=stats.rush_touchdowns,
            sacks=stats.sacks,
            fumbles=stats.fumbles,
            wins=stats.wins,
            losses=stats.losses,
            headshot_url=stats.headshot_url,
        )

    async def import_seasons(self, seasons: list[SeasonStats]) -> ImportSummary:
        """Store qualifying seasons that are not stored yet."""
        qualifying = filter_qualifying(seasons, self.config.min_games, self.config.min_attempts)
        seeded = [(self.build_season(s), float(calculate_initial_elo(s))) for s in qualifying]
        inserted = await self.seasons.add_seasons(seeded)

        summary = ImportSummary(read=len(seasons), qualifying=len(qualifying), inserted=inserted)
        logger.info(
            "seasons_imported",
            read=summary.read,
            qualifying=summary.qualifying,
            inserted=summary.inserted,
        )
        return summary

    async def import_csv(self, path: str | Path) -> ImportSummary:
        """Load a CSV file and import its qualifying seasons."""
        seasons = await asyncio.to_thread(load_seasons_csv, path)
        return await self.import_seasons(seasons)
