"""Configuration schemas and loading for QB Arena."""

from __future__ import annotations

import os
from pathlib import Path

import pydantic
import yaml
from pydantic import BaseModel, Field, model_validator

from qb_arena.core.errors import ValidationError

DEFAULT_DATABASE_URL = "duckdb:///qb_arena.duckdb"
DATABASE_URL_ENV = "QB_ARENA_DATABASE_URL"


class MatchmakingConfig(BaseModel):
    """Selector and pairing policy settings.

    Attributes:
        recent_window: How many of a session's most recent shown pairs to avoid.
        tolerance: Maximum rating gap for a "fair" second pick.
        weight_floor: Lower clamp applied to the normalized rating before
            exponentiation. Keeps low-rated seasons drawable.
        weight_exponent: Power applied to the clamped ratio. Must be > 1 so
            weights grow convexly with rating.
        rating_lower_bound: Rating that normalizes to 0.0.
        rating_upper_bound: Rating that normalizes to 1.0.
        max_redraws: Attempts to draw a distinct second season before falling
            back to the lowest remaining id.
    """

    recent_window: int = Field(default=20, ge=0)
    tolerance: float = Field(default=50.0, ge=0)
    weight_floor: float = Field(default=0.1, gt=0, le=1)
    weight_exponent: float = Field(default=2.0, gt=1)
    rating_lower_bound: float = 1000.0
    rating_upper_bound: float = 2200.0
    max_redraws: int = Field(default=10, ge=0)

    @model_validator(mode="after")
    def validate_reference_bounds(self) -> MatchmakingConfig:
        if self.rating_upper_bound <= self.rating_lower_bound:
            msg = "rating_upper_bound must be greater than rating_lower_bound"
            raise ValueError(msg)
        return self


class RatingConfig(BaseModel):
    """Elo update settings.

    Attributes:
        k_factor: Volatility of a single vote.
        max_attempts: Read-modify-write attempts before a write conflict is
            surfaced to the caller.
    """

    k_factor: float = Field(default=32.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)


class IngestConfig(BaseModel):
    """Qualification thresholds for imported season records."""

    min_games: int = Field(default=8, ge=0)
    min_attempts: int = Field(default=200, ge=0)


class ArenaConfig(BaseModel):
    """Complete arena configuration."""

    database_url: str | None = None
    seed: int | None = None
    matchmaking: MatchmakingConfig = Field(default_factory=MatchmakingConfig)
    rating: RatingConfig = Field(default_factory=RatingConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)

    def get_database_url(self) -> str:
        """Get database URL from config, environment, or the DuckDB default."""
        return self.database_url or os.environ.get(DATABASE_URL_ENV) or DEFAULT_DATABASE_URL


def load_config(path: str | Path) -> ArenaConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to YAML configuration file.

    Returns:
        Validated ArenaConfig instance. An empty file yields the defaults.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValidationError: If config is invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open() as f:
        data = yaml.safe_load(f) or {}

    try:
        return ArenaConfig.model_validate(data)
    except pydantic.ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "config"
        raise ValidationError(field, error["msg"]) from e
