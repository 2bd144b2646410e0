"""Core configuration and utilities for QB Arena."""

from qb_arena.core.config import (
    DEFAULT_DATABASE_URL,
    ArenaConfig,
    IngestConfig,
    MatchmakingConfig,
    RatingConfig,
    load_config,
)
from qb_arena.core.errors import (
    ArenaError,
    ConcurrentUpdateConflictError,
    ConfigurationError,
    InsufficientPopulationError,
    InvalidPairError,
    RatingNotFoundError,
    ValidationError,
)
from qb_arena.core.slug import SlugGenerator

__all__ = [
    "DEFAULT_DATABASE_URL",
    "ArenaConfig",
    "IngestConfig",
    "MatchmakingConfig",
    "RatingConfig",
    "SlugGenerator",
    "load_config",
    "ArenaError",
    "ConcurrentUpdateConflictError",
    "ConfigurationError",
    "InsufficientPopulationError",
    "InvalidPairError",
    "RatingNotFoundError",
    "ValidationError",
]
