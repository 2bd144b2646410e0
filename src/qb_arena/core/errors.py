"""Custom exceptions for configuration problems and matchmaking/rating failures."""

from __future__ import annotations

from collections.abc import Sequence


class ConfigurationError(Exception):
    """Base exception for configuration errors with optional suggestions."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[Configuration Error] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class ValidationError(ConfigurationError):
    """Error when configuration validation fails."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(
            f"Invalid value for '{field}'",
            f"{reason}",
        )


class ArenaError(Exception):
    """Base exception for matchmaking and rating failures.

    Every subclass is fatal to the request that raised it. The request layer
    turns them into a generic "try again" response.
    """


class InsufficientPopulationError(ArenaError):
    """Fewer than two distinct rated seasons are available for a matchup."""

    def __init__(self, available: int) -> None:
        self.available = available
        super().__init__(f"Need at least 2 rated seasons to build a matchup, found {available}")


class InvalidPairError(ArenaError):
    """A vote named the same season twice, or left one side empty."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid matchup result: {reason}")


class RatingNotFoundError(ArenaError):
    """A season has no rating row. Never defaulted to a seed rating."""

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"No rating found for season '{entity_id}'")


class ConcurrentUpdateConflictError(ArenaError):
    """A conditional rating write lost a race with another vote."""

    def __init__(self, entity_ids: Sequence[str]) -> None:
        self.entity_ids = tuple(entity_ids)
        joined = ", ".join(self.entity_ids)
        super().__init__(f"Rating changed concurrently for: {joined}")
