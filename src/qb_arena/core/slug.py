"""Slug generation for stable season keys."""

from __future__ import annotations

import re


class SlugGenerator:
    """Generate URL-safe slugs from arbitrary inputs.

    Season slugs are built from player, year and team so that re-importing
    the same data lands on the same rows. Slugs name the player, so they are
    never used as the id shown in a blind matchup.
    """

    def __init__(self, max_length: int | None = 80) -> None:
        """Initialize slug generator.

        Args:
            max_length: Maximum length for generated slugs. Use None to disable truncation.
        """
        self.max_length = max_length

    def slugify(self, value: str) -> str:
        """Generate a URL-safe slug from free text."""
        return self.truncate(self._slugify(value))

    def season_slug(self, player_name: str, year: int, team: str) -> str:
        """Build the readable key for one player's season with one team.

        Example:
            ``season_slug("Patrick Mahomes", 2018, "KC") == "patrick-mahomes-2018-kc"``
        """
        return self.slugify(f"{player_name} {year} {team}")

    def truncate(self, value: str) -> str:
        """Truncate a value to the configured max length."""
        if self.max_length is None:
            return value
        return value[: self.max_length].rstrip("-")

    @staticmethod
    def _slugify(value: str) -> str:
        return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
