"""Scraper registry keyed by account display name.

Each institution scraper registers under the exact name of the account it serves. Two
accounts at the same institution with different display names need separate registrations.
"""

from kakeibo.scrapers.base import Scraper


class ScraperRegistry:
    """Registry of scraper instances."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._scrapers: dict[str, Scraper] = {}

    def register(self, scraper: Scraper) -> None:
        """Register a scraper under the account name it supports, replacing any previous one."""
        self._scrapers[scraper.get_supported_account_name()] = scraper

    def get_scraper(self, account_name: str) -> Scraper | None:
        """Retrieve the scraper for an account name, or None."""
        return self._scrapers.get(account_name)

    def get_supported_account_names(self) -> list[str]:
        """List all registered account names."""
        return list(self._scrapers.keys())
