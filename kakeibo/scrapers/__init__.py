"""Scrapers package: base strategy, registry, and institution-specific scrapers."""

from kakeibo.core.settings import Settings

from .base import BankStatementScraper, BaseScraper, Scraper  # noqa: F401
from .mufg import MUFGScraper
from .pocket_card import PocketCardScraper
from .rakuten_bank import RakutenBankScraper
from .rakuten_securities import RakutenSecuritiesScraper
from .registry import ScraperRegistry
from .sbi_shinsei import SBIShinseiScraper
from .smbc import SMBCScraper

BUILTIN_SCRAPERS: tuple[type[BaseScraper], ...] = (
    RakutenBankScraper,
    SMBCScraper,
    MUFGScraper,
    SBIShinseiScraper,
    RakutenSecuritiesScraper,
    PocketCardScraper,
)


def build_default_registry(settings: Settings) -> ScraperRegistry:
    """Create a registry holding every built-in scraper."""
    registry = ScraperRegistry()
    for scraper_cls in BUILTIN_SCRAPERS:
        registry.register(scraper_cls(headless=settings.scraper_headless, timeout_ms=settings.scraper_timeout_ms))
    return registry
