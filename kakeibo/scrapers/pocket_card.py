"""Pocket Card usage-statement scraper."""

from typing import TYPE_CHECKING

from kakeibo.core.errors import ScrapeParseError
from kakeibo.core.models import DecryptedCredentials, ScrapedTransaction
from kakeibo.scrapers.base import BaseScraper, ParsedRow, logger

if TYPE_CHECKING:
    from playwright.sync_api import Page


class PocketCardScraper(BaseScraper):
    """Scraper for ポケットカード member pages.

    Card usage is always an outflow, and the balance is the unpaid amount as a negative number.
    """

    account_name = "ポケットカード"
    login_url = "https://www.pocketcard.co.jp/member/login"

    def login(self, page: "Page", credentials: DecryptedCredentials) -> None:
        """Submit member id and password."""
        page.fill('input[name="memberId"]', credentials.username)
        page.fill('input[name="password"]', credentials.password)
        page.click('button[type="submit"]')
        page.wait_for_load_state("domcontentloaded")
        self.raise_on_login_error(page, ".error-text")

    def fetch_transactions(self, page: "Page") -> list[ScrapedTransaction]:
        """Open the usage statement and parse its table."""
        page.click('a:has-text("ご利用明細")')
        page.wait_for_load_state("domcontentloaded")
        return self.parse_rows(self.read_table(page, "table.usage-detail tbody tr"))

    def parse_rows(self, rows: list[list[str]]) -> list[ScrapedTransaction]:
        """Parse date / description / amount cells into outflows."""
        parsed: list[ParsedRow] = []
        for position, cells in enumerate(rows):
            if len(cells) < 3 or not cells[0] or not cells[2]:
                continue
            try:
                date = self.parse_date(cells[0])
                amount = -abs(self.parse_amount(cells[2]))
            except ScrapeParseError:
                logger.warning(f"[{self.account_name}] Row {position} parse error: {cells}", exc_info=True)
                continue
            parsed.append((date, amount, cells[1]))
        return self.build_transactions(parsed)

    def fetch_balance(self, page: "Page") -> int:
        """Return the unpaid balance, or 0 when the page shows none."""
        locator = page.locator(".unpaid-balance")
        if locator.count() == 0:
            return 0
        text = locator.first.text_content()
        if not text or not text.strip():
            return 0
        return -abs(self.parse_amount(text))
