"""Rakuten Securities cash-account scraper."""

from typing import TYPE_CHECKING

from kakeibo.core.errors import ScrapeParseError
from kakeibo.core.models import DecryptedCredentials, ScrapedTransaction
from kakeibo.scrapers.base import BaseScraper, ParsedRow, logger

if TYPE_CHECKING:
    from playwright.sync_api import Page


class RakutenSecuritiesScraper(BaseScraper):
    """Scraper for 楽天証券 deposit history.

    The history table has a single signed amount column, and the balance is the cash deposit
    (預り金), not the portfolio value.
    """

    account_name = "楽天証券"
    login_url = "https://www.rakuten-sec.co.jp/web/login.html"

    def login(self, page: "Page", credentials: DecryptedCredentials) -> None:
        """Submit login id and password."""
        page.fill('input[name="loginid"]', credentials.username)
        page.fill('input[name="passwd"]', credentials.password)
        page.click('button:has-text("ログイン")')
        page.wait_for_load_state("domcontentloaded")
        self.raise_on_login_error(page, ".login-error")

    def fetch_transactions(self, page: "Page") -> list[ScrapedTransaction]:
        """Open the deposit/transfer history and parse its table."""
        page.click('a:has-text("入出金・振替")')
        page.wait_for_load_state("domcontentloaded")
        return self.parse_rows(self.read_table(page, "table.history tbody tr"))

    def parse_rows(self, rows: list[list[str]]) -> list[ScrapedTransaction]:
        """Parse date / description / signed amount cells."""
        parsed: list[ParsedRow] = []
        for position, cells in enumerate(rows):
            if len(cells) < 3 or not cells[0] or cells[2] in ("", "-"):
                continue
            try:
                date = self.parse_date(cells[0])
                amount = self.parse_amount(cells[2])
            except ScrapeParseError:
                logger.warning(f"[{self.account_name}] Row {position} parse error: {cells}", exc_info=True)
                continue
            parsed.append((date, amount, cells[1]))
        return self.build_transactions(parsed)

    def fetch_balance(self, page: "Page") -> int:
        """Read the cash deposit balance."""
        return self.read_balance(page, ".deposit-balance")
