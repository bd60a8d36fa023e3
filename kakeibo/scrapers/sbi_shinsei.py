"""SBI Shinsei Bank statement scraper."""

from typing import TYPE_CHECKING

from kakeibo.core.models import DecryptedCredentials
from kakeibo.scrapers.base import BankStatementScraper

if TYPE_CHECKING:
    from playwright.sync_api import Page


class SBIShinseiScraper(BankStatementScraper):
    """Scraper for SBI新生銀行 PowerDirect."""

    account_name = "SBI新生銀行"
    login_url = "https://bk.shinseibank.com/SFC/apps/services/www/SFC/desktopbrowser/default/login"
    statement_link = 'a:has-text("口座明細")'
    statement_rows = "table.statement tbody tr"

    def login(self, page: "Page", credentials: DecryptedCredentials) -> None:
        """Submit account number and password."""
        page.fill('input[name="accountNumber"]', credentials.username)
        page.fill('input[name="password"]', credentials.password)
        page.click('button[type="submit"]')
        page.wait_for_load_state("domcontentloaded")
        self.raise_on_login_error(page, ".login-error")

    def fetch_balance(self, page: "Page") -> int:
        """Read the account balance."""
        return self.read_balance(page, ".account-balance-value")
