"""Rakuten Bank statement scraper."""

from typing import TYPE_CHECKING

from kakeibo.core.models import DecryptedCredentials
from kakeibo.scrapers.base import BankStatementScraper

if TYPE_CHECKING:
    from playwright.sync_api import Page


class RakutenBankScraper(BankStatementScraper):
    """Scraper for 楽天銀行 online banking."""

    account_name = "楽天銀行"
    login_url = "https://fes.rakuten-bank.co.jp/MS/main/RbS?CurrentPageID=START&&COMMAND=LOGIN"
    balance_url = "https://fes.rakuten-bank.co.jp/MS/main/RbS?CurrentPageID=BALANCE"
    statement_link = 'a:has-text("入出金明細")'
    statement_rows = "table.statement tbody tr"

    def login(self, page: "Page", credentials: DecryptedCredentials) -> None:
        """Submit user id and password."""
        page.fill('input[name="LOGIN:USER_ID"]', credentials.username)
        page.fill('input[name="LOGIN:LOGIN_PASSWORD"]', credentials.password)
        page.click('input[type="submit"][value="ログイン"]')
        page.wait_for_load_state("domcontentloaded")
        self.raise_on_login_error(page, ".error-message")

    def fetch_balance(self, page: "Page") -> int:
        """Read the total balance from the balance page."""
        page.goto(self.balance_url)
        page.wait_for_load_state("domcontentloaded")
        return self.read_balance(page, ".total-balance .amount")
