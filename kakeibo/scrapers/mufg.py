"""MUFG Bank statement scraper."""

from typing import TYPE_CHECKING

from kakeibo.core.models import DecryptedCredentials
from kakeibo.scrapers.base import BankStatementScraper

if TYPE_CHECKING:
    from playwright.sync_api import Page


class MUFGScraper(BankStatementScraper):
    """Scraper for 三菱UFJ銀行 online banking; the username is the contract number."""

    account_name = "三菱UFJ銀行"
    login_url = "https://entry11.bk.mufg.jp/ibg/dfw/APLIN/loginib/login"
    statement_link = 'a:has-text("入出金明細")'
    statement_rows = "table.transaction-list tbody tr"

    def login(self, page: "Page", credentials: DecryptedCredentials) -> None:
        page.fill('input[name="contractNumber"]', credentials.username)
        page.fill('input[name="password"]', credentials.password)
        page.click('button:has-text("ログイン")')
        page.wait_for_load_state("domcontentloaded")
        self.raise_on_login_error(page, ".error-message")

    def fetch_balance(self, page: "Page") -> int:
        return self.read_balance(page, ".account-balance")
