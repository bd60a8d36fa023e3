"""SMBC (Sumitomo Mitsui Banking Corporation) statement scraper."""

from typing import TYPE_CHECKING

from kakeibo.core.models import DecryptedCredentials
from kakeibo.scrapers.base import BankStatementScraper

if TYPE_CHECKING:
    from playwright.sync_api import Page


class SMBCScraper(BankStatementScraper):
    """Scraper for 三井住友銀行 online banking.

    Branch code and account number are read from the credentials' additional fields.
    """

    account_name = "三井住友銀行"
    login_url = "https://direct.smbc.co.jp/aib/aibgsjsw5001.jsp"
    statement_link = 'a:has-text("入出金明細照会")'
    statement_rows = "table.statement-table tbody tr"

    def login(self, page: "Page", credentials: DecryptedCredentials) -> None:
        """Submit branch, account number and password."""
        branch_code = credentials.additional_fields.get("branchCode")
        account_number = credentials.additional_fields.get("accountNumber")
        if branch_code:
            page.fill('input[name="branchNo"]', branch_code)
        if account_number:
            page.fill('input[name="accountNo"]', account_number)
        page.fill('input[name="password"]', credentials.password)
        page.click('input[type="submit"]')
        page.wait_for_load_state("domcontentloaded")
        self.raise_on_login_error(page, ".error")

    def fetch_balance(self, page: "Page") -> int:
        """Read the balance shown next to the statement."""
        return self.read_balance(page, ".balance-amount")
