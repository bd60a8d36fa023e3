"""Base scraper abstraction for institution-specific statement scrapers.

Every concrete scraper logs into one financial site with Playwright, reads its statement
table and current balance, and hands back normalized ``ScrapedTransaction`` rows. The base
class owns the browser session and the parsing helpers shared by all institutions.
"""

import datetime as dt
import re
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

from kakeibo.core.errors import ScrapeParseError
from kakeibo.core.models import DecryptedCredentials, ScrapedTransaction, ScrapeResult
from kakeibo.core.utils import get_logger

if TYPE_CHECKING:
    from playwright.sync_api import Page

logger = get_logger("kakeibo.scrapers")

EXTERNAL_ID_DESCRIPTION_LENGTH = 10
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)

_FULL_DATE = re.compile(r"(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})")
_JP_DATE = re.compile(r"(\d{4})年(\d{1,2})月(\d{1,2})日")
_SHORT_DATE = re.compile(r"(\d{1,2})[/\-](\d{1,2})")
_AMOUNT_NOISE = re.compile(r"[,\s¥￥$円]")
_AMOUNT = re.compile(r"[+-]?[0-9]+", re.ASCII)

ParsedRow = tuple[dt.date, int, str]


class Scraper(Protocol):
    """Capability set every registered scraper provides."""

    def get_supported_account_name(self) -> str:
        """Return the account display name this scraper serves."""
        ...

    def scrape(self, credentials: DecryptedCredentials) -> ScrapeResult:
        """Log in, then return the statement rows and current balance."""
        ...


class BaseScraper(ABC):
    """Abstract Playwright-driven scraper with shared parsing helpers."""

    account_name: str = ""
    login_url: str = ""

    def __init__(self, headless: bool = True, timeout_ms: int = 30000) -> None:
        """Initialize browser options."""
        self.headless = headless
        self.timeout_ms = timeout_ms

    def get_supported_account_name(self) -> str:
        """Return the account display name this scraper serves."""
        return self.account_name

    @abstractmethod
    def login(self, page: "Page", credentials: DecryptedCredentials) -> None:
        """Authenticate on the login page; raise on rejection."""

    @abstractmethod
    def fetch_transactions(self, page: "Page") -> list[ScrapedTransaction]:
        """Navigate to the statement and return its rows."""

    @abstractmethod
    def fetch_balance(self, page: "Page") -> int:
        """Return the current balance in the smallest currency unit."""

    def scrape(self, credentials: DecryptedCredentials) -> ScrapeResult:
        """Run one headless browser session against the institution's site."""
        from playwright.sync_api import sync_playwright

        with sync_playwright() as p:
            browser = p.chromium.launch(headless=self.headless)
            try:
                context = browser.new_context(user_agent=USER_AGENT, viewport={"width": 1920, "height": 1080})
                page = context.new_page()
                page.set_default_timeout(self.timeout_ms)
                logger.info(f"[{self.account_name}] Opening login page")
                page.goto(self.login_url, wait_until="domcontentloaded")
                self.login(page, credentials)
                transactions = self.fetch_transactions(page)
                balance = self.fetch_balance(page)
                logger.info(f"[{self.account_name}] Scraped {len(transactions)} rows, balance {balance}")
                return ScrapeResult(transactions=transactions, balance=balance)
            finally:
                browser.close()

    def parse_date(self, text: str) -> dt.date:
        """Parse YYYY/MM/DD, YYYY-MM-DD, YYYY年MM月DD日 or MM/DD (current year)."""
        match = _FULL_DATE.search(text) or _JP_DATE.search(text)
        if match:
            year, month, day = (int(part) for part in match.groups())
        else:
            match = _SHORT_DATE.search(text)
            if not match:
                msg = f"Unable to parse date: {text}"
                raise ScrapeParseError(msg)
            year = dt.date.today().year
            month, day = (int(part) for part in match.groups())
        try:
            return dt.date(year, month, day)
        except ValueError as exc:
            msg = f"Unable to parse date: {text}"
            raise ScrapeParseError(msg) from exc

    def parse_amount(self, text: str) -> int:
        """Parse a currency amount such as '¥5,000', '-3,500' or '2,500円'."""
        cleaned = _AMOUNT_NOISE.sub("", text)
        if not _AMOUNT.fullmatch(cleaned):
            msg = f"Unable to parse amount: {text}"
            raise ScrapeParseError(msg)
        return int(cleaned)

    def generate_external_id(self, date: dt.date, amount: int, description: str, index: int = 0) -> str:
        """Build the stable dedup key for a statement row.

        ``index`` is the row's position among rows sharing the same date, amount and
        description key, so identical same-day purchases stay distinct.
        """
        desc_key = "".join(description.split())[:EXTERNAL_ID_DESCRIPTION_LENGTH]
        return f"{self.account_name}-{date.isoformat()}-{amount}-{desc_key}-{index}"

    def build_transactions(self, rows: Iterable[ParsedRow]) -> list[ScrapedTransaction]:
        """Turn parsed rows into transactions with duplicate-disambiguated external ids."""
        seen: Counter[tuple[dt.date, int, str]] = Counter()
        transactions = []
        for date, amount, description in rows:
            key = (date, amount, "".join(description.split())[:EXTERNAL_ID_DESCRIPTION_LENGTH])
            index = seen[key]
            seen[key] += 1
            transactions.append(
                ScrapedTransaction(
                    date=date,
                    amount=amount,
                    description=description,
                    external_id=self.generate_external_id(date, amount, description, index),
                )
            )
        return transactions

    def read_table(self, page: "Page", row_selector: str) -> list[list[str]]:
        """Return the stripped cell texts of every row matched by ``row_selector``."""
        return [
            [cell.strip() for cell in row.locator("td").all_inner_texts()]
            for row in page.locator(row_selector).all()
        ]

    def read_balance(self, page: "Page", selector: str) -> int:
        """Parse the amount shown in the first element matching ``selector``."""
        text = page.locator(selector).first.text_content()
        if not text:
            msg = "Failed to read balance"
            raise RuntimeError(msg)
        return self.parse_amount(text)

    def raise_on_login_error(self, page: "Page", error_selector: str) -> None:
        """Raise when the login page shows an error banner."""
        banner = page.locator(error_selector)
        if banner.count() > 0:
            message = (banner.first.text_content() or "").strip()
            msg = f"Login failed: {message}"
            raise RuntimeError(msg)


class BankStatementScraper(BaseScraper):
    """Scraper for bank statements laid out as date / description / withdrawal / deposit."""

    statement_link: str = ""
    statement_rows: str = ""

    def fetch_transactions(self, page: "Page") -> list[ScrapedTransaction]:
        """Open the statement page and parse its table."""
        page.click(self.statement_link)
        page.wait_for_load_state("domcontentloaded")
        return self.parse_rows(self.read_table(page, self.statement_rows))

    def parse_rows(self, rows: list[list[str]]) -> list[ScrapedTransaction]:
        """Parse statement cells; withdrawals become negative, unparsable rows are skipped."""
        parsed: list[ParsedRow] = []
        for position, cells in enumerate(rows):
            if len(cells) < 4 or not cells[0]:
                continue
            try:
                date = self.parse_date(cells[0])
                withdrawal, deposit = cells[2], cells[3]
                amount = 0
                if withdrawal and withdrawal != "-":
                    amount = -self.parse_amount(withdrawal)
                elif deposit and deposit != "-":
                    amount = self.parse_amount(deposit)
            except ScrapeParseError:
                logger.warning(f"[{self.account_name}] Row {position} parse error: {cells}", exc_info=True)
                continue
            if amount == 0:
                continue
            parsed.append((date, amount, cells[1]))
        return self.build_transactions(parsed)
