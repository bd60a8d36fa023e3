"""Tests for scrape orchestration, dedup and ingestion."""

import pytest
from conftest import FakeCategoryClient, FakeScraper, add_category, make_scraped
from sqlalchemy import select
from sqlalchemy.orm import Session

from kakeibo.classifier.service import ClassifierService
from kakeibo.core.db import Account, Transaction
from kakeibo.core.errors import ScrapeError
from kakeibo.core.models import AccountType, DecryptedCredentials, ScrapeErrorType, ScrapeResult
from kakeibo.scrapers.registry import ScraperRegistry
from kakeibo.services.account_service import AccountService
from kakeibo.services.scraper_service import ScraperService
from kakeibo.services.transaction_service import TransactionService


def build_service(session: Session, account_service: AccountService, *scrapers: FakeScraper) -> ScraperService:
    """Wire a ScraperService around fake scrapers."""
    registry = ScraperRegistry()
    for scraper in scrapers:
        registry.register(scraper)
    return ScraperService(
        account_service=account_service,
        transaction_service=TransactionService(session),
        classifier_service=ClassifierService(session, FakeCategoryClient(answer=None)),
        registry=registry,
    )


def two_row_result(balance: int = 149000) -> ScrapeResult:
    """A scrape returning one outflow and one inflow."""
    return ScrapeResult(
        transactions=[make_scraped("ext-001"), make_scraped("ext-002", 50000, "給与振込")],
        balance=balance,
    )


def test_scrape_account_ingests_and_updates_balance(
    session: Session, account_service: AccountService, credentials: DecryptedCredentials
) -> None:
    """New rows are classified and stored as non-manual; the balance is overwritten."""
    food = add_category(session, "食費")
    account = account_service.create("楽天銀行", AccountType.BANK, credentials, initial_balance=100000)
    scraper = FakeScraper("楽天銀行", two_row_result())
    service = build_service(session, account_service, scraper)
    service.classifier_service.auto_rule_service.create_or_update("スーパー", food.id)

    result = service.scrape_account(account.id)

    if (result.transactions_added, result.transactions_skipped, result.new_balance) != (2, 0, 149000):
        msg = f"Unexpected result: {result}"
        raise AssertionError(msg)
    if scraper.calls != [credentials]:
        msg = f"Expected decrypted credentials to be passed, got {scraper.calls}"
        raise AssertionError(msg)
    stored = {t.external_id: t for t in session.execute(select(Transaction)).scalars()}
    if set(stored) != {"ext-001", "ext-002"} or any(t.is_manual for t in stored.values()):
        msg = f"Unexpected stored transactions: {stored}"
        raise AssertionError(msg)
    if stored["ext-001"].category_id != food.id or stored["ext-001"].account_id != account.id:
        msg = "Expected the rule category and account on the ingested row"
        raise AssertionError(msg)
    if session.get(Account, account.id).balance != 149000:
        msg = "Expected the balance to be updated"
        raise AssertionError(msg)
    if len(service.transaction_service.list_by_account(account.id)) != 2:
        msg = "Expected both rows listed under the account"
        raise AssertionError(msg)


def test_rescrape_is_idempotent(
    session: Session, account_service: AccountService, credentials: DecryptedCredentials
) -> None:
    """A second identical scrape adds nothing and skips every row."""
    account = account_service.create("楽天銀行", AccountType.BANK, credentials)
    service = build_service(session, account_service, FakeScraper("楽天銀行", two_row_result()))

    service.scrape_account(account.id)
    second = service.scrape_account(account.id)

    if second.transactions_added != 0 or second.transactions_skipped != 2:
        msg = f"Expected 0 added / 2 skipped, got {second}"
        raise AssertionError(msg)
    count = len(session.execute(select(Transaction)).scalars().all())
    if count != 2:
        msg = f"Expected 2 stored transactions, got {count}"
        raise AssertionError(msg)


def test_balance_overwritten_even_without_new_rows(
    session: Session, account_service: AccountService, credentials: DecryptedCredentials
) -> None:
    """The scraped balance is written when nothing new was found."""
    account = account_service.create("楽天銀行", AccountType.BANK, credentials, initial_balance=500)
    service = build_service(session, account_service, FakeScraper("楽天銀行", ScrapeResult(balance=0)))
    result = service.scrape_account(account.id)
    if result.new_balance != 0 or session.get(Account, account.id).balance != 0:
        msg = "Expected the balance to be overwritten with 0"
        raise AssertionError(msg)


def test_missing_account_is_network_error(session: Session, account_service: AccountService) -> None:
    """An unknown account id maps to NETWORK_ERROR."""
    with pytest.raises(ScrapeError) as excinfo:
        build_service(session, account_service).scrape_account(999)
    if excinfo.value.error_type != ScrapeErrorType.NETWORK_ERROR or excinfo.value.account_id != 999:
        msg = f"Unexpected error: {excinfo.value.error_type}"
        raise AssertionError(msg)


def test_account_without_credentials(session: Session, account_service: AccountService) -> None:
    """An account without stored credentials maps to NO_CREDENTIALS."""
    account = account_service.create("現金", AccountType.CASH)
    with pytest.raises(ScrapeError) as excinfo:
        build_service(session, account_service).scrape_account(account.id)
    if excinfo.value.error_type != ScrapeErrorType.NO_CREDENTIALS:
        msg = f"Expected NO_CREDENTIALS, got {excinfo.value.error_type}"
        raise AssertionError(msg)


def test_account_without_scraper_is_site_changed(
    session: Session, account_service: AccountService, credentials: DecryptedCredentials
) -> None:
    """A credentialed account with no registered scraper maps to SITE_CHANGED."""
    account = account_service.create("未知の銀行", AccountType.BANK, credentials)
    with pytest.raises(ScrapeError) as excinfo:
        build_service(session, account_service).scrape_account(account.id)
    if excinfo.value.error_type != ScrapeErrorType.SITE_CHANGED or "未知の銀行" not in excinfo.value.message:
        msg = f"Unexpected error: {excinfo.value.error_type} {excinfo.value.message}"
        raise AssertionError(msg)


def test_scraper_exception_is_auth_failed(
    session: Session, account_service: AccountService, credentials: DecryptedCredentials
) -> None:
    """Any exception from scrape() maps to AUTH_FAILED with its message."""
    account = account_service.create("楽天銀行", AccountType.BANK, credentials, initial_balance=700)
    scraper = FakeScraper("楽天銀行", error=TimeoutError("Login failed: wrong password"))
    with pytest.raises(ScrapeError) as excinfo:
        build_service(session, account_service, scraper).scrape_account(account.id)
    if excinfo.value.error_type != ScrapeErrorType.AUTH_FAILED:
        msg = f"Expected AUTH_FAILED, got {excinfo.value.error_type}"
        raise AssertionError(msg)
    if excinfo.value.message != "Login failed: wrong password":
        msg = f"Expected the original message, got {excinfo.value.message}"
        raise AssertionError(msg)
    if session.get(Account, account.id).balance != 700:
        msg = "Expected the balance to be untouched"
        raise AssertionError(msg)


def test_typed_scraper_error_keeps_its_kind(
    session: Session, account_service: AccountService, credentials: DecryptedCredentials
) -> None:
    """A ScrapeError raised by a scraper keeps its error kind and gains the account id."""
    account = account_service.create("楽天銀行", AccountType.BANK, credentials)
    scraper = FakeScraper("楽天銀行", error=ScrapeError(ScrapeErrorType.TWO_FACTOR_REQUIRED, "OTP prompt"))
    with pytest.raises(ScrapeError) as excinfo:
        build_service(session, account_service, scraper).scrape_account(account.id)
    if excinfo.value.error_type != ScrapeErrorType.TWO_FACTOR_REQUIRED or excinfo.value.account_id != account.id:
        msg = f"Unexpected error: {excinfo.value.error_type} / {excinfo.value.account_id}"
        raise AssertionError(msg)


def test_scrape_all_partitions_and_skips_uncredentialed(
    session: Session, account_service: AccountService, credentials: DecryptedCredentials
) -> None:
    """Credential-less accounts are in neither list; one failure does not stop the rest."""
    cash = account_service.create("現金", AccountType.CASH)
    broken = account_service.create("三井住友銀行", AccountType.BANK, credentials)
    good = account_service.create("楽天銀行", AccountType.BANK, credentials)
    service = build_service(
        session,
        account_service,
        FakeScraper("三井住友銀行", error=RuntimeError("Site down")),
        FakeScraper("楽天銀行", two_row_result()),
    )

    outcome = service.scrape_all_accounts()

    if [r.account_id for r in outcome.results] != [good.id]:
        msg = f"Expected only the good account in results, got {outcome.results}"
        raise AssertionError(msg)
    if [(e.account_id, e.error_type) for e in outcome.errors] != [(broken.id, ScrapeErrorType.AUTH_FAILED)]:
        msg = f"Expected only the broken account in errors, got {outcome.errors}"
        raise AssertionError(msg)
    attempted = {r.account_id for r in outcome.results} | {e.account_id for e in outcome.errors}
    if cash.id in attempted:
        msg = "Expected the cash account to be skipped"
        raise AssertionError(msg)


def test_scrape_all_with_no_eligible_accounts(session: Session, account_service: AccountService) -> None:
    """No credentialed accounts means empty results and errors."""
    account_service.create("現金", AccountType.CASH)
    outcome = build_service(session, account_service).scrape_all_accounts()
    if outcome.results or outcome.errors:
        msg = f"Expected an empty outcome, got {outcome}"
        raise AssertionError(msg)
