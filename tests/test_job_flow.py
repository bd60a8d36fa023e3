"""End-to-end: enqueue a job, let the worker run it through the scraper pipeline."""

from conftest import MASTER_KEY, FakeScraper, add_category, make_scraped
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from kakeibo.core.db import Account, Category, Transaction
from kakeibo.core.models import AccountType, DecryptedCredentials, JobStatus, JobType, ScrapeResult
from kakeibo.core.settings import Settings
from kakeibo.scrapers.registry import ScraperRegistry
from kakeibo.services.account_service import AccountService
from kakeibo.services.job_service import JobService
from kakeibo.workers.bootstrap import build_scraper_service
from kakeibo.workers.scheduler import JobScheduler
from kakeibo.workers.scrape_executor import ScrapeExecutor
from kakeibo.workers.worker import BackgroundWorker


def make_worker(session: Session, *scrapers: FakeScraper) -> BackgroundWorker:
    """Wire a worker exactly as the application does, with fake scrapers."""
    registry = ScraperRegistry()
    for scraper in scrapers:
        registry.register(scraper)
    settings = Settings(master_key=MASTER_KEY, groq_api_key="", fallback_category_name="未分類")
    executor = ScrapeExecutor(build_scraper_service(session, settings, registry))
    return BackgroundWorker(JobService(session), executor)


def test_nightly_sync_ingests_and_completes(
    session_factory: sessionmaker, session: Session, account_service: AccountService, credentials: DecryptedCredentials
) -> None:
    """A scheduled SCRAPE_ALL stores new rows, updates balances and completes; a rerun adds nothing."""
    add_category(session, "食費")
    account = account_service.create("楽天銀行", AccountType.BANK, credentials, initial_balance=1000)
    scraper = FakeScraper(
        "楽天銀行",
        ScrapeResult(transactions=[make_scraped("r-1"), make_scraped("r-2", -250, "コンビニ")], balance=750),
    )
    worker = make_worker(session, scraper)
    scheduler = JobScheduler(session_factory)

    first = scheduler.trigger_now()
    worker.process_next_job()
    second = scheduler.trigger_now()
    worker.process_next_job()

    jobs = JobService(session)
    if {jobs.get_by_id(first.id).status, jobs.get_by_id(second.id).status} != {JobStatus.COMPLETED}:
        msg = "Expected both sync jobs to complete"
        raise AssertionError(msg)
    stored = session.execute(select(Transaction)).scalars().all()
    if sorted(t.external_id for t in stored) != ["r-1", "r-2"]:
        msg = f"Expected two stored transactions, got {[t.external_id for t in stored]}"
        raise AssertionError(msg)
    fallback = session.execute(select(Category).where(Category.name == "未分類")).scalar_one()
    if any(t.category_id != fallback.id for t in stored):
        msg = "Expected unmatched rows in the fallback category"
        raise AssertionError(msg)
    if session.get(Account, account.id).balance != 750 or len(scraper.calls) != 2:
        msg = "Expected the balance update and two scrapes"
        raise AssertionError(msg)


def test_all_accounts_failing_marks_job_failed(
    session: Session, account_service: AccountService, credentials: DecryptedCredentials
) -> None:
    """When every account fails the job is failed with a descriptive message."""
    account_service.create("楽天銀行", AccountType.BANK, credentials)
    worker = make_worker(session, FakeScraper("楽天銀行", error=RuntimeError("Login failed")))
    job = JobService(session).create(JobType.SCRAPE_ALL)

    worker.process_next_job()

    failed = JobService(session).get_by_id(job.id)
    if failed.status != JobStatus.FAILED or "All accounts failed to scrape" not in failed.error_message:
        msg = f"Unexpected job outcome: {failed.status} {failed.error_message}"
        raise AssertionError(msg)
    if "Login failed" not in failed.error_message:
        msg = "Expected the account error in the job message"
        raise AssertionError(msg)


def test_specific_job_for_missing_account_fails(session: Session) -> None:
    """A SCRAPE_SPECIFIC job for an unknown account fails and the worker moves on."""
    worker = make_worker(session)
    jobs = JobService(session)
    missing = jobs.create(JobType.SCRAPE_SPECIFIC, 404)
    follow_up = jobs.create(JobType.SCRAPE_ALL)

    worker.process_next_job()
    worker.process_next_job()

    if jobs.get_by_id(missing.id).status != JobStatus.FAILED:
        msg = "Expected the missing-account job to fail"
        raise AssertionError(msg)
    if "Account not found" not in jobs.get_by_id(missing.id).error_message:
        msg = f"Unexpected message: {jobs.get_by_id(missing.id).error_message}"
        raise AssertionError(msg)
    if jobs.get_by_id(follow_up.id).status != JobStatus.COMPLETED:
        msg = "Expected the following job to complete"
        raise AssertionError(msg)
