"""Job executor that runs scraping jobs through the ScraperService."""

import time
from dataclasses import dataclass, field

from kakeibo.core.db import Job
from kakeibo.core.errors import JobExecutionError, ScrapeError
from kakeibo.core.models import JobType, ScrapeAccountError, ScrapeSingleResult
from kakeibo.core.utils import get_logger
from kakeibo.services.scraper_service import ScraperService

logger = get_logger("kakeibo.scrape_executor")


@dataclass
class ScrapeRunSummary:
    """Totals for one SCRAPE_ALL run."""

    job_id: str
    results: list[ScrapeSingleResult] = field(default_factory=list)
    errors: list[ScrapeAccountError] = field(default_factory=list)
    duration: float = 0.0

    @property
    def total_accounts(self) -> int:
        """Accounts that were attempted."""
        return len(self.results) + len(self.errors)

    @property
    def success_count(self) -> int:
        """Accounts scraped successfully."""
        return len(self.results)

    @property
    def failed_count(self) -> int:
        """Accounts that failed."""
        return len(self.errors)

    @property
    def transactions_added(self) -> int:
        """New transactions across all accounts."""
        return sum(r.transactions_added for r in self.results)

    @property
    def transactions_skipped(self) -> int:
        """Already-known transactions across all accounts."""
        return sum(r.transactions_skipped for r in self.results)

    @property
    def all_failed(self) -> bool:
        """At least one account was attempted and none succeeded."""
        return self.success_count == 0 and self.failed_count > 0


class ScrapeExecutor:
    """Executes SCRAPE_ALL and SCRAPE_SPECIFIC jobs for the BackgroundWorker."""

    def __init__(self, scraper_service: ScraperService) -> None:
        """Initialize the executor with a ScraperService."""
        self.scraper_service = scraper_service

    def execute(self, job: Job) -> None:
        """Run a job; raises when it should be marked failed."""
        logger.info(f"Starting job: {job.id} (type: {job.type})")
        if job.type == JobType.SCRAPE_ALL:
            summary = self.execute_all(job.id)
            if summary.all_failed:
                details = ", ".join(f"{e.account_id}: {e.message}" for e in summary.errors)
                msg = f"All accounts failed to scrape: {details}"
                raise JobExecutionError(msg)
        elif job.type == JobType.SCRAPE_SPECIFIC and job.target_account_id is not None:
            self.execute_specific(job.target_account_id)
        else:
            msg = f"Unknown job type: {job.type}"
            raise JobExecutionError(msg)

    def execute_all(self, job_id: str) -> ScrapeRunSummary:
        """Scrape every eligible account and log the totals."""
        start = time.monotonic()
        outcome = self.scraper_service.scrape_all_accounts()
        summary = ScrapeRunSummary(
            job_id=job_id,
            results=outcome.results,
            errors=outcome.errors,
            duration=time.monotonic() - start,
        )
        logger.info(
            f"Job {job_id} finished in {summary.duration:.2f}s: "
            f"{summary.success_count}/{summary.total_accounts} accounts, "
            f"{summary.transactions_added} added, {summary.transactions_skipped} skipped"
        )
        if summary.errors:
            logger.warning("Errors: " + ", ".join(f"{e.account_id}:{e.error_type}" for e in summary.errors))
        return summary

    def execute_specific(self, account_id: int) -> ScrapeSingleResult:
        """Scrape a single account; its failure fails the job."""
        try:
            result = self.scraper_service.scrape_account(account_id)
        except ScrapeError as exc:
            msg = f"Account {account_id} scrape failed: {exc.message}"
            raise JobExecutionError(msg) from exc
        logger.info(
            f"Account {account_id}: added {result.transactions_added}, skipped {result.transactions_skipped}"
        )
        return result
