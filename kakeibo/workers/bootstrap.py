"""Wiring of the background worker and scheduler for the running application."""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from kakeibo.classifier import ClassifierService, build_category_client
from kakeibo.core.db import SessionFactory
from kakeibo.core.settings import Settings
from kakeibo.core.utils import get_logger
from kakeibo.scrapers import ScraperRegistry, build_default_registry
from kakeibo.services.account_service import AccountService
from kakeibo.services.encryption_service import EncryptionService
from kakeibo.services.job_service import JobService
from kakeibo.services.scraper_service import ScraperService
from kakeibo.services.transaction_service import TransactionService
from kakeibo.workers.scheduler import JobScheduler
from kakeibo.workers.scrape_executor import ScrapeExecutor
from kakeibo.workers.worker import BackgroundWorker

logger = get_logger("kakeibo.bootstrap")


@dataclass
class BackgroundServices:
    """The worker, the scheduler and the session the worker thread owns."""

    worker: BackgroundWorker
    scheduler: JobScheduler
    session: Session

    def start(self) -> None:
        """Start the worker and the scheduler."""
        self.worker.start()
        self.scheduler.start()

    def stop(self) -> None:
        """Stop both; the worker session is closed only once the worker thread has exited."""
        self.scheduler.stop()
        if not self.worker.stop():
            logger.warning("Leaving the worker session open for the job still in flight")
            return
        self.session.close()


def build_encryption_service(settings: Settings) -> EncryptionService | None:
    """Create the credential cipher, or None when no master key is configured."""
    if not settings.master_key:
        return None
    return EncryptionService(settings.master_key)


def build_scraper_service(
    session: Session, settings: Settings, registry: ScraperRegistry | None = None
) -> ScraperService:
    """Assemble a ScraperService whose collaborators all share ``session``."""
    return ScraperService(
        account_service=AccountService(session, build_encryption_service(settings)),
        transaction_service=TransactionService(session),
        classifier_service=ClassifierService(
            session, build_category_client(settings), settings.fallback_category_name
        ),
        registry=registry or build_default_registry(settings),
    )


def build_background_services(settings: Settings, session_factory: SessionFactory) -> BackgroundServices:
    """Create the worker (with its own session) and the cron scheduler."""
    session = session_factory()
    worker = BackgroundWorker(
        JobService(session),
        ScrapeExecutor(build_scraper_service(session, settings)),
        settings.worker_poll_interval_ms,
    )
    scheduler = JobScheduler(session_factory, settings.scrape_cron)
    return BackgroundServices(worker=worker, scheduler=scheduler, session=session)
