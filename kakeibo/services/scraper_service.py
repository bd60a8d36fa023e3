"""Scrape orchestration: drive accounts through their scrapers and ingest the results.

For each account the service decrypts credentials, looks up the scraper registered under the
account's name, runs it, inserts every transaction whose external id has not been seen before
(classifying it on the way), and overwrites the account balance with the scraped one.
"""

from kakeibo.classifier.service import ClassifierService
from kakeibo.core.errors import ScrapeError
from kakeibo.core.models import ScrapeAccountError, ScrapeAllResult, ScrapeErrorType, ScrapeSingleResult
from kakeibo.core.utils import get_logger
from kakeibo.scrapers.registry import ScraperRegistry
from kakeibo.services.account_service import AccountService
from kakeibo.services.transaction_service import TransactionService

logger = get_logger("kakeibo.scrape")


class ScraperService:
    """Runs scrapers for one or all accounts and persists what they return."""

    def __init__(
        self,
        account_service: AccountService,
        transaction_service: TransactionService,
        classifier_service: ClassifierService,
        registry: ScraperRegistry,
    ) -> None:
        """Initialize the ScraperService with its collaborators."""
        self.account_service = account_service
        self.transaction_service = transaction_service
        self.classifier_service = classifier_service
        self.registry = registry

    def scrape_account(self, account_id: int) -> ScrapeSingleResult:
        """Scrape and ingest one account; failures raise ScrapeError."""
        account = self.account_service.get_by_id(account_id)
        if account is None:
            raise ScrapeError(ScrapeErrorType.NETWORK_ERROR, "Account not found", account_id)
        if not account.has_credentials:
            raise ScrapeError(ScrapeErrorType.NO_CREDENTIALS, "No credentials configured", account_id)
        scraper = self.registry.get_scraper(account.name)
        if scraper is None:
            raise ScrapeError(ScrapeErrorType.SITE_CHANGED, f"No scraper found for: {account.name}", account_id)

        logger.info(f"Scraping account {account_id} ({account.name})")
        try:
            credentials = self.account_service.get_credentials(account_id)
            result = scraper.scrape(credentials)

            added = skipped = 0
            for scraped in result.transactions:
                if self.transaction_service.find_by_external_id(scraped.external_id) is not None:
                    skipped += 1
                    continue
                classification = self.classifier_service.classify(scraped.description)
                self.transaction_service.create(
                    date=scraped.date,
                    amount=scraped.amount,
                    description=scraped.description,
                    category_id=classification.category_id,
                    account_id=account_id,
                    is_manual=False,
                    external_id=scraped.external_id,
                )
                added += 1

            self.account_service.update_balance(account_id, result.balance)
        except ScrapeError as exc:
            self.account_service.session.rollback()
            raise ScrapeError(exc.error_type, exc.message, account_id) from exc
        except Exception as exc:
            self.account_service.session.rollback()
            raise ScrapeError(ScrapeErrorType.AUTH_FAILED, str(exc) or "Unknown error", account_id) from exc

        logger.info(f"Account {account_id}: added {added}, skipped {skipped}, balance {result.balance}")
        return ScrapeSingleResult(
            account_id=account_id,
            transactions_added=added,
            transactions_skipped=skipped,
            new_balance=result.balance,
        )

    def scrape_all_accounts(self) -> ScrapeAllResult:
        """Scrape every account with stored credentials, collecting per-account failures."""
        outcome = ScrapeAllResult()
        for account in self.account_service.get_all():
            if not account.has_credentials:
                continue
            try:
                outcome.results.append(self.scrape_account(account.id))
            except ScrapeError as exc:
                logger.warning(f"Account {account.id} failed ({exc.error_type}): {exc.message}")
                outcome.errors.append(
                    ScrapeAccountError(account_id=account.id, error_type=exc.error_type, message=exc.message)
                )
        return outcome
