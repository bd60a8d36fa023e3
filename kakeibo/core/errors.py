"""Exception types raised across kakeibo-sync."""

from kakeibo.core.models import ScrapeErrorType


class JobNotFoundError(LookupError):
    """Raised when a job id does not exist (error kind ``NOT_FOUND``)."""

    error_type = "NOT_FOUND"

    def __init__(self, job_id: str) -> None:
        """Initialize with the missing job id."""
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class InvalidJobTransitionError(RuntimeError):
    """Raised when a status change would leave the pending -> running -> terminal path."""

    def __init__(self, job_id: str, current: str, requested: str) -> None:
        """Initialize with the offending transition."""
        self.job_id = job_id
        self.current = current
        self.requested = requested
        super().__init__(f"Job {job_id} cannot move from '{current}' to '{requested}'")


class JobExecutionError(RuntimeError):
    """Raised by an executor when a job's work failed as a whole."""


class ScrapeError(Exception):
    """A failed scrape of one account, tagged with its error kind."""

    def __init__(self, error_type: ScrapeErrorType, message: str, account_id: int | None = None) -> None:
        """Initialize with the error kind, message and affected account."""
        self.error_type = ScrapeErrorType(error_type)
        self.message = message
        self.account_id = account_id
        super().__init__(message)


class ScrapeParseError(ValueError):
    """Raised when scraped text cannot be parsed into a date or amount."""


class AccountNotFoundError(LookupError):
    """Raised when an account id does not exist."""

    def __init__(self, account_id: int) -> None:
        """Initialize with the missing account id."""
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class CredentialsNotFoundError(LookupError):
    """Raised when an account has no stored credentials."""

    def __init__(self, account_id: int) -> None:
        """Initialize with the account lacking credentials."""
        self.account_id = account_id
        super().__init__(f"No credentials stored for account {account_id}")


class CategoryNotFoundError(LookupError):
    """Raised when a category id does not exist."""

    def __init__(self, category_id: int) -> None:
        """Initialize with the missing category id."""
        self.category_id = category_id
        super().__init__(f"Category not found: {category_id}")


class TransactionNotFoundError(LookupError):
    """Raised when a transaction id does not exist (error kind ``NOT_FOUND``)."""

    error_type = "NOT_FOUND"

    def __init__(self, transaction_id: int) -> None:
        """Initialize with the missing transaction id."""
        self.transaction_id = transaction_id
        super().__init__(f"Transaction not found: {transaction_id}")
