"""Pydantic models and enumerations for kakeibo-sync.

This module defines the value types that flow between the job queue, the scrapers, the
classifier and the API: job enums and request/response models, the normalized scraped
transaction, per-account scrape outcomes, and classification results.
"""

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class JobType(StrEnum):
    """Kinds of background job."""

    SCRAPE_ALL = "SCRAPE_ALL"
    SCRAPE_SPECIFIC = "SCRAPE_SPECIFIC"


class JobStatus(StrEnum):
    """Lifecycle states of a job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class AccountType(StrEnum):
    """Kinds of account tracked by the ledger."""

    BANK = "BANK"
    CARD = "CARD"
    SECURITIES = "SECURITIES"
    CASH = "CASH"


class ScrapeErrorType(StrEnum):
    """Why scraping a single account failed."""

    AUTH_FAILED = "AUTH_FAILED"
    SITE_CHANGED = "SITE_CHANGED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TWO_FACTOR_REQUIRED = "TWO_FACTOR_REQUIRED"
    NO_CREDENTIALS = "NO_CREDENTIALS"


class ClassificationSource(StrEnum):
    """Which stage of the classification cascade produced a category."""

    RULE = "RULE"
    AI = "AI"
    FALLBACK = "FALLBACK"


class JobCreate(BaseModel):
    """Request body for submitting a job."""

    type: JobType
    target_account_id: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_target(self) -> "JobCreate":
        """Require a target account for single-account jobs."""
        if self.type == JobType.SCRAPE_SPECIFIC and self.target_account_id is None:
            msg = "target_account_id is required for SCRAPE_SPECIFIC jobs"
            raise ValueError(msg)
        return self


class JobRead(BaseModel):
    """Pydantic model representing a job as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    type: JobType
    status: JobStatus
    target_account_id: int | None = None
    error_message: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime


class DecryptedCredentials(BaseModel):
    """Login details for one external site, after decryption."""

    username: str
    password: str
    additional_fields: dict[str, str] = Field(default_factory=dict)


class ScrapedTransaction(BaseModel):
    """A statement row as extracted by a scraper (positive amount = inflow)."""

    date: dt.date
    amount: int
    description: str
    external_id: str


class ScrapeResult(BaseModel):
    """Everything one scraper session returns."""

    transactions: list[ScrapedTransaction] = Field(default_factory=list)
    balance: int


class ScrapeSingleResult(BaseModel):
    """Outcome of ingesting one account's scrape."""

    account_id: int
    transactions_added: int
    transactions_skipped: int
    new_balance: int


class ScrapeAccountError(BaseModel):
    """A per-account failure collected during a full sync."""

    account_id: int
    error_type: ScrapeErrorType
    message: str


class ScrapeAllResult(BaseModel):
    """Partitioned outcome of scraping every eligible account."""

    results: list[ScrapeSingleResult] = Field(default_factory=list)
    errors: list[ScrapeAccountError] = Field(default_factory=list)


class ClassificationResult(BaseModel):
    """The category chosen for a transaction description."""

    category_id: int
    category_name: str
    source: ClassificationSource


class TransactionUpdate(BaseModel):
    """Request body for editing a transaction; omitted fields are kept."""

    amount: int | None = None
    category_id: int | None = Field(default=None, gt=0)
    memo: str | None = None


class TransactionRead(BaseModel):
    """A ledger transaction as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    date: dt.date
    amount: int
    description: str
    category_id: int
    account_id: int
    is_manual: bool
    memo: str | None = None
    external_id: str | None = None
