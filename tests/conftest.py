"""Shared fixtures: in-memory database, services and test doubles."""

import datetime as dt
from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kakeibo.core.db import Category, init_db
from kakeibo.core.models import DecryptedCredentials, ScrapedTransaction, ScrapeResult
from kakeibo.services.account_service import AccountService
from kakeibo.services.encryption_service import EncryptionService

MASTER_KEY = "0123456789abcdef" * 4


@pytest.fixture
def engine() -> Engine:
    """Provide an in-memory SQLite engine shared across threads."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    return eng


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    """Provide a session factory bound to the test engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Provide a session that is closed after the test."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def encryption_service() -> EncryptionService:
    """Provide an EncryptionService with a fixed key."""
    return EncryptionService(MASTER_KEY)


@pytest.fixture
def account_service(session: Session, encryption_service: EncryptionService) -> AccountService:
    """Provide an AccountService on the test session."""
    return AccountService(session, encryption_service)


@pytest.fixture
def credentials() -> DecryptedCredentials:
    """Provide sample login details."""
    return DecryptedCredentials(username="testuser", password="testpass")


def add_category(session: Session, name: str) -> Category:
    """Insert a category and return it."""
    category = Category(name=name)
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


def make_scraped(external_id: str, amount: int = -1000, description: str = "スーパーマーケット") -> ScrapedTransaction:
    """Build a scraped transaction for 2026-01-10."""
    return ScrapedTransaction(
        date=dt.date(2026, 1, 10),
        amount=amount,
        description=description,
        external_id=external_id,
    )


class FakeScraper:
    """Scraper double returning a fixed result or raising a fixed error."""

    def __init__(self, account_name: str, result: ScrapeResult | None = None, error: Exception | None = None) -> None:
        """Initialize with the account name and the canned outcome."""
        self.account_name = account_name
        self.result = result or ScrapeResult(transactions=[], balance=0)
        self.error = error
        self.calls: list[DecryptedCredentials] = []

    def get_supported_account_name(self) -> str:
        """Return the account name."""
        return self.account_name

    def scrape(self, credentials: DecryptedCredentials) -> ScrapeResult:
        """Record the call and return or raise the canned outcome."""
        self.calls.append(credentials)
        if self.error is not None:
            raise self.error
        return self.result


class FakeCategoryClient:
    """AI client double with a canned answer or error."""

    def __init__(self, answer: str | None = None, error: Exception | None = None) -> None:
        """Initialize with the canned outcome."""
        self.answer = answer
        self.error = error
        self.calls: list[tuple[str, list[str]]] = []

    def classify(self, description: str, categories: list[str]) -> str | None:
        """Record the call and return or raise the canned outcome."""
        self.calls.append((description, categories))
        if self.error is not None:
            raise self.error
        return self.answer
