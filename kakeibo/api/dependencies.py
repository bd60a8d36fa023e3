"""FastAPI dependencies for DI (settings, DB sessions, job store, scheduler, scrapers).

This module provides dependency injection helpers so routes stay thin and tests can swap the
session factory for an in-memory database.
"""

from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from kakeibo.core.db import SessionFactory, SessionLocal
from kakeibo.core.settings import Settings, get_settings
from kakeibo.scrapers import ScraperRegistry, build_default_registry
from kakeibo.services.auto_rule_service import AutoRuleService
from kakeibo.services.job_service import JobService
from kakeibo.services.learning_service import TransactionWithLearning
from kakeibo.services.transaction_service import TransactionService
from kakeibo.workers.scheduler import JobScheduler


def get_session_factory() -> SessionFactory:
    """Provide the session factory used for request and trigger sessions."""
    return SessionLocal


def get_db(session_factory: SessionFactory = Depends(get_session_factory)) -> Generator[Session, None, None]:
    """Provide a request-scoped SQLAlchemy session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def get_job_service(db: Session = Depends(get_db)) -> JobService:
    """Provide a JobService bound to the request session."""
    return JobService(db)


def get_learning_service(db: Session = Depends(get_db)) -> TransactionWithLearning:
    """Provide transaction edits that learn auto rules."""
    return TransactionWithLearning(TransactionService(db), AutoRuleService(db))


def get_scheduler(
    session_factory: SessionFactory = Depends(get_session_factory),
    settings: Settings = Depends(get_settings),
) -> JobScheduler:
    """Provide a scheduler for manual sync triggers."""
    return JobScheduler(session_factory, settings.scrape_cron)


def get_registry(settings: Settings = Depends(get_settings)) -> ScraperRegistry:
    """Provide the registry of built-in scrapers."""
    return build_default_registry(settings)
