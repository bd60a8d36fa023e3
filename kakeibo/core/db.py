"""DB engine, session factory and ORM models for kakeibo-sync."""

from collections.abc import Callable

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from kakeibo.core.utils import utcnow

Base = declarative_base()

SessionFactory = Callable[[], Session]


class Job(Base):
    """A unit of background work tracked through pending/running/completed/failed."""

    __tablename__ = "jobs"
    id = Column(String(36), primary_key=True)
    type = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False, index=True)
    target_account_id = Column(Integer, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class Account(Base):
    """A bank, card, securities or cash account with an optional encrypted login."""

    __tablename__ = "accounts"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String(16), nullable=False)
    balance = Column(Integer, nullable=False, default=0)
    encrypted_credentials = Column(Text, nullable=True)
    credentials_iv = Column(String, nullable=True)
    credentials_auth_tag = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def has_credentials(self) -> bool:
        """Whether a complete encrypted login is stored for this account."""
        return bool(self.encrypted_credentials and self.credentials_iv and self.credentials_auth_tag)


class Category(Base):
    """A spending or income category."""

    __tablename__ = "categories"
    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False, index=True)


class AutoRule(Base):
    """Maps a description keyword to a category."""

    __tablename__ = "auto_rules"
    id = Column(Integer, primary_key=True)
    keyword = Column(String, unique=True, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    category = relationship(Category, lazy="joined")


class Transaction(Base):
    """A ledger entry, either entered manually or ingested from a scrape."""

    __tablename__ = "transactions"
    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    description = Column(String, nullable=False, default="")
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    is_manual = Column(Boolean, nullable=False, default=True)
    memo = Column(Text, nullable=True)
    external_id = Column(String, unique=True, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


def get_engine(url: str | None = None) -> Engine:
    """Create a SQLAlchemy engine using the configured database URL."""
    from kakeibo.core.settings import get_settings

    url = url or get_settings().database_url
    # The worker and scheduler threads hold their own sessions on the same engine
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    """Create every table that does not exist yet."""
    Base.metadata.create_all(engine)


engine = get_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
