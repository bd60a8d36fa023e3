"""Ledger transaction persistence used by scrape ingestion."""

import datetime as dt

from sqlalchemy import select
from sqlalchemy.orm import Session

from kakeibo.core.db import Category, Transaction
from kakeibo.core.errors import CategoryNotFoundError, TransactionNotFoundError


class TransactionService:
    """Service for transaction lookups and inserts."""

    def __init__(self, session: Session) -> None:
        """Initialize the TransactionService with a SQLAlchemy session."""
        self.session = session

    def find_by_external_id(self, external_id: str) -> Transaction | None:
        """Return the transaction carrying an external id, if one was already ingested."""
        stmt = select(Transaction).where(Transaction.external_id == external_id)
        return self.session.execute(stmt).scalars().first()

    def get_by_id(self, transaction_id: int) -> Transaction:
        """Return a transaction by id, raising TransactionNotFoundError when it does not exist."""
        txn = self.session.get(Transaction, transaction_id)
        if txn is None:
            raise TransactionNotFoundError(transaction_id)
        return txn

    def create(
        self,
        *,
        date: dt.date,
        amount: int,
        description: str,
        category_id: int,
        account_id: int,
        is_manual: bool = True,
        memo: str | None = None,
        external_id: str | None = None,
    ) -> Transaction:
        """Insert and commit a transaction."""
        txn = Transaction(
            date=date,
            amount=amount,
            description=description,
            category_id=category_id,
            account_id=account_id,
            is_manual=is_manual,
            memo=memo,
            external_id=external_id,
        )
        self.session.add(txn)
        self.session.commit()
        self.session.refresh(txn)
        return txn

    def list_by_account(self, account_id: int) -> list[Transaction]:
        """Return an account's transactions, newest first."""
        stmt = (
            select(Transaction)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.date.desc(), Transaction.id.desc())
        )
        return list(self.session.execute(stmt).scalars())

    def update(
        self,
        transaction_id: int,
        *,
        amount: int | None = None,
        category_id: int | None = None,
        memo: str | None = None,
    ) -> Transaction:
        """Change amount, category or memo; fields left as None are kept."""
        txn = self.get_by_id(transaction_id)
        if category_id is not None and self.session.get(Category, category_id) is None:
            raise CategoryNotFoundError(category_id)
        if amount is not None:
            txn.amount = amount
        if category_id is not None:
            txn.category_id = category_id
        if memo is not None:
            txn.memo = memo
        self.session.commit()
        self.session.refresh(txn)
        return txn
