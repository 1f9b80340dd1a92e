"""
Ledger service: the append-only transaction log.

This service enforces the ledger rules:
1. Records are only ever appended, never updated or deleted
2. transaction_id is unique; a second append with the same id fails
3. Both referenced accounts must exist

The transfer engine is the only writer. The caller controls
the transaction boundary; append() flushes but never commits.
"""

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from wallet_ledger.errors import (
    AccountNotFoundError,
    DuplicateTransactionIdError,
)
from wallet_ledger.models.account import Account
from wallet_ledger.models.transaction import Transaction


class LedgerService:

    def __init__(self, db: Session):
        self.db = db

    def get_by_transaction_id(self, transaction_id: str) -> Transaction | None:
        return self.db.execute(
            select(Transaction).where(
                Transaction.transaction_id == transaction_id
            )
        ).scalar_one_or_none()

    def append(self, record: Transaction) -> Transaction:
        """
        Append a record to the ledger.

        Raises DuplicateTransactionIdError if the id is already
        stored, whether the pre-check sees it or the unique
        constraint rejects it at flush. After a constraint
        violation the session must be rolled back by the caller.
        """
        if self.get_by_transaction_id(record.transaction_id) is not None:
            raise DuplicateTransactionIdError(record.transaction_id)

        for account_id in {record.sender_id, record.receiver_id}:
            if self.db.get(Account, account_id) is None:
                raise AccountNotFoundError(f"Account {account_id} not found")

        self.db.add(record)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise DuplicateTransactionIdError(record.transaction_id) from e
        return record

    def list_for(self, account_id: int) -> list[Transaction]:
        """Return every record the account sent or received, newest first."""
        records = self.db.execute(
            select(Transaction)
            .options(
                selectinload(Transaction.sender),
                selectinload(Transaction.receiver),
            )
            .where(or_(
                Transaction.sender_id == account_id,
                Transaction.receiver_id == account_id,
            ))
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        ).scalars().all()
        return list(records)

    def count(self) -> int:
        return self.db.execute(
            select(func.count()).select_from(Transaction)
        ).scalar_one()
