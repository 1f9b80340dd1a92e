"""
Query service: read-only views over the ledger for one account.

Nothing here writes. Because the transfer engine commits each
balance change together with its record, any committed state a
query sees is already consistent.
"""

from decimal import Decimal

from sqlalchemy.orm import Session

from wallet_ledger.models.enums import (
    Direction,
    TransactionKind,
    TransactionOutcome,
)
from wallet_ledger.models.transaction import Transaction
from wallet_ledger.schemas.transaction import HistoryItem, ReconciliationResponse
from wallet_ledger.services.account_service import AccountService
from wallet_ledger.services.ledger_service import LedgerService


class QueryService:

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountService(db)
        self.ledger = LedgerService(db)

    @staticmethod
    def _to_item(record: Transaction, account_id: int) -> HistoryItem:
        if record.kind == TransactionKind.DEPOSIT:
            direction = Direction.CREDIT
            counterparty = record.receiver
        elif record.sender_id == account_id:
            direction = Direction.DEBIT
            counterparty = record.receiver
        else:
            direction = Direction.CREDIT
            counterparty = record.sender

        return HistoryItem(
            transaction_id=record.transaction_id,
            counterparty_handle=counterparty.handle,
            counterparty_name=counterparty.display_name,
            amount=record.amount,
            direction=direction,
            kind=record.kind,
            status=record.outcome,
            flagged=record.flagged,
            description=record.description,
            timestamp=record.created_at,
        )

    def history(
        self,
        account_id: int,
        status: TransactionOutcome | None = None,
        direction: Direction | None = None,
        search: str | None = None,
        limit: int | None = None,
    ) -> list[HistoryItem]:
        """
        Return the account's transactions, newest first.

        status and direction filter exactly. search matches a
        case-insensitive substring of the counterparty handle,
        the counterparty name, or the transaction id. limit keeps
        only the most recent items.
        """
        self.accounts.get(account_id)

        items = [
            self._to_item(record, account_id)
            for record in self.ledger.list_for(account_id)
        ]

        if status is not None:
            items = [i for i in items if i.status == status]
        if direction is not None:
            items = [i for i in items if i.direction == direction]
        if search:
            needle = search.strip().lower()
            items = [
                i for i in items
                if needle in i.counterparty_handle.lower()
                or needle in i.counterparty_name.lower()
                or needle in i.transaction_id.lower()
            ]
        if limit is not None:
            if limit < 0:
                raise ValueError("limit must not be negative")
            items = items[:limit]
        return items

    def ledger_balance(self, account_id: int) -> Decimal:
        """
        Recompute a balance by folding the account's SUCCESS records.

        Deposits and incoming transfers add, outgoing transfers
        subtract. FAILED records never moved money and are skipped.
        """
        balance = Decimal("0")
        for record in self.ledger.list_for(account_id):
            if record.outcome != TransactionOutcome.SUCCESS:
                continue
            if record.kind == TransactionKind.DEPOSIT:
                balance += record.amount
            elif record.sender_id == account_id:
                balance -= record.amount
            else:
                balance += record.amount
        return balance

    def reconcile(self, account_id: int) -> ReconciliationResponse:
        """Compare the stored balance with the ledger-derived one."""
        account = self.accounts.get(account_id)
        self.db.refresh(account)
        ledger_balance = self.ledger_balance(account_id)
        return ReconciliationResponse(
            stored_balance=account.balance,
            ledger_balance=ledger_balance,
            is_consistent=account.balance == ledger_balance,
        )
