"""
Wallet API endpoints: deposit, transfer, history.

The API layer is thin. Amount validation, locking and commits
all happen inside the TransferEngine; errors are turned into
HTTP responses by the handlers in api/exceptions.py.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from wallet_ledger.models.base import get_db
from wallet_ledger.models.enums import Direction, TransactionOutcome
from wallet_ledger.services.account_service import AccountService
from wallet_ledger.services.query_service import QueryService
from wallet_ledger.services.transfer_engine import TransferEngine
from wallet_ledger.schemas.transaction import (
    DepositRequest,
    TransferRequest,
    ReceiptResponse,
    HistoryItem,
    ReconciliationResponse,
)

router = APIRouter(prefix="/wallet", tags=["Wallet"])


def get_engine(db: Session = Depends(get_db)) -> TransferEngine:
    """Overridden in tests to inject a deterministic random source."""
    return TransferEngine(db)


@router.post("/{external_id}/deposit", response_model=ReceiptResponse)
def deposit(
    external_id: uuid.UUID,
    request: DepositRequest,
    engine: TransferEngine = Depends(get_engine),
):
    """Add money to a wallet."""
    account = engine.account_for(external_id)
    receipt = engine.deposit(account.id, request.amount)
    return ReceiptResponse(
        transaction_id=receipt.transaction_id,
        new_balance=receipt.balance,
        flagged=receipt.flagged,
    )


@router.post("/{external_id}/transfer", response_model=ReceiptResponse)
def transfer(
    external_id: uuid.UUID,
    request: TransferRequest,
    engine: TransferEngine = Depends(get_engine),
):
    """
    Send money to another wallet by payment handle.

    A simulated settlement failure answers 400 with the
    transaction id of the recorded FAILED attempt.
    """
    account = engine.account_for(external_id)
    receipt = engine.transfer(account.id, request.receiver_handle, request.amount)
    return ReceiptResponse(
        transaction_id=receipt.transaction_id,
        new_balance=receipt.balance,
        flagged=receipt.flagged,
    )


@router.get("/{external_id}/history", response_model=list[HistoryItem])
def history(
    external_id: uuid.UUID,
    status: TransactionOutcome | None = None,
    direction: Direction | None = None,
    search: str | None = None,
    limit: int | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
):
    """Transactions sent or received by the wallet, newest first."""
    account = AccountService(db).get_by_external_id(external_id)
    return QueryService(db).history(
        account.id,
        status=status,
        direction=direction,
        search=search,
        limit=limit,
    )


@router.get("/{external_id}/reconcile", response_model=ReconciliationResponse)
def reconcile(
    external_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    """Compare the stored balance with the balance folded from the ledger."""
    account = AccountService(db).get_by_external_id(external_id)
    return QueryService(db).reconcile(account.id)
