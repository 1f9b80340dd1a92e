"""
Pydantic schemas for wallet operations.

Amounts arrive as Decimal without range checks: the transfer
engine owns amount validation so the HTTP layer and direct
callers get the same InvalidAmountError.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from wallet_ledger.models.enums import (
    Direction,
    TransactionKind,
    TransactionOutcome,
)


class DepositRequest(BaseModel):
    amount: Decimal


class TransferRequest(BaseModel):
    receiver_handle: str = Field(min_length=1, max_length=120)
    amount: Decimal


class ReceiptResponse(BaseModel):
    """Result of a deposit or a settled transfer."""
    transaction_id: str
    new_balance: Decimal
    flagged: bool


class HistoryItem(BaseModel):
    """One ledger record as seen from a single account."""
    transaction_id: str
    counterparty_handle: str
    counterparty_name: str
    amount: Decimal
    direction: Direction
    kind: TransactionKind
    status: TransactionOutcome
    flagged: bool
    description: str
    timestamp: datetime


class ReconciliationResponse(BaseModel):
    stored_balance: Decimal
    ledger_balance: Decimal
    is_consistent: bool
